from engagement.db.base import Base
from engagement.db.session import get_db, engine, SessionLocal
from engagement.db.tables import ALL_TABLE_NAMES

__all__ = ["get_db", "engine", "SessionLocal", "Base", "ALL_TABLE_NAMES"]
