"""
Database session and engine.
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from engagement.config import settings
from engagement.db.base import Base  # noqa: F401

_engine_kwargs: dict = {"pool_pre_ping": True}
if not settings.database_url.startswith("sqlite"):
    _engine_kwargs.update(pool_size=8, max_overflow=10, pool_recycle=300, pool_timeout=30)

engine = create_engine(settings.database_url, **_engine_kwargs)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
