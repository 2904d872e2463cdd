"""Shared FastAPI dependencies (overridable in tests via app.dependency_overrides)."""
from collections.abc import Callable

from sqlalchemy.orm import Session

from engagement.db.session import SessionLocal
from engagement.services.push.base import PushProvider
from engagement.services.push.registry import get_push_provider


def get_provider() -> PushProvider:
    return get_push_provider()


def get_session_factory() -> Callable[[], Session]:
    """Factory, not a session: broadcast validates the caller before opening one."""
    return SessionLocal
