"""Shared test fixtures."""

import os

# Settings are read at import time: point them at test values before importing the app.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["PUSH_PROVIDER"] = "log"
os.environ["AUTH_JWT_SECRET"] = "test-secret-that-is-long-enough-for-hs256"
os.environ["FLAG_MODE"] = "confirmed"

import threading
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from engagement.core.errors import PushProviderError
from engagement.db.base import Base
from engagement.models.story import Story
from engagement.models.user import User
from engagement.services.push.types import MulticastResult, Notification, SendResponse

# Models must be imported so Base.metadata.create_all() sees all tables.
_ALL_MODELS = [Story, User]

NOW = datetime(2026, 10, 18, 10, 0, tzinfo=timezone.utc)


class FakePushProvider:
    """Records every multicast; raises for chunks containing a token in fail_on."""

    provider_id = "fake"

    def __init__(self, fail_on: set[str] | None = None, reject: set[str] | None = None):
        self.fail_on = fail_on or set()
        self.reject = reject or set()
        self.calls: list[tuple[list[str], Notification]] = []
        self._lock = threading.Lock()

    def send_multicast(self, tokens: list[str], notification: Notification) -> MulticastResult:
        with self._lock:
            self.calls.append((list(tokens), notification))
        if self.fail_on & set(tokens):
            raise PushProviderError("provider unavailable")
        return MulticastResult(
            responses=[
                SendResponse(token=t, success=t not in self.reject, error="UNREGISTERED" if t in self.reject else None)
                for t in tokens
            ]
        )

    @property
    def sent_tokens(self) -> list[str]:
        return [t for tokens, _ in self.calls for t in tokens]


@pytest.fixture
def db_engine():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(bind=db_engine, autoflush=False)


@pytest.fixture
def db_session(session_factory):
    """In-memory SQLite session. Enough for the query/flag logic (no Postgres-only types used)."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def provider():
    return FakePushProvider()


@pytest.fixture
def make_user(db_session):
    """Create a user; `inactive_days` sets last_login_at relative to NOW."""

    def _make(user_id, tokens=None, inactive_days=None, **flags):
        last_login = NOW - timedelta(days=inactive_days) if inactive_days is not None else None
        user = User(id=user_id, fcm_tokens=tokens, last_login_at=last_login, **flags)
        db_session.add(user)
        db_session.commit()
        return user

    return _make


@pytest.fixture
def make_story(db_session):
    def _make(title, minutes_ago):
        story = Story(title=title, created_at=NOW - timedelta(minutes=minutes_ago))
        db_session.add(story)
        db_session.commit()
        return story

    return _make


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def make_provider():
    return FakePushProvider
