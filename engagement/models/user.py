"""App account as seen by the notification engine.

fcm_tokens: JSON list of device registration tokens, written by the device-registration path.
  Legacy rows may hold NULL or a malformed value; read it through read_push_tokens().
notified_*: one idempotency flag per inactivity threshold. Set true by the sweeps,
  cleared only when the user logs in again (POST /devices/register).
"""
from sqlalchemy import JSON, Boolean, Column, DateTime, String, false
from sqlalchemy.sql import func

from engagement.db.base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(String(128), primary_key=True)
    fcm_tokens = Column(JSON, nullable=True)
    last_login_at = Column(DateTime(timezone=True), nullable=True, index=True)
    notified_5_days = Column(Boolean, nullable=True, default=False, server_default=false())
    notified_20_days = Column(Boolean, nullable=True, default=False, server_default=false())
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
