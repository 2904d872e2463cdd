"""Published story. Only id/title/created_at/announced_at matter here (new-story sweep)."""
from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.sql import func

from engagement.db.base import Base


class Story(Base):
    __tablename__ = "stories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(512), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
    # Set by the new-story sweep when the story was announced; NULL = not yet announced
    announced_at = Column(DateTime(timezone=True), nullable=True)
