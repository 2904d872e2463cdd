"""
Candidate selection per trigger. Every function takes `now` so time windows are testable.
"""
from collections.abc import Sequence
from datetime import datetime, timedelta

from sqlalchemy import or_
from sqlalchemy.orm import Session

from engagement.core.constants import NEW_STORIES_WINDOW_MINUTES, InactivityRule
from engagement.models.story import Story
from engagement.models.user import User


def inactivity_cutoff(rule: InactivityRule, now: datetime) -> datetime:
    return now - timedelta(days=rule.days)


def select_inactive_users(db: Session, rule: InactivityRule, now: datetime) -> list[User]:
    """Users last seen at or before now - rule.days whose rule.flag is not true (false or NULL)."""
    flag = getattr(User, rule.flag)
    return (
        db.query(User)
        .filter(
            User.last_login_at.isnot(None),
            User.last_login_at <= inactivity_cutoff(rule, now),
            or_(flag.is_(None), flag == False),  # noqa: E712
        )
        .order_by(User.id)
        .all()
    )


def select_new_stories(
    db: Session,
    now: datetime,
    window_minutes: int = NEW_STORIES_WINDOW_MINUTES,
) -> list[Story]:
    """Stories created within the last window_minutes and not yet announced, newest first."""
    cutoff = now - timedelta(minutes=window_minutes)
    return (
        db.query(Story)
        .filter(Story.created_at >= cutoff, Story.announced_at.is_(None))
        .order_by(Story.created_at.desc(), Story.id.desc())
        .all()
    )


def newest_story(stories: Sequence[Story]) -> Story | None:
    """The single most recently created story; one notification per sweep, never one per item."""
    if not stories:
        return None
    return max(stories, key=lambda s: (s.created_at, s.id))
