"""
Sweeps: eligibility -> token resolution -> chunked dispatch -> flag commit.

Inactivity sweeps flag the users they reached so the next run skips them. The new-story
sweep goes to everyone and stamps the stories it announced; manual broadcasts track nothing.
"""
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.orm import Session

from engagement.config import settings
from engagement.core.constants import (
    MANUAL_BROADCAST_MAX_TOKENS,
    NEW_STORIES_WINDOW_MINUTES,
    NEW_STORY_BODY,
    NEW_STORY_FALLBACK_TITLE,
    NEW_STORY_TITLE,
    InactivityRule,
)
from engagement.core.errors import InvalidArgument, Unauthenticated
from engagement.db.session import SessionLocal
from engagement.services.notifications.batching import cap_recipients
from engagement.services.notifications.dispatch import DispatchReport, dispatch_notification
from engagement.services.notifications.eligibility import (
    inactivity_cutoff,
    newest_story,
    select_inactive_users,
    select_new_stories,
)
from engagement.services.notifications.tokens import iter_all_users, resolve_tokens
from engagement.services.notifications.tracker import mark_notified, users_to_flag
from engagement.services.push.base import PushProvider
from engagement.services.push.registry import get_push_provider
from engagement.services.push.types import Notification

logger = logging.getLogger(__name__)


@dataclass
class SweepOutcome:
    trigger: str
    candidates: int = 0
    tokens: int = 0
    chunks: int = 0
    failed_chunks: int = 0
    sent: int = 0
    failed: int = 0
    flagged: int = 0

    def record(self, report: DispatchReport) -> None:
        self.chunks = report.chunks
        self.failed_chunks = report.failed_chunks
        self.sent = report.success_count
        self.failed = report.failure_count


def run_inactivity_sweep(
    db: Session,
    rule: InactivityRule,
    provider: PushProvider,
    now: datetime,
    flag_mode: str | None = None,
    max_workers: int | None = None,
) -> SweepOutcome:
    """
    Remind users inactive for rule.days who have not been reminded for this threshold.
    Query errors propagate (nothing is committed); chunk failures do not.
    """
    outcome = SweepOutcome(trigger=rule.name)
    candidates = select_inactive_users(db, rule, now)
    outcome.candidates = len(candidates)
    if not candidates:
        logger.debug("Inactivity sweep %s: no candidates", rule.name)
        return outcome

    resolved = resolve_tokens(candidates)
    outcome.tokens = len(resolved)
    if not resolved.tokens:
        logger.info("Inactivity sweep %s: %s candidates but no push tokens", rule.name, len(candidates))
        return outcome

    report = dispatch_notification(
        resolved.tokens,
        Notification(title=rule.title, body=rule.body),
        provider,
        max_workers=max_workers or settings.dispatch_max_workers,
    )
    outcome.record(report)

    user_ids = users_to_flag(resolved, report, flag_mode or settings.flag_mode)
    try:
        outcome.flagged = mark_notified(db, user_ids, rule.flag, cutoff=inactivity_cutoff(rule, now))
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info(
        "Inactivity sweep %s: %s candidates, %s tokens, %s chunks (%s failed), %s sent, %s failed, %s flagged",
        rule.name, outcome.candidates, outcome.tokens, outcome.chunks, outcome.failed_chunks,
        outcome.sent, outcome.failed, outcome.flagged,
    )
    return outcome


def new_story_notification(title: str | None) -> Notification:
    story_title = (title or "").strip() or NEW_STORY_FALLBACK_TITLE
    return Notification(title=NEW_STORY_TITLE, body=NEW_STORY_BODY.format(title=story_title))


def run_new_story_sweep(
    db: Session,
    provider: PushProvider,
    now: datetime,
    window_minutes: int = NEW_STORIES_WINDOW_MINUTES,
    max_workers: int | None = None,
    mark_announced: bool = True,
) -> SweepOutcome:
    """
    Announce the newest unannounced story created in the window to every user (full
    population, chunked). Every story selected is stamped announced_at = now in the same
    commit, so the window overlap between hourly runs never announces a story twice.
    """
    outcome = SweepOutcome(trigger="new_story")
    stories = select_new_stories(db, now, window_minutes)
    outcome.candidates = len(stories)
    story = newest_story(stories)
    if story is None:
        logger.debug("New-story sweep: nothing new in the last %s minutes", window_minutes)
        return outcome

    resolved = resolve_tokens(iter_all_users(db))
    outcome.tokens = len(resolved)
    if not resolved.tokens:
        logger.info("New-story sweep: story %s found but no push tokens registered", story.id)
        return outcome

    report = dispatch_notification(
        resolved.tokens,
        new_story_notification(story.title),
        provider,
        max_workers=max_workers or settings.dispatch_max_workers,
    )
    outcome.record(report)
    if mark_announced:
        try:
            for row in stories:
                row.announced_at = now
            db.commit()
        except Exception:
            db.rollback()
            raise
    logger.info(
        "New-story sweep: story %s (%r) of %s new, %s devices, %s chunks (%s failed), %s sent",
        story.id, story.title, len(stories), outcome.tokens, outcome.chunks, outcome.failed_chunks, outcome.sent,
    )
    return outcome


def _require_text(value: object) -> str | None:
    if not isinstance(value, str) or not value.strip():
        return None
    return value.strip()


def send_manual_broadcast(
    caller_id: str | None,
    title: object,
    body: object,
    provider: PushProvider | None = None,
    session_factory: Callable[[], Session] | None = None,
    max_workers: int | None = None,
) -> dict:
    """
    Operator broadcast to all users, capped at MANUAL_BROADCAST_MAX_TOKENS devices.
    Identity and payload are checked before the store is touched.
    Returns {"success": True} once every chunk was attempted, whatever the outcomes.
    """
    if not caller_id:
        raise Unauthenticated("Login required.")
    clean_title = _require_text(title)
    clean_body = _require_text(body)
    if clean_title is None or clean_body is None:
        raise InvalidArgument("title and body are required.")

    db = (session_factory or SessionLocal)()
    try:
        resolved = resolve_tokens(iter_all_users(db))
    finally:
        db.close()

    tokens = cap_recipients(resolved.tokens, MANUAL_BROADCAST_MAX_TOKENS)
    if len(resolved.tokens) > len(tokens):
        logger.warning(
            "Manual broadcast capped at %s of %s devices", len(tokens), len(resolved.tokens)
        )
    if not tokens:
        logger.info("Manual broadcast by %s: no push tokens registered", caller_id)
        return {"success": True}

    report = dispatch_notification(
        tokens,
        Notification(title=clean_title, body=clean_body),
        provider or get_push_provider(),
        max_workers=max_workers or settings.dispatch_max_workers,
    )
    logger.info(
        "Manual broadcast by %s: %s devices, %s chunks (%s failed), %s sent, %s failed",
        caller_id, len(tokens), report.chunks, report.failed_chunks, report.success_count, report.failure_count,
    )
    return {"success": True}
