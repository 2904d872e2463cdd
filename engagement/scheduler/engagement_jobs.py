"""
Scheduled engagement pushes:
  - daily 10:00  remind users inactive for 5 days (once per inactivity stretch)
  - daily 11:00  remind users inactive for 20 days (once per inactivity stretch)
  - every hour   announce the newest story created in the last 65 minutes

Jobs never raise into APScheduler: failures are logged and the next run starts from
scratch (already-notified users drop out of the eligibility query on their own).
"""
import logging
from collections.abc import Callable
from datetime import datetime, timezone

from apscheduler.schedulers.base import BaseScheduler
from sqlalchemy.orm import Session

from engagement.config import settings
from engagement.core.constants import (
    INACTIVE_5_DAYS,
    INACTIVE_20_DAYS,
    NEW_STORIES_INTERVAL_MINUTES,
    NEW_STORIES_JOB_ID,
    InactivityRule,
)
from engagement.db.session import SessionLocal
from engagement.services.notifications.sweeps import run_inactivity_sweep, run_new_story_sweep
from engagement.services.push.base import PushProvider
from engagement.services.push.registry import get_push_provider

logger = logging.getLogger(__name__)


def _run_inactivity_job(
    rule: InactivityRule,
    provider: PushProvider | None = None,
    session_factory: Callable[[], Session] | None = None,
    now: datetime | None = None,
) -> None:
    db = (session_factory or SessionLocal)()
    try:
        run_inactivity_sweep(
            db,
            rule,
            provider or get_push_provider(),
            now or datetime.now(timezone.utc),
        )
    except Exception as e:
        logger.exception("Inactivity job %s failed: %s", rule.name, e)
        db.rollback()
    finally:
        db.close()


def run_inactive_5_days_job(**kwargs) -> None:
    _run_inactivity_job(INACTIVE_5_DAYS, **kwargs)


def run_inactive_20_days_job(**kwargs) -> None:
    _run_inactivity_job(INACTIVE_20_DAYS, **kwargs)


def run_new_stories_job(
    provider: PushProvider | None = None,
    session_factory: Callable[[], Session] | None = None,
    now: datetime | None = None,
) -> None:
    db = (session_factory or SessionLocal)()
    try:
        run_new_story_sweep(db, provider or get_push_provider(), now or datetime.now(timezone.utc))
    except Exception as e:
        logger.exception("New-story job failed: %s", e)
        db.rollback()
    finally:
        db.close()


_INACTIVITY_JOBS: dict[str, Callable[..., None]] = {
    INACTIVE_5_DAYS.job_id: run_inactive_5_days_job,
    INACTIVE_20_DAYS.job_id: run_inactive_20_days_job,
}


def register_engagement_jobs(scheduler: BaseScheduler, timezone_name: str | None = None) -> None:
    """Add the two daily inactivity jobs and the hourly new-story job (ids from core.constants)."""
    tz = timezone_name or settings.scheduler_timezone
    for rule in (INACTIVE_5_DAYS, INACTIVE_20_DAYS):
        scheduler.add_job(
            _INACTIVITY_JOBS[rule.job_id],
            "cron",
            hour=rule.hour,
            minute=rule.minute,
            timezone=tz,
            id=rule.job_id,
            replace_existing=True,
            coalesce=True,
            max_instances=1,
        )
    scheduler.add_job(
        run_new_stories_job,
        "interval",
        minutes=NEW_STORIES_INTERVAL_MINUTES,
        timezone=tz,
        id=NEW_STORIES_JOB_ID,
        replace_existing=True,
        coalesce=True,
        max_instances=1,
    )
    logger.info(
        "Engagement jobs scheduled (%s): %s daily; %s every %s min",
        tz,
        ", ".join(f"{r.job_id}@{r.hour:02d}:{r.minute:02d}" for r in (INACTIVE_5_DAYS, INACTIVE_20_DAYS)),
        NEW_STORIES_JOB_ID,
        NEW_STORIES_INTERVAL_MINUTES,
    )
