"""Tests for the scheduled job wrappers and their registration."""

from datetime import timedelta

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from engagement.core.constants import INACTIVE_5_DAYS_JOB_ID, INACTIVE_20_DAYS_JOB_ID, NEW_STORIES_JOB_ID
from engagement.models.user import User
from engagement.scheduler import engagement_jobs
from engagement.scheduler.engagement_jobs import (
    register_engagement_jobs,
    run_inactive_5_days_job,
    run_inactive_20_days_job,
    run_new_stories_job,
)


def _broken_session_factory():
    """Sessions on a database with no tables: every query fails."""
    engine = create_engine("sqlite:///:memory:", poolclass=StaticPool)
    return sessionmaker(bind=engine)


class TestJobsNeverRaise:
    def test_inactivity_job_swallows_query_failure(self, provider, now):
        run_inactive_5_days_job(provider=provider, session_factory=_broken_session_factory(), now=now)
        assert provider.calls == []

    def test_new_stories_job_swallows_query_failure(self, provider, now):
        run_new_stories_job(provider=provider, session_factory=_broken_session_factory(), now=now)
        assert provider.calls == []


class TestJobsRunSweeps:
    def test_20_day_job_flags_users(self, session_factory, make_user, provider, now, db_session):
        make_user("a", tokens=["ta"], inactive_days=21)
        run_inactive_20_days_job(provider=provider, session_factory=session_factory, now=now)
        assert provider.sent_tokens == ["ta"]
        db_session.expire_all()
        assert db_session.get(User, "a").notified_20_days is True

    def test_new_stories_job_sends(self, session_factory, make_user, make_story, provider, now):
        make_user("a", tokens=["ta"])
        make_story("Nova", minutes_ago=5)
        run_new_stories_job(provider=provider, session_factory=session_factory, now=now)
        assert provider.sent_tokens == ["ta"]

    def test_default_session_is_module_sessionlocal(self, session_factory, make_user, provider, now, db_session, monkeypatch):
        make_user("a", tokens=["ta"], inactive_days=6)
        monkeypatch.setattr(engagement_jobs, "SessionLocal", session_factory)
        run_inactive_5_days_job(provider=provider, now=now)
        assert provider.sent_tokens == ["ta"]
        db_session.expire_all()
        assert db_session.get(User, "a").notified_5_days is True


class TestRegisterEngagementJobs:
    def test_registers_three_jobs(self):
        scheduler = BackgroundScheduler(timezone="UTC")
        register_engagement_jobs(scheduler, timezone_name="UTC")
        jobs = {job.id: job for job in scheduler.get_jobs()}
        assert set(jobs) == {INACTIVE_5_DAYS_JOB_ID, INACTIVE_20_DAYS_JOB_ID, NEW_STORIES_JOB_ID}

        assert isinstance(jobs[INACTIVE_5_DAYS_JOB_ID].trigger, CronTrigger)
        assert "hour='10'" in str(jobs[INACTIVE_5_DAYS_JOB_ID].trigger)
        assert "hour='11'" in str(jobs[INACTIVE_20_DAYS_JOB_ID].trigger)

        hourly = jobs[NEW_STORIES_JOB_ID].trigger
        assert isinstance(hourly, IntervalTrigger)
        assert hourly.interval == timedelta(minutes=60)

