"""Tests for candidate selection."""

from datetime import timedelta

from engagement.core.constants import INACTIVE_5_DAYS, INACTIVE_20_DAYS
from engagement.models.story import Story
from engagement.services.notifications.eligibility import newest_story, select_inactive_users, select_new_stories


class TestSelectInactiveUsers:
    def test_six_days_inactive_selected_for_5_day_rule(self, db_session, make_user, now):
        make_user("a", tokens=["t"], inactive_days=6)
        assert [u.id for u in select_inactive_users(db_session, INACTIVE_5_DAYS, now)] == ["a"]

    def test_recent_user_not_selected(self, db_session, make_user, now):
        make_user("a", tokens=["t"], inactive_days=2)
        assert select_inactive_users(db_session, INACTIVE_5_DAYS, now) == []

    def test_exactly_on_threshold_selected(self, db_session, make_user, now):
        make_user("a", tokens=["t"], inactive_days=5)
        assert len(select_inactive_users(db_session, INACTIVE_5_DAYS, now)) == 1

    def test_already_flagged_never_reselected(self, db_session, make_user, now):
        make_user("a", tokens=["t"], inactive_days=30, notified_5_days=True)
        assert select_inactive_users(db_session, INACTIVE_5_DAYS, now) == []

    def test_null_flag_treated_as_not_notified(self, db_session, make_user, now):
        make_user("a", tokens=["t"], inactive_days=30, notified_5_days=None)
        assert len(select_inactive_users(db_session, INACTIVE_5_DAYS, now)) == 1

    def test_flags_are_independent(self, db_session, make_user, now):
        make_user("a", tokens=["t"], inactive_days=25, notified_5_days=True)
        assert [u.id for u in select_inactive_users(db_session, INACTIVE_20_DAYS, now)] == ["a"]

    def test_never_logged_in_not_selected(self, db_session, make_user, now):
        make_user("a", tokens=["t"])
        assert select_inactive_users(db_session, INACTIVE_5_DAYS, now) == []


class TestSelectNewStories:
    def test_70_minutes_old_outside_65_minute_window(self, db_session, make_story, now):
        make_story("Old", minutes_ago=70)
        assert select_new_stories(db_session, now, window_minutes=65) == []

    def test_40_minutes_old_selected(self, db_session, make_story, now):
        make_story("Fresh", minutes_ago=40)
        assert [s.title for s in select_new_stories(db_session, now, window_minutes=65)] == ["Fresh"]

    def test_newest_first(self, db_session, make_story, now):
        make_story("Older", minutes_ago=50)
        make_story("Newer", minutes_ago=10)
        assert [s.title for s in select_new_stories(db_session, now)] == ["Newer", "Older"]

    def test_announced_story_not_selected(self, db_session, make_story, now):
        story = make_story("Done", minutes_ago=20)
        story.announced_at = now - timedelta(minutes=15)
        db_session.commit()
        assert select_new_stories(db_session, now) == []


class TestNewestStory:
    def test_picks_most_recent(self, now):
        stories = [
            Story(id=1, title="a", created_at=now - timedelta(minutes=30)),
            Story(id=2, title="b", created_at=now - timedelta(minutes=5)),
            Story(id=3, title="c", created_at=now - timedelta(minutes=60)),
        ]
        assert newest_story(stories).title == "b"

    def test_empty(self):
        assert newest_story([]) is None
