"""Tests for the dispatch client."""

from engagement.services.notifications.dispatch import dispatch_notification
from engagement.services.push.types import Notification

NOTE = Notification(title="Hi", body="There")


class TestDispatchNotification:
    def test_one_multicast_per_chunk(self, provider):
        tokens = [f"t{i}" for i in range(1200)]
        report = dispatch_notification(tokens, NOTE, provider)
        assert sorted(len(c) for c, _ in provider.calls) == [200, 500, 500]
        assert report.chunks == 3
        assert report.success_count == 1200
        assert report.delivered_tokens == set(tokens)

    def test_no_token_sent_twice(self, provider):
        tokens = [f"t{i}" for i in range(1001)]
        dispatch_notification(tokens, NOTE, provider, max_workers=3)
        assert sorted(provider.sent_tokens) == sorted(tokens)

    def test_failed_chunk_does_not_stop_others(self, make_provider):
        tokens = [f"t{i}" for i in range(1200)]
        provider = make_provider(fail_on={"t0"})
        report = dispatch_notification(tokens, NOTE, provider)
        assert len(provider.calls) == 3
        assert report.failed_chunks == 1
        assert report.failure_count == 500
        assert report.success_count == 700
        assert "t0" not in report.delivered_tokens
        assert "t500" in report.delivered_tokens

    def test_rejected_tokens_not_delivered(self, make_provider):
        provider = make_provider(reject={"bad"})
        report = dispatch_notification(["good", "bad"], NOTE, provider)
        assert report.success_count == 1
        assert report.failure_count == 1
        assert report.delivered_tokens == {"good"}

    def test_empty_is_noop(self, provider):
        report = dispatch_notification([], NOTE, provider)
        assert report.chunks == 0
        assert provider.calls == []

    def test_payload_passed_through(self, provider):
        dispatch_notification(["a"], NOTE, provider)
        assert provider.calls[0][1] == NOTE
