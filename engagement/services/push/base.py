"""Protocol for push providers. FCM, APNs and the log-only fallback share one contract."""
from typing import Protocol

from engagement.core.constants import MAX_BATCH_SIZE
from engagement.services.push.types import MulticastResult, Notification


class PushProvider(Protocol):
    """One multicast per call; at most MAX_BATCH_SIZE tokens."""

    @property
    def provider_id(self) -> str:
        """Unique id ('fcm', 'apns', 'log') used in logs."""
        ...

    def send_multicast(self, tokens: list[str], notification: Notification) -> MulticastResult:
        """
        Deliver one payload to every token. Returns per-token outcomes.
        Raises PushProviderError when the provider cannot be reached at all.
        """
        ...


def check_multicast_size(tokens: list[str]) -> None:
    if len(tokens) > MAX_BATCH_SIZE:
        raise ValueError(f"Multicast accepts at most {MAX_BATCH_SIZE} tokens, got {len(tokens)}")
