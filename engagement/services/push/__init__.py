"""
Push providers: FCM, APNs, and a log-only fallback.
Each delivers one payload to a list of device tokens and returns per-token outcomes,
so the dispatch layer stays provider-agnostic.
"""
from engagement.services.push.base import PushProvider
from engagement.services.push.registry import LogOnlyProvider, get_push_provider
from engagement.services.push.types import MulticastResult, Notification, SendResponse

__all__ = [
    "LogOnlyProvider",
    "MulticastResult",
    "Notification",
    "PushProvider",
    "SendResponse",
    "get_push_provider",
]
