"""Pick the push provider from settings. Falls back to log-only when credentials are missing."""
import logging

from engagement.config import Settings, settings as default_settings
from engagement.services.push.apns import ApnsProvider, load_p8_key
from engagement.services.push.base import PushProvider, check_multicast_size
from engagement.services.push.fcm import FcmProvider, load_service_account
from engagement.services.push.types import MulticastResult, Notification, SendResponse

logger = logging.getLogger(__name__)


class LogOnlyProvider:
    """No delivery: logs the multicast and reports every token as not sent."""

    @property
    def provider_id(self) -> str:
        return "log"

    def send_multicast(self, tokens: list[str], notification: Notification) -> MulticastResult:
        check_multicast_size(tokens)
        logger.info(
            "Push not configured; would send %r to %s devices",
            notification.title,
            len(tokens),
        )
        return MulticastResult(
            responses=[SendResponse(token=t, success=False, error="not-configured") for t in tokens]
        )


def _build_fcm(s: Settings) -> PushProvider | None:
    credentials = load_service_account(s.fcm_service_account_path, s.fcm_service_account_json)
    if not credentials:
        return None
    try:
        return FcmProvider(s.fcm_project_id, credentials)
    except ValueError as e:
        logger.warning("FCM provider not usable: %s", e)
        return None


def _build_apns(s: Settings) -> PushProvider | None:
    if not (s.apns_key_id and s.apns_team_id and s.apns_bundle_id):
        return None
    p8 = load_p8_key(s.apns_key_p8_path, s.apns_key_p8_base64)
    if not p8:
        return None
    return ApnsProvider(s.apns_key_id, s.apns_team_id, s.apns_bundle_id, p8, use_sandbox=s.apns_use_sandbox)


_BUILDERS = {
    "fcm": _build_fcm,
    "apns": _build_apns,
}


def get_push_provider(s: Settings | None = None) -> PushProvider:
    """Build the provider named by PUSH_PROVIDER; log-only if it is unknown or unconfigured."""
    s = s or default_settings
    builder = _BUILDERS.get(s.push_provider)
    if builder is None:
        if s.push_provider != "log":
            logger.warning("Unknown PUSH_PROVIDER %r; using log-only provider", s.push_provider)
        return LogOnlyProvider()
    provider = builder(s)
    if provider is None:
        logger.warning("PUSH_PROVIDER=%s is not configured; using log-only provider", s.push_provider)
        return LogOnlyProvider()
    return provider
