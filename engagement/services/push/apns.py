"""
Send push notifications via Apple Push Notification service (APNs).
Requires APNS_KEY_ID, APNS_TEAM_ID, APNS_BUNDLE_ID, and APNS_KEY_P8_PATH or APNS_KEY_P8_BASE64.
APNs has no multicast endpoint: a multicast is one HTTP/2 connection with one POST per token.
"""
import base64
import logging
import threading
import time
from pathlib import Path

import httpx
import jwt

from engagement.core.errors import PushProviderError
from engagement.services.push.base import check_multicast_size
from engagement.services.push.types import MulticastResult, Notification, SendResponse

logger = logging.getLogger(__name__)

# APNs host: sandbox for dev builds, production for release
APNS_SANDBOX = "https://api.sandbox.push.apple.com"
APNS_PRODUCTION = "https://api.push.apple.com"

# APNs accepts tokens with iat within last hour; refresh a bit before
_JWT_EXPIRY_SECONDS = 55 * 60


def load_p8_key(path: str | None = None, base64_content: str | None = None) -> str | None:
    """Load .p8 key from base64 content or a file path. Return None if neither is usable."""
    if base64_content:
        try:
            return base64.b64decode(base64_content).decode("utf-8")
        except ValueError as e:
            logger.warning("APNS_KEY_P8_BASE64 decode failed: %s", e)
            return None
    if path and Path(path).exists():
        try:
            return Path(path).read_text(encoding="utf-8")
        except OSError as e:
            logger.warning("APNS_KEY_P8_PATH read failed: %s", e)
            return None
    return None


class ApnsProvider:
    def __init__(
        self,
        key_id: str,
        team_id: str,
        bundle_id: str,
        p8_key: str,
        use_sandbox: bool = True,
        transport: httpx.BaseTransport | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._key_id = key_id
        self._team_id = team_id
        self._bundle_id = bundle_id
        self._p8_key = p8_key
        self._base_url = APNS_SANDBOX if use_sandbox else APNS_PRODUCTION
        self._transport = transport
        self._timeout = timeout
        self._jwt_cache: tuple[str, float] | None = None
        self._lock = threading.Lock()

    @property
    def provider_id(self) -> str:
        return "apns"

    def _provider_jwt(self) -> str:
        """Build and cache the ES256 provider token."""
        now = time.time()
        with self._lock:
            if self._jwt_cache and self._jwt_cache[1] > now:
                return self._jwt_cache[0]
            try:
                token = jwt.encode(
                    {"iss": self._team_id, "iat": int(now)},
                    self._p8_key,
                    algorithm="ES256",
                    headers={"alg": "ES256", "kid": self._key_id},
                )
            except (jwt.PyJWTError, ValueError, TypeError) as e:
                raise PushProviderError(f"APNs JWT build failed: {e}") from e
            self._jwt_cache = (token, now + _JWT_EXPIRY_SECONDS)
            return token

    def send_multicast(self, tokens: list[str], notification: Notification) -> MulticastResult:
        check_multicast_size(tokens)
        result = MulticastResult()
        if not tokens:
            return result
        headers = {
            "authorization": f"bearer {self._provider_jwt()}",
            "apns-topic": self._bundle_id,
            "apns-push-type": "alert",
            "apns-priority": "10",
        }
        payload = {
            "aps": {
                "alert": {"title": notification.title, "body": notification.body},
                "sound": "default",
            }
        }
        with httpx.Client(http2=self._transport is None, transport=self._transport, timeout=self._timeout) as client:
            for token in tokens:
                url = f"{self._base_url}/3/device/{token}"
                try:
                    resp = client.post(url, json=payload, headers=headers)
                except httpx.HTTPError as e:
                    logger.warning("APNs request failed for token %s...: %s", token[:20], e)
                    result.responses.append(SendResponse(token=token, success=False, error=str(e)))
                    continue
                if resp.status_code == 200:
                    result.responses.append(SendResponse(token=token, success=True))
                    continue
                logger.warning("APNs returned %s for token %s...: %s", resp.status_code, token[:20], resp.text)
                result.responses.append(
                    SendResponse(token=token, success=False, error=f"{resp.status_code}: {resp.text}")
                )
        return result
