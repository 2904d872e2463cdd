"""
Send push notifications via Firebase Cloud Messaging (HTTP v1 API).

Auth: a service-account JWT (RS256) is exchanged at Google's token endpoint for an
OAuth2 access token, cached until shortly before it expires.
Multicast: the v1 API has no batch endpoint, so one multicast = one client, one
messages:send POST per token (same as the Admin SDK's sendEachForMulticast).
"""
import json
import logging
import threading
import time
from pathlib import Path
from typing import Any

import httpx
import jwt

from engagement.core.errors import PushProviderError
from engagement.services.push.base import check_multicast_size
from engagement.services.push.types import MulticastResult, Notification, SendResponse

logger = logging.getLogger(__name__)

FCM_SCOPE = "https://www.googleapis.com/auth/firebase.messaging"
FCM_SEND_URL = "https://fcm.googleapis.com/v1/projects/{project_id}/messages:send"
GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"
_JWT_GRANT_TYPE = "urn:ietf:params:oauth:grant-type:jwt-bearer"
_ASSERTION_LIFETIME_SECONDS = 3600
_TOKEN_REFRESH_MARGIN_SECONDS = 5 * 60


def load_service_account(path: str | None = None, raw_json: str | None = None) -> dict[str, Any] | None:
    """Load service-account credentials from inline JSON or a file. Return None if unusable."""
    text = (raw_json or "").strip()
    if not text and path:
        p = Path(path)
        if not p.exists():
            logger.warning("FCM_SERVICE_ACCOUNT_PATH %s does not exist", path)
            return None
        text = p.read_text(encoding="utf-8")
    if not text:
        return None
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        logger.warning("FCM service account JSON is invalid: %s", e)
        return None
    if not isinstance(data, dict) or not data.get("client_email") or not data.get("private_key"):
        logger.warning("FCM service account JSON lacks client_email/private_key")
        return None
    return data


def _error_reason(resp: httpx.Response) -> str:
    """FCM errors look like {"error": {"status": "NOT_FOUND", "details": [{"errorCode": "UNREGISTERED"}]}}."""
    try:
        err = resp.json().get("error") or {}
    except ValueError:
        return f"{resp.status_code}: {resp.text[:200]}"
    for detail in err.get("details") or []:
        if isinstance(detail, dict) and detail.get("errorCode"):
            return detail["errorCode"]
    return err.get("status") or f"{resp.status_code}"


class FcmProvider:
    def __init__(
        self,
        project_id: str,
        credentials: dict[str, Any],
        transport: httpx.BaseTransport | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._project_id = project_id or credentials.get("project_id", "")
        if not self._project_id:
            raise ValueError("FCM project id missing (FCM_PROJECT_ID or project_id in service account)")
        self._credentials = credentials
        self._transport = transport
        self._timeout = timeout
        self._token_cache: tuple[str, float] | None = None
        self._lock = threading.Lock()

    @property
    def provider_id(self) -> str:
        return "fcm"

    def _build_assertion(self, now: float) -> str:
        token_uri = self._credentials.get("token_uri") or GOOGLE_TOKEN_URI
        claims = {
            "iss": self._credentials["client_email"],
            "scope": FCM_SCOPE,
            "aud": token_uri,
            "iat": int(now),
            "exp": int(now) + _ASSERTION_LIFETIME_SECONDS,
        }
        headers = {}
        if self._credentials.get("private_key_id"):
            headers["kid"] = self._credentials["private_key_id"]
        return jwt.encode(claims, self._credentials["private_key"], algorithm="RS256", headers=headers)

    def _access_token(self, client: httpx.Client) -> str:
        """Return a cached OAuth2 access token, exchanging a fresh assertion when needed."""
        now = time.time()
        with self._lock:
            if self._token_cache and self._token_cache[1] > now:
                return self._token_cache[0]
            token_uri = self._credentials.get("token_uri") or GOOGLE_TOKEN_URI
            try:
                assertion = self._build_assertion(now)
                resp = client.post(token_uri, data={"grant_type": _JWT_GRANT_TYPE, "assertion": assertion})
            except (httpx.HTTPError, jwt.PyJWTError, ValueError) as e:
                raise PushProviderError(f"FCM token exchange failed: {e}") from e
            if resp.status_code != 200:
                raise PushProviderError(f"FCM token exchange returned {resp.status_code}: {resp.text[:200]}")
            body = resp.json()
            access_token = body.get("access_token")
            if not access_token:
                raise PushProviderError("FCM token exchange returned no access_token")
            expires_in = int(body.get("expires_in") or _ASSERTION_LIFETIME_SECONDS)
            self._token_cache = (access_token, now + max(0, expires_in - _TOKEN_REFRESH_MARGIN_SECONDS))
            return access_token

    def send_multicast(self, tokens: list[str], notification: Notification) -> MulticastResult:
        check_multicast_size(tokens)
        result = MulticastResult()
        if not tokens:
            return result
        url = FCM_SEND_URL.format(project_id=self._project_id)
        with httpx.Client(transport=self._transport, timeout=self._timeout) as client:
            headers = {"authorization": f"Bearer {self._access_token(client)}"}
            for token in tokens:
                message = {
                    "message": {
                        "token": token,
                        "notification": {"title": notification.title, "body": notification.body},
                    }
                }
                try:
                    resp = client.post(url, json=message, headers=headers)
                except httpx.HTTPError as e:
                    logger.warning("FCM request failed for token %s...: %s", token[:20], e)
                    result.responses.append(SendResponse(token=token, success=False, error=str(e)))
                    continue
                if resp.status_code == 200:
                    result.responses.append(SendResponse(token=token, success=True))
                    continue
                reason = _error_reason(resp)
                logger.debug("FCM rejected token %s...: %s", token[:20], reason)
                result.responses.append(SendResponse(token=token, success=False, error=reason))
        return result
