"""
Manual broadcast: an authenticated operator pushes one message to all users.

Caller identified by Authorization: Bearer <jwt>. Capped at the first 500 devices.
"""
import logging
from collections.abc import Callable
from typing import Any

from fastapi import APIRouter, Depends, Header
from pydantic import BaseModel
from sqlalchemy.orm import Session

from engagement.api.deps import get_provider, get_session_factory
from engagement.core.auth import caller_from_authorization
from engagement.core.errors import EngagementError, error_to_http
from engagement.services.notifications.sweeps import send_manual_broadcast
from engagement.services.push.base import PushProvider

router = APIRouter()
logger = logging.getLogger(__name__)


class BroadcastRequest(BaseModel):
    # Optional at the schema level so a missing field is reported as invalid-argument, not 422
    title: str | None = None
    body: str | None = None


@router.post("/notifications/broadcast")
def broadcast(
    payload: BroadcastRequest,
    authorization: str | None = Header(None),
    provider: PushProvider = Depends(get_provider),
    session_factory: Callable[[], Session] = Depends(get_session_factory),
) -> dict[str, Any]:
    """
    Send {title, body} to every registered device (first 500).
    401 unauthenticated without a valid bearer token, 400 invalid-argument when title/body are blank.
    """
    caller_id = caller_from_authorization(authorization)
    try:
        return send_manual_broadcast(
            caller_id,
            payload.title,
            payload.body,
            provider=provider,
            session_factory=session_factory,
        )
    except EngagementError as e:
        logger.info("Manual broadcast rejected (%s): %s", e.code, e.message)
        raise error_to_http(e) from e
