"""
Caller identity for the manual broadcast endpoint.

Callers send Authorization: Bearer <jwt>, signed HS256 with AUTH_JWT_SECRET; the
subject claim is the caller id. Anything else means "no identity".
"""
import logging

import jwt

from engagement.config import settings

logger = logging.getLogger(__name__)

_BEARER_PREFIX = "bearer "


def caller_from_authorization(authorization: str | None, secret: str | None = None) -> str | None:
    """Return the caller id from an Authorization header, or None if absent/invalid."""
    if not authorization or not authorization.lower().startswith(_BEARER_PREFIX):
        return None
    token = authorization[len(_BEARER_PREFIX):].strip()
    secret = secret if secret is not None else settings.auth_jwt_secret
    if not token or not secret:
        if token and not secret:
            logger.warning("AUTH_JWT_SECRET not set; rejecting bearer token")
        return None
    try:
        claims = jwt.decode(token, secret, algorithms=["HS256"], options={"require": ["sub"]})
    except jwt.InvalidTokenError as e:
        logger.info("Rejected bearer token: %s", e)
        return None
    subject = claims.get("sub")
    if not isinstance(subject, str) or not subject.strip():
        return None
    return subject.strip()
