"""
Centralized error types and their HTTP mapping.
Routes stay thin: raise a domain error, convert it with error_to_http().
"""
from __future__ import annotations

from fastapi import HTTPException

STATUS_BAD_REQUEST = 400
STATUS_UNAUTHORIZED = 401
STATUS_INTERNAL_ERROR = 500


class EngagementError(Exception):
    """Base for errors surfaced by the notification engine."""

    code = "internal"
    status_code = STATUS_INTERNAL_ERROR

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message


class Unauthenticated(EngagementError):
    """Caller identity missing or invalid."""

    code = "unauthenticated"
    status_code = STATUS_UNAUTHORIZED


class InvalidArgument(EngagementError):
    """Request payload failed validation."""

    code = "invalid-argument"
    status_code = STATUS_BAD_REQUEST


class PushProviderError(EngagementError):
    """Push provider unreachable or rejected our credentials; the whole multicast failed."""

    code = "push-provider"


def error_to_http(exc: Exception) -> HTTPException:
    """
    Map an exception into an HTTPException.
    Domain errors keep their status and code; anything else becomes a 500 with the message.
    """
    if isinstance(exc, EngagementError):
        return HTTPException(
            status_code=exc.status_code,
            detail={"code": exc.code, "message": exc.message},
        )
    return HTTPException(status_code=STATUS_INTERNAL_ERROR, detail=str(exc))
