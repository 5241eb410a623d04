"""Error taxonomy for operator continuity operations.

Every error carries a stable machine-readable ``code`` plus a human-readable
``message``; the API layer renders them as ``{"error": {"code", "message"}}``.
"""

from fastapi import status


class ContinuityError(Exception):
    """Base application error."""

    code = "INTERNAL"
    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, http_status: int | None = None):
        """Initialize error."""
        self.message = message
        if http_status is not None:
            self.http_status = http_status
        super().__init__(message)


class NotFoundError(ContinuityError):
    """Building, operator organization or record does not exist."""

    code = "NOT_FOUND"
    http_status = status.HTTP_404_NOT_FOUND


class ValidationFailedError(ContinuityError):
    """Malformed input or a precondition on dates/payload shape failed."""

    code = "VALIDATION_ERROR"
    http_status = status.HTTP_400_BAD_REQUEST


class ConflictError(ContinuityError):
    """Caller's view of the current operator period is stale."""

    code = "CONFLICT"
    http_status = status.HTTP_409_CONFLICT


class AuthError(ContinuityError):
    """Missing principal (401) or insufficient role (403)."""

    code = "AUTH_ERROR"
    http_status = status.HTTP_403_FORBIDDEN


class InternalError(ContinuityError):
    """Storage failure unrelated to caller input; nothing was written."""

    code = "INTERNAL"
    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR


__all__ = [
    "ContinuityError",
    "NotFoundError",
    "ValidationFailedError",
    "ConflictError",
    "AuthError",
    "InternalError",
]
