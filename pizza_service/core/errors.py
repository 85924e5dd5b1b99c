"""
Service Error Taxonomy

Every failure a request handler can report is one of these exceptions.
They are raised anywhere below the HTTP layer and translated to a status
code and a ``{"message": ...}`` body by a single exception handler in
``pizza_service.main``.
"""

from typing import Any, Optional


class ServiceError(Exception):
    """Base class for errors that map to an HTTP response."""

    status_code: int = 500
    default_message: str = "internal server error"

    def __init__(self, message: Optional[str] = None, **extra: Any):
        self.message = message or self.default_message
        self.extra = extra
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Response body for this error."""
        return {"message": self.message, **self.extra}


class Unauthorized(ServiceError):
    """Missing, malformed, expired or revoked token, or bad credentials."""
    status_code = 401
    default_message = "unauthorized"


class Forbidden(ServiceError):
    """Authenticated, but the authorization policy denied the action."""
    status_code = 403
    default_message = "unauthorized"


class NotFound(ServiceError):
    status_code = 404
    default_message = "not found"


class Conflict(ServiceError):
    """Uniqueness violation (email, franchise name)."""
    status_code = 409
    default_message = "conflict"


class UpstreamFailure(ServiceError):
    """The order factory rejected or failed to fulfill an order."""
    status_code = 500
    default_message = "Failed to fulfill order at factory"
