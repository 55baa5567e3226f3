"""Error taxonomy for the driver lifecycle core.

Every failure a service reports is a DriverDeskError carrying a
machine-readable kind, a human-readable message and an optional detail
payload. The API layer maps kinds to HTTP status codes; services never
return raw driver or provider errors to callers.
"""

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Machine-readable error kinds."""

    VALIDATION = "validation_failed"
    AUTHENTICATION = "unauthenticated"
    AUTHORIZATION = "forbidden"
    RATE_LIMITED = "rate_limit_exceeded"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    DEPENDENCY_FAILURE = "dependency_failure"
    EMAIL_DELIVERY_FAILED = "email_delivery_failed"


class DriverDeskError(Exception):
    """Base class for all errors raised by DriverDesk services."""

    kind: ErrorKind = ErrorKind.DEPENDENCY_FAILURE

    def __init__(self, message: str, details: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.kind.value, "message": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body

    def __repr__(self) -> str:
        return f"<{type(self).__name__}(kind={self.kind.value}, message={self.message!r})>"


class ValidationFailedError(DriverDeskError):
    """Caller-fixable input problems. Details list every issue found."""

    kind = ErrorKind.VALIDATION


class AuthenticationError(DriverDeskError):
    """Missing, invalid or expired credentials."""

    kind = ErrorKind.AUTHENTICATION


class AuthorizationError(DriverDeskError):
    """Authenticated actor lacks permission for the target organization."""

    kind = ErrorKind.AUTHORIZATION


class RateLimitExceededError(DriverDeskError):
    kind = ErrorKind.RATE_LIMITED


class ConflictError(DriverDeskError):
    """Duplicate email or invitation, or an active-shift guard."""

    kind = ErrorKind.CONFLICT


class NotFoundError(DriverDeskError):
    kind = ErrorKind.NOT_FOUND


class DependencyFailureError(DriverDeskError):
    """Storage, identity or notification collaborator failed."""

    kind = ErrorKind.DEPENDENCY_FAILURE


class EmailDeliveryFailedError(DependencyFailureError):
    kind = ErrorKind.EMAIL_DELIVERY_FAILED
