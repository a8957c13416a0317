"""Domain-specific exceptions.

All exceptions in the statusboard system inherit from StatusboardError,
making it easy to catch all system errors while still being able
to handle specific error types.
"""

from __future__ import annotations

from enum import Enum


class StatusboardError(Exception):
    """Base exception for all statusboard errors."""

    pass


class Unauthenticated(StatusboardError):
    """Missing or invalid credential.

    Surfaced to callers as an access-denied response with no detail
    on the cause.
    """

    def __init__(self, message: str = "Authentication required") -> None:
        """Initialize Unauthenticated.

        Args:
            message: Server-side description, not shown to callers.
        """
        super().__init__(message)


class InvalidToken(Unauthenticated):
    """The identity provider rejected the bearer token."""

    pass


class ForbiddenReason(str, Enum):
    """Why an authorization check failed."""

    NOT_A_MEMBER = "not_a_member"
    INSUFFICIENT_ROLE = "insufficient_role"


class Forbidden(StatusboardError):
    """Principal is authenticated but may not perform the operation.

    A nonexistent organization and a non-member caller both produce
    NOT_A_MEMBER so responses never reveal whether an organization exists.

    Attributes:
        reason: Which check failed.
    """

    def __init__(self, reason: ForbiddenReason, message: str | None = None) -> None:
        """Initialize Forbidden.

        Args:
            reason: Which check failed.
            message: Optional override of the default message.
        """
        if message is None:
            message = (
                "Access denied to this organization"
                if reason == ForbiddenReason.NOT_A_MEMBER
                else "Insufficient permissions"
            )
        super().__init__(message)
        self.reason = reason


class ValidationCode(str, Enum):
    """User-correctable validation failures."""

    LAST_ADMIN = "last_admin"
    INVALID_ROLE = "invalid_role"
    INVALID_TIME_RANGE = "invalid_time_range"
    ALREADY_MEMBER = "already_member"
    SLUG_TAKEN = "slug_taken"
    MISSING_FIELD = "missing_field"


class ValidationError(StatusboardError):
    """User-correctable request problem with an actionable message.

    Attributes:
        code: Machine-readable failure code.
    """

    def __init__(self, code: ValidationCode, message: str) -> None:
        """Initialize ValidationError.

        Args:
            code: Machine-readable failure code.
            message: Message shown to the caller.
        """
        super().__init__(message)
        self.code = code


class NotFound(StatusboardError):
    """A referenced organization, service or user does not exist."""

    pass


class ExternalUnavailable(StatusboardError):
    """An external system (the metrics store) failed or timed out.

    Attributes:
        system: Name of the external system.
        unreachable: True when the failure was connection-level rather
            than an error response or a timeout.
    """

    def __init__(self, system: str, message: str, unreachable: bool = False) -> None:
        """Initialize ExternalUnavailable.

        Args:
            system: Name of the external system.
            message: Error description.
            unreachable: Whether the store could not be reached at all.
        """
        super().__init__(message)
        self.system = system
        self.unreachable = unreachable


class StorageFailure(StatusboardError):
    """Unexpected persistence-layer fault.

    Surfaced as a generic server error; detail is only logged.
    """

    pass
