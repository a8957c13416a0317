"""Core domain - access control, membership invariants and metrics logic."""

from .access import AccessGate, OrgAccessContext
from .exceptions import (
    ExternalUnavailable,
    Forbidden,
    ForbiddenReason,
    InvalidToken,
    NotFound,
    StatusboardError,
    StorageFailure,
    Unauthenticated,
    ValidationCode,
    ValidationError,
)
from .interfaces import MetricsStore
from .membership import REMOVAL, MembershipInvariantGuard, Removal

__all__ = [
    # Access control
    "AccessGate",
    "OrgAccessContext",
    "MembershipInvariantGuard",
    "REMOVAL",
    "Removal",
    # Interfaces
    "MetricsStore",
    # Exceptions
    "StatusboardError",
    "Unauthenticated",
    "InvalidToken",
    "Forbidden",
    "ForbiddenReason",
    "ValidationError",
    "ValidationCode",
    "NotFound",
    "ExternalUnavailable",
    "StorageFailure",
]
