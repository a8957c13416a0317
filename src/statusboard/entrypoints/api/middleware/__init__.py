"""API middleware."""

from statusboard.entrypoints.api.middleware.auth import (
    CurrentPrincipal,
    verify_principal,
)
from statusboard.entrypoints.api.middleware.tenant import (
    RequireAdmin,
    RequireAnyRole,
    RequireMemberOrAdmin,
    require_org_role,
)

__all__ = [
    "CurrentPrincipal",
    "verify_principal",
    "require_org_role",
    "RequireAnyRole",
    "RequireMemberOrAdmin",
    "RequireAdmin",
]
