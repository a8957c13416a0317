"""Organization access middleware.

Chains authentication, the membership check and the role gate for every
organization-scoped route.
"""

from collections.abc import Callable, Collection
from typing import Annotated, Any
from uuid import UUID

from fastapi import Depends, HTTPException, Request

from statusboard.core.access import AccessGate, OrgAccessContext
from statusboard.core.auth.types import ADMIN_ONLY, ANY_ROLE, MEMBER_OR_ADMIN, OrgRole
from statusboard.core.exceptions import Forbidden
from statusboard.entrypoints.api.deps import get_access_gate
from statusboard.entrypoints.api.middleware.auth import CurrentPrincipal


def require_org_role(roles: Collection[OrgRole]) -> Callable[..., Any]:
    """Dependency to require membership of the path's organization with one of ``roles``.

    Usage:
        @router.delete("/{org_id}")
        async def delete_org(
            access: Annotated[OrgAccessContext, Depends(require_org_role(ADMIN_ONLY))],
        ):
            ...

    Args:
        roles: Allow-list of roles.

    Returns:
        Dependency function that yields the caller's OrgAccessContext.
    """
    allowed = frozenset(roles)

    async def org_role_checker(
        org_id: UUID,
        request: Request,
        principal: CurrentPrincipal,
        gate: Annotated[AccessGate, Depends(get_access_gate)],
    ) -> OrgAccessContext:
        try:
            access = await gate.authorize(principal, org_id, allowed)
        except Forbidden as e:
            raise HTTPException(status_code=403, detail=str(e)) from None

        request.state.org_access = access
        return access

    return org_role_checker


# Common role dependencies for convenience
RequireAnyRole = Annotated[OrgAccessContext, Depends(require_org_role(ANY_ROLE))]
RequireMemberOrAdmin = Annotated[OrgAccessContext, Depends(require_org_role(MEMBER_OR_ADMIN))]
RequireAdmin = Annotated[OrgAccessContext, Depends(require_org_role(ADMIN_ONLY))]
