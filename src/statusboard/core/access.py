"""Organization access gate.

Every organization-scoped operation is authorized here before any query
touches organization-scoped tables. The gate performs a single membership
lookup keyed by (org_id, user_id) and returns the caller's role.
"""

from __future__ import annotations

from collections.abc import Collection
from dataclasses import dataclass
from uuid import UUID

import structlog

from statusboard.core.auth.repository import MembershipRepository
from statusboard.core.auth.types import ANY_ROLE, OrgRole, Principal
from statusboard.core.exceptions import Forbidden, ForbiddenReason, Unauthenticated

logger = structlog.get_logger()


@dataclass(frozen=True)
class OrgAccessContext:
    """Result of a successful authorization.

    Downstream handlers read org_id from here rather than from the raw
    request so the id that was authorized is the id that gets queried.
    """

    principal: Principal
    org_id: UUID
    role: OrgRole

    @property
    def user_id(self) -> UUID:
        """Get the caller's user ID."""
        return self.principal.user_id


class AccessGate:
    """Decides membership and role for a (principal, organization) pair."""

    def __init__(self, repository: MembershipRepository) -> None:
        """Initialize the gate.

        Args:
            repository: Membership storage.
        """
        self._repository = repository

    async def authorize(
        self,
        principal: Principal | None,
        org_id: UUID,
        required_roles: Collection[OrgRole] = ANY_ROLE,
    ) -> OrgAccessContext:
        """Authorize a principal against an organization.

        Args:
            principal: Verified caller, or None if authentication did not happen.
            org_id: Organization the operation is scoped to.
            required_roles: Allow-list of roles for this operation.

        Returns:
            OrgAccessContext carrying the resolved role.

        Raises:
            Unauthenticated: If no principal was supplied.
            Forbidden: NOT_A_MEMBER if there is no membership (including when
                the organization does not exist), INSUFFICIENT_ROLE if the
                role is not in required_roles.
        """
        if principal is None:
            raise Unauthenticated()

        membership = await self._repository.get_membership(org_id, principal.user_id)
        if membership is None:
            logger.warning(
                "org_access_denied",
                org_id=str(org_id),
                user_id=str(principal.user_id),
                reason=ForbiddenReason.NOT_A_MEMBER.value,
            )
            raise Forbidden(ForbiddenReason.NOT_A_MEMBER)

        if membership.role not in required_roles:
            required = " or ".join(sorted(r.value for r in required_roles))
            logger.warning(
                "org_access_denied",
                org_id=str(org_id),
                user_id=str(principal.user_id),
                role=membership.role.value,
                reason=ForbiddenReason.INSUFFICIENT_ROLE.value,
            )
            raise Forbidden(
                ForbiddenReason.INSUFFICIENT_ROLE,
                f"Insufficient permissions. Required role: {required}",
            )

        logger.debug(
            "org_access_granted",
            org_id=str(org_id),
            user_id=str(principal.user_id),
            role=membership.role.value,
        )
        return OrgAccessContext(principal=principal, org_id=org_id, role=membership.role)
