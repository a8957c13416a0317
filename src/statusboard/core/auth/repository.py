"""Membership repository protocol for database operations."""

from typing import Protocol, runtime_checkable
from uuid import UUID

from statusboard.core.auth.types import Organization, OrgMember, OrgMembership, OrgRole


@runtime_checkable
class MembershipRepository(Protocol):
    """Protocol for organization and membership storage.

    Implementations provide actual database access (PostgreSQL, etc).
    Mutations that can demote or remove an admin must run the invariant
    check and the write under one lock on the organization's admin rows.
    """

    async def get_membership(self, org_id: UUID, user_id: UUID) -> OrgMembership | None:
        """Get a user's membership in an organization (primary-key lookup)."""
        ...

    async def list_members(self, org_id: UUID) -> list[OrgMember]:
        """List all members of an organization."""
        ...

    async def add_member(
        self,
        org_id: UUID,
        user_id: UUID,
        role: OrgRole,
        invited_by: UUID | None = None,
    ) -> OrgMembership:
        """Insert a membership row."""
        ...

    async def change_role(self, org_id: UUID, user_id: UUID, role: OrgRole) -> OrgMembership:
        """Change a member's role, atomically guarding the last-admin invariant.

        Raises:
            NotFound: If the membership does not exist.
            ValidationError: LAST_ADMIN if the change would leave no admin.
        """
        ...

    async def remove_member(self, org_id: UUID, user_id: UUID) -> None:
        """Remove a member, atomically guarding the last-admin invariant.

        Raises:
            NotFound: If the membership does not exist.
            ValidationError: LAST_ADMIN if the removal would leave no admin.
        """
        ...

    async def find_user_id_by_email(self, email: str) -> UUID | None:
        """Resolve a registered user's id from their email."""
        ...

    # Organization operations
    async def get_org_by_id(self, org_id: UUID) -> Organization | None:
        """Get organization by ID."""
        ...

    async def get_org_by_slug(self, slug: str) -> Organization | None:
        """Get organization by slug."""
        ...

    async def get_user_orgs(self, user_id: UUID) -> list[tuple[Organization, OrgRole]]:
        """Get all organizations a user belongs to with their roles."""
        ...

    async def create_org_with_admin(
        self,
        name: str,
        slug: str,
        admin_user_id: UUID,
        description: str | None = None,
        website_url: str | None = None,
        logo_url: str | None = None,
    ) -> Organization:
        """Create an organization and its creator's admin membership together."""
        ...

    async def update_org(self, org_id: UUID, changes: dict[str, str | None]) -> Organization | None:
        """Apply column changes to an organization."""
        ...

    async def delete_org(self, org_id: UUID) -> bool:
        """Delete an organization and, by cascade, its memberships."""
        ...
