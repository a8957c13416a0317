"""Organization and membership service."""

import re
from uuid import UUID

import structlog

from statusboard.core.access import OrgAccessContext
from statusboard.core.auth.repository import MembershipRepository
from statusboard.core.auth.types import (
    Organization,
    OrganizationPatch,
    OrgMember,
    OrgMembership,
    OrgRole,
    Principal,
)
from statusboard.core.exceptions import NotFound, ValidationCode, ValidationError

logger = structlog.get_logger()


def generate_slug(name: str) -> str:
    """Generate a URL-safe slug from a name."""
    slug = name.lower()
    slug = re.sub(r"[^a-z0-9]+", "-", slug)
    slug = slug.strip("-")
    return slug[:50]


class OrganizationService:
    """Organization lifecycle and membership management.

    Every method taking an OrgAccessContext operates on ``access.org_id``,
    the organization the caller was authorized for.
    """

    def __init__(self, repository: MembershipRepository):
        self.repository = repository

    async def list_for_user(self, principal: Principal) -> list[tuple[Organization, OrgRole]]:
        """Organizations the principal belongs to, with their role in each."""
        return await self.repository.get_user_orgs(principal.user_id)

    async def create_organization(
        self,
        principal: Principal,
        name: str,
        description: str | None = None,
        website_url: str | None = None,
        logo_url: str | None = None,
    ) -> Organization:
        """Create an organization with the principal as its first admin."""
        if not name or not name.strip():
            raise ValidationError(ValidationCode.MISSING_FIELD, "Organization name is required")

        slug = _slug_for(name)
        if await self.repository.get_org_by_slug(slug):
            raise ValidationError(
                ValidationCode.SLUG_TAKEN,
                "Organization with this name already exists",
            )

        return await self.repository.create_org_with_admin(
            name=name,
            slug=slug,
            admin_user_id=principal.user_id,
            description=description,
            website_url=website_url,
            logo_url=logo_url,
        )

    async def get_organization(self, access: OrgAccessContext) -> Organization:
        """Get the organization the caller was authorized for."""
        org = await self.repository.get_org_by_id(access.org_id)
        if org is None:
            raise NotFound("Organization not found")
        return org

    async def update_organization(
        self, access: OrgAccessContext, patch: OrganizationPatch
    ) -> Organization:
        """Apply a partial update; a new name also regenerates the slug."""
        changes = patch.changes()
        if "name" in changes:
            slug = _slug_for(changes["name"] or "")
            existing = await self.repository.get_org_by_slug(slug)
            if existing and existing.id != access.org_id:
                raise ValidationError(
                    ValidationCode.SLUG_TAKEN,
                    "Organization with this name already exists",
                )
            changes["slug"] = slug

        org = await self.repository.update_org(access.org_id, changes)
        if org is None:
            raise NotFound("Organization not found")
        logger.info("organization_updated", org_id=str(org.id), fields=sorted(changes))
        return org

    async def delete_organization(self, access: OrgAccessContext) -> None:
        """Delete the organization."""
        if not await self.repository.delete_org(access.org_id):
            raise NotFound("Organization not found")
        logger.info("organization_deleted", org_id=str(access.org_id), by=str(access.user_id))

    # Members
    async def list_members(self, access: OrgAccessContext) -> list[OrgMember]:
        """List the organization's members."""
        return await self.repository.list_members(access.org_id)

    async def add_member(
        self,
        access: OrgAccessContext,
        email: str,
        role: str = OrgRole.VIEWER.value,
    ) -> OrgMembership:
        """Add a registered user to the organization by email."""
        if not email:
            raise ValidationError(ValidationCode.MISSING_FIELD, "Email is required")
        parsed_role = OrgRole.parse(role)

        user_id = await self.repository.find_user_id_by_email(email)
        if user_id is None:
            raise NotFound("User not found")

        if await self.repository.get_membership(access.org_id, user_id):
            raise ValidationError(ValidationCode.ALREADY_MEMBER, "User is already a member")

        membership = await self.repository.add_member(
            access.org_id, user_id, parsed_role, invited_by=access.user_id
        )
        logger.info(
            "membership_added",
            org_id=str(access.org_id),
            user_id=str(user_id),
            role=parsed_role.value,
        )
        return membership

    async def change_role(
        self, access: OrgAccessContext, user_id: UUID, role: str
    ) -> OrgMembership:
        """Change a member's role; never leaves the organization without an admin."""
        return await self.repository.change_role(access.org_id, user_id, OrgRole.parse(role))

    async def remove_member(self, access: OrgAccessContext, user_id: UUID) -> None:
        """Remove a member; never leaves the organization without an admin."""
        await self.repository.remove_member(access.org_id, user_id)


def _slug_for(name: str) -> str:
    slug = generate_slug(name)
    if not slug:
        raise ValidationError(
            ValidationCode.MISSING_FIELD,
            "Organization name must contain letters or digits",
        )
    return slug
