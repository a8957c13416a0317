"""Organization and member management routes."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from statusboard.core.auth.types import Organization, OrganizationPatch, OrgRole
from statusboard.entrypoints.api.deps import get_organization_service
from statusboard.entrypoints.api.middleware.auth import CurrentPrincipal
from statusboard.entrypoints.api.middleware.tenant import RequireAdmin, RequireAnyRole
from statusboard.services.organization import OrganizationService

router = APIRouter(prefix="/organizations", tags=["organizations"])

OrgServiceDep = Annotated[OrganizationService, Depends(get_organization_service)]


class OrganizationResponse(BaseModel):
    """Response for an organization, with the caller's role where known."""

    id: UUID
    name: str
    slug: str
    description: str | None = None
    logo_url: str | None = None
    website_url: str | None = None
    created_at: datetime
    role: OrgRole | None = None

    @classmethod
    def build(cls, org: Organization, role: OrgRole | None = None) -> OrganizationResponse:
        """Build from the domain model."""
        return cls(**org.model_dump(), role=role)


class OrganizationListResponse(BaseModel):
    """Response for listing organizations."""

    organizations: list[OrganizationResponse]


class CreateOrganizationRequest(BaseModel):
    """Request to create an organization."""

    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = None
    website_url: str | None = None
    logo_url: str | None = None


class MemberResponse(BaseModel):
    """Response for an organization member."""

    user_id: UUID
    role: OrgRole
    joined_at: datetime
    invited_by: UUID | None = None
    email: str | None = None


class MemberListResponse(BaseModel):
    """Response for listing members."""

    members: list[MemberResponse]


class AddMemberRequest(BaseModel):
    """Request to add a registered user to the organization."""

    email: str
    role: str = "viewer"


class UpdateRoleRequest(BaseModel):
    """Request to update a member's role."""

    role: str


@router.get("", response_model=OrganizationListResponse)
async def list_organizations(
    principal: CurrentPrincipal,
    service: OrgServiceDep,
) -> OrganizationListResponse:
    """List the caller's organizations with their role in each."""
    orgs = await service.list_for_user(principal)
    return OrganizationListResponse(
        organizations=[OrganizationResponse.build(org, role) for org, role in orgs]
    )


@router.post("", response_model=OrganizationResponse, status_code=201)
async def create_organization(
    body: CreateOrganizationRequest,
    principal: CurrentPrincipal,
    service: OrgServiceDep,
) -> OrganizationResponse:
    """Create an organization; the caller becomes its admin."""
    org = await service.create_organization(
        principal,
        name=body.name,
        description=body.description,
        website_url=body.website_url,
        logo_url=body.logo_url,
    )
    return OrganizationResponse.build(org, OrgRole.ADMIN)


@router.get("/{org_id}", response_model=OrganizationResponse)
async def get_organization(
    access: RequireAnyRole,
    service: OrgServiceDep,
) -> OrganizationResponse:
    """Get an organization the caller belongs to."""
    org = await service.get_organization(access)
    return OrganizationResponse.build(org, access.role)


@router.put("/{org_id}", response_model=OrganizationResponse)
async def update_organization(
    body: OrganizationPatch,
    access: RequireAdmin,
    service: OrgServiceDep,
) -> OrganizationResponse:
    """Update an organization (admin only). Absent fields are left untouched."""
    org = await service.update_organization(access, body)
    return OrganizationResponse.build(org, access.role)


@router.delete("/{org_id}")
async def delete_organization(
    access: RequireAdmin,
    service: OrgServiceDep,
) -> dict[str, str]:
    """Delete an organization (admin only)."""
    await service.delete_organization(access)
    return {"message": "Organization deleted successfully"}


@router.get("/{org_id}/members", response_model=MemberListResponse)
async def list_members(
    access: RequireAnyRole,
    service: OrgServiceDep,
) -> MemberListResponse:
    """List the organization's members."""
    members = await service.list_members(access)
    return MemberListResponse(
        members=[MemberResponse(**m.model_dump(exclude={"org_id"})) for m in members]
    )


@router.post("/{org_id}/members", response_model=MemberResponse, status_code=201)
async def add_member(
    body: AddMemberRequest,
    access: RequireAdmin,
    service: OrgServiceDep,
) -> MemberResponse:
    """Add a registered user by email (admin only)."""
    membership = await service.add_member(access, body.email, body.role)
    return MemberResponse(**membership.model_dump(exclude={"org_id"}), email=body.email)


@router.put("/{org_id}/members/{user_id}", response_model=MemberResponse)
async def update_member_role(
    user_id: UUID,
    body: UpdateRoleRequest,
    access: RequireAdmin,
    service: OrgServiceDep,
) -> MemberResponse:
    """Change a member's role (admin only). The last admin cannot be demoted."""
    membership = await service.change_role(access, user_id, body.role)
    return MemberResponse(**membership.model_dump(exclude={"org_id"}))


@router.delete("/{org_id}/members/{user_id}")
async def remove_member(
    user_id: UUID,
    access: RequireAdmin,
    service: OrgServiceDep,
) -> dict[str, str]:
    """Remove a member (admin only). The last admin cannot be removed."""
    await service.remove_member(access, user_id)
    return {"message": "Member removed successfully"}
