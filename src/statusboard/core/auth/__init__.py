"""Auth domain types and protocols."""

from statusboard.core.auth.identity import IdentityVerifier
from statusboard.core.auth.repository import MembershipRepository
from statusboard.core.auth.types import (
    ADMIN_ONLY,
    ANY_ROLE,
    MEMBER_OR_ADMIN,
    Organization,
    OrganizationPatch,
    OrgMember,
    OrgMembership,
    OrgRole,
    Principal,
)

__all__ = [
    "Principal",
    "Organization",
    "OrganizationPatch",
    "OrgMembership",
    "OrgMember",
    "OrgRole",
    "ANY_ROLE",
    "MEMBER_OR_ADMIN",
    "ADMIN_ONLY",
    "IdentityVerifier",
    "MembershipRepository",
]
