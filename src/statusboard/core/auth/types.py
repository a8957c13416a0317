"""Auth domain types."""

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from statusboard.core.exceptions import ValidationCode, ValidationError


class OrgRole(str, Enum):
    """Organization membership roles."""

    ADMIN = "admin"
    MEMBER = "member"
    VIEWER = "viewer"

    @classmethod
    def parse(cls, value: str) -> "OrgRole":
        """Parse a wire-level role string.

        Raises:
            ValidationError: INVALID_ROLE for anything but admin/member/viewer.
        """
        try:
            return cls(value)
        except ValueError:
            raise ValidationError(
                ValidationCode.INVALID_ROLE,
                "Invalid role. Must be one of: admin, member, viewer",
            ) from None


# Role gates
ANY_ROLE = frozenset({OrgRole.ADMIN, OrgRole.MEMBER, OrgRole.VIEWER})
MEMBER_OR_ADMIN = frozenset({OrgRole.ADMIN, OrgRole.MEMBER})
ADMIN_ONLY = frozenset({OrgRole.ADMIN})


class Principal(BaseModel):
    """Verified caller identity returned by the identity provider."""

    model_config = ConfigDict(frozen=True)

    user_id: UUID
    email: str | None = None


class Organization(BaseModel):
    """Organization domain model."""

    id: UUID
    name: str
    slug: str
    description: str | None = None
    logo_url: str | None = None
    website_url: str | None = None
    created_at: datetime


class OrgMembership(BaseModel):
    """User's membership in an organization."""

    org_id: UUID
    user_id: UUID
    role: OrgRole
    joined_at: datetime
    invited_by: UUID | None = None


class OrgMember(OrgMembership):
    """Membership joined with the member's email, for listings."""

    email: str = "Unknown"


class OrganizationPatch(BaseModel):
    """Partial organization update.

    Only fields explicitly present in the request are applied; a field set
    to None clears the column, an absent field leaves it untouched.
    """

    name: str | None = None
    description: str | None = None
    website_url: str | None = None
    logo_url: str | None = None

    def changes(self) -> dict[str, str | None]:
        """Return the explicitly-set fields."""
        changes = self.model_dump(include=self.model_fields_set)
        if "name" in changes and not changes["name"]:
            # An empty name never replaces an existing one
            del changes["name"]
        return changes
