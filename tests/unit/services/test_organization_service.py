"""Unit tests for OrganizationService."""

from __future__ import annotations

import uuid

import pytest

from statusboard.core.access import OrgAccessContext
from statusboard.core.auth.types import OrganizationPatch, OrgRole, Principal
from statusboard.core.exceptions import NotFound, ValidationCode, ValidationError
from statusboard.services.organization import OrganizationService, generate_slug
from tests.fixtures.mocks import InMemoryMembershipRepository


class TestGenerateSlug:
    """Tests for generate_slug."""

    @pytest.mark.parametrize(
        ("name", "slug"),
        [
            ("Acme Corp", "acme-corp"),
            ("  Acme & Sons, Inc.  ", "acme-sons-inc"),
            ("ACME_2024", "acme-2024"),
            ("!!!", ""),
        ],
    )
    def test_slug(self, name: str, slug: str) -> None:
        """Test slug normalization."""
        assert generate_slug(name) == slug

    def test_truncated(self) -> None:
        """Test the 50 character cap."""
        assert len(generate_slug("a" * 80)) == 50


class TestOrganizationService:
    """Tests for OrganizationService."""

    @pytest.fixture
    def service(self, memory_repo: InMemoryMembershipRepository) -> OrganizationService:
        """Return an organization service over the in-memory repo."""
        return OrganizationService(memory_repo)

    @pytest.fixture
    async def access(
        self, service: OrganizationService, principal: Principal
    ) -> OrgAccessContext:
        """Create an organization owned by the principal."""
        org = await service.create_organization(principal, name="Acme Corp")
        return OrgAccessContext(principal=principal, org_id=org.id, role=OrgRole.ADMIN)

    async def test_create_makes_creator_admin(
        self,
        service: OrganizationService,
        memory_repo: InMemoryMembershipRepository,
        principal: Principal,
    ) -> None:
        """Test that the creator becomes the first admin."""
        org = await service.create_organization(principal, name="Acme Corp")

        assert org.slug == "acme-corp"
        assert memory_repo.admins(org.id) == {principal.user_id}
        assert await service.list_for_user(principal) == [(org, OrgRole.ADMIN)]

    async def test_create_duplicate_slug(
        self, service: OrganizationService, principal: Principal
    ) -> None:
        """Test that names colliding on slug are rejected."""
        await service.create_organization(principal, name="Acme Corp")

        with pytest.raises(ValidationError) as exc_info:
            await service.create_organization(principal, name="acme  corp!")

        assert exc_info.value.code == ValidationCode.SLUG_TAKEN

    @pytest.mark.parametrize("name", ["", "   ", "???"])
    async def test_create_requires_name(
        self, service: OrganizationService, principal: Principal, name: str
    ) -> None:
        """Test that a name without slug characters is rejected."""
        with pytest.raises(ValidationError) as exc_info:
            await service.create_organization(principal, name=name)

        assert exc_info.value.code == ValidationCode.MISSING_FIELD

    async def test_update_only_touches_set_fields(
        self, service: OrganizationService, access: OrgAccessContext
    ) -> None:
        """Test partial updates: absent fields are preserved, None clears."""
        await service.update_organization(
            access,
            OrganizationPatch(description="Old", website_url="https://acme.example.com"),
        )

        org = await service.update_organization(access, OrganizationPatch(description=None))

        assert org.description is None
        assert org.website_url == "https://acme.example.com"
        assert org.name == "Acme Corp"

    async def test_rename_regenerates_slug(
        self, service: OrganizationService, access: OrgAccessContext
    ) -> None:
        """Test that a new name also changes the slug."""
        org = await service.update_organization(access, OrganizationPatch(name="Acme Cloud"))

        assert org.slug == "acme-cloud"

    async def test_rename_to_taken_slug(
        self,
        service: OrganizationService,
        access: OrgAccessContext,
        principal: Principal,
    ) -> None:
        """Test that renaming onto another org's slug is rejected."""
        await service.create_organization(principal, name="Globex")

        with pytest.raises(ValidationError) as exc_info:
            await service.update_organization(access, OrganizationPatch(name="Globex"))

        assert exc_info.value.code == ValidationCode.SLUG_TAKEN

    @pytest.mark.parametrize("name", ["!!!", "   "])
    async def test_rename_without_slug_characters_rejected(
        self, service: OrganizationService, access: OrgAccessContext, name: str
    ) -> None:
        """Test that a rename never leaves the organization with an empty slug."""
        with pytest.raises(ValidationError) as exc_info:
            await service.update_organization(access, OrganizationPatch(name=name))

        assert exc_info.value.code == ValidationCode.MISSING_FIELD
        org = await service.get_organization(access)
        assert org.name == "Acme Corp"
        assert org.slug == "acme-corp"

    async def test_delete(
        self, service: OrganizationService, access: OrgAccessContext
    ) -> None:
        """Test delete and that a second delete is NotFound."""
        await service.delete_organization(access)

        with pytest.raises(NotFound):
            await service.get_organization(access)
        with pytest.raises(NotFound):
            await service.delete_organization(access)


class TestMembershipManagement:
    """Tests for the membership operations of OrganizationService."""

    @pytest.fixture
    def service(self, memory_repo: InMemoryMembershipRepository) -> OrganizationService:
        """Return an organization service over the in-memory repo."""
        return OrganizationService(memory_repo)

    @pytest.fixture
    def access(
        self,
        memory_repo: InMemoryMembershipRepository,
        principal: Principal,
        org_id: uuid.UUID,
    ) -> OrgAccessContext:
        """Seed an org where the principal is the only admin."""
        memory_repo.seed(org_id, {principal.user_id: OrgRole.ADMIN})
        return OrgAccessContext(principal=principal, org_id=org_id, role=OrgRole.ADMIN)

    async def test_add_member_defaults_to_viewer(
        self,
        service: OrganizationService,
        memory_repo: InMemoryMembershipRepository,
        access: OrgAccessContext,
    ) -> None:
        """Test adding a registered user by email."""
        user_id = uuid.uuid4()
        memory_repo.users["new@example.com"] = user_id

        membership = await service.add_member(access, "new@example.com")

        assert membership.role == OrgRole.VIEWER
        assert membership.invited_by == access.user_id

    async def test_add_unknown_user(
        self, service: OrganizationService, access: OrgAccessContext
    ) -> None:
        """Test that an unregistered email is NotFound."""
        with pytest.raises(NotFound):
            await service.add_member(access, "ghost@example.com", "member")

    async def test_add_existing_member(
        self,
        service: OrganizationService,
        memory_repo: InMemoryMembershipRepository,
        access: OrgAccessContext,
    ) -> None:
        """Test that adding twice is rejected."""
        memory_repo.users["owner@example.com"] = access.user_id

        with pytest.raises(ValidationError) as exc_info:
            await service.add_member(access, "owner@example.com", "member")

        assert exc_info.value.code == ValidationCode.ALREADY_MEMBER

    @pytest.mark.parametrize("role", ["owner", "Admin", ""])
    async def test_invalid_role_rejected(
        self,
        service: OrganizationService,
        memory_repo: InMemoryMembershipRepository,
        access: OrgAccessContext,
        role: str,
    ) -> None:
        """Test that role strings outside the enumeration are rejected."""
        memory_repo.users["new@example.com"] = uuid.uuid4()

        with pytest.raises(ValidationError) as exc_info:
            await service.add_member(access, "new@example.com", role)

        assert exc_info.value.code == ValidationCode.INVALID_ROLE

    async def test_demote_sole_admin_denied(
        self, service: OrganizationService, access: OrgAccessContext
    ) -> None:
        """Test that the sole admin cannot demote themselves."""
        with pytest.raises(ValidationError) as exc_info:
            await service.change_role(access, access.user_id, "member")

        assert exc_info.value.code == ValidationCode.LAST_ADMIN

    async def test_promote_then_demote(
        self,
        service: OrganizationService,
        memory_repo: InMemoryMembershipRepository,
        access: OrgAccessContext,
    ) -> None:
        """Test that with a second admin the first can step down."""
        other = uuid.uuid4()
        await memory_repo.add_member(access.org_id, other, OrgRole.MEMBER)

        await service.change_role(access, other, "admin")
        await service.change_role(access, access.user_id, "viewer")

        assert memory_repo.admins(access.org_id) == {other}

    async def test_mutations_use_authorized_org(
        self,
        service: OrganizationService,
        memory_repo: InMemoryMembershipRepository,
        access: OrgAccessContext,
        other_org_id: uuid.UUID,
    ) -> None:
        """Test that a user id from another org is not found in the authorized org."""
        stranger = uuid.uuid4()
        memory_repo.seed(other_org_id, {stranger: OrgRole.VIEWER})

        with pytest.raises(NotFound):
            await service.remove_member(access, stranger)

        assert stranger in memory_repo.members[other_org_id]
