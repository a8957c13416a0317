"""PostgreSQL implementation of MembershipRepository."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any
from uuid import UUID

import asyncpg
import structlog

from statusboard.adapters.db.app_db import AppDatabase
from statusboard.core.auth.types import Organization, OrgMember, OrgMembership, OrgRole
from statusboard.core.exceptions import NotFound, StorageFailure
from statusboard.core.membership import REMOVAL, MembershipInvariantGuard, Removal

logger = structlog.get_logger()

# Users live in the identity provider's schema
USERS_TABLE = "auth.users"

_ORG_COLUMNS = "id, name, slug, description, logo_url, website_url, created_at"
_UPDATABLE_ORG_COLUMNS = frozenset({"name", "slug", "description", "website_url", "logo_url"})


class PostgresMembershipRepository:
    """PostgreSQL implementation of the membership repository.

    Role changes and removals lock the organization row before reading its
    admins, so concurrent mutations of the same organization serialize and
    each one sees the admin set left by the previous commit.
    """

    def __init__(self, db: AppDatabase, guard: MembershipInvariantGuard | None = None) -> None:
        """Initialize with database connection.

        Args:
            db: Application database instance.
            guard: Last-admin guard. Uses a default instance if not provided.
        """
        self._db = db
        self._guard = guard or MembershipInvariantGuard()

    def _row_to_org(self, row: dict[str, Any]) -> Organization:
        """Convert database row to Organization model."""
        return Organization(
            id=row["id"],
            name=row["name"],
            slug=row["slug"],
            description=row.get("description"),
            logo_url=row.get("logo_url"),
            website_url=row.get("website_url"),
            created_at=row["created_at"],
        )

    def _row_to_membership(self, row: dict[str, Any]) -> OrgMembership:
        """Convert database row to OrgMembership model."""
        return OrgMembership(
            org_id=row["organization_id"],
            user_id=row["user_id"],
            role=OrgRole(row["role"]),
            joined_at=row["joined_at"],
            invited_by=row.get("invited_by"),
        )

    # Membership operations
    async def get_membership(self, org_id: UUID, user_id: UUID) -> OrgMembership | None:
        """Get a user's membership in an organization."""
        row = await self._db.fetch_one(
            """SELECT organization_id, user_id, role, joined_at, invited_by
               FROM organization_members
               WHERE organization_id = $1 AND user_id = $2""",
            org_id,
            user_id,
        )
        return self._row_to_membership(row) if row else None

    async def list_members(self, org_id: UUID) -> list[OrgMember]:
        """List all members of an organization with their emails."""
        rows = await self._db.fetch_all(
            f"""SELECT m.organization_id, m.user_id, m.role, m.joined_at, m.invited_by,
                       u.email
                FROM organization_members m
                LEFT JOIN {USERS_TABLE} u ON u.id = m.user_id
                WHERE m.organization_id = $1
                ORDER BY m.joined_at""",
            org_id,
        )
        return [
            OrgMember(
                **self._row_to_membership(row).model_dump(),
                email=row.get("email") or "Unknown",
            )
            for row in rows
        ]

    async def add_member(
        self,
        org_id: UUID,
        user_id: UUID,
        role: OrgRole,
        invited_by: UUID | None = None,
    ) -> OrgMembership:
        """Insert a membership row."""
        row = await self._db.fetch_one(
            """INSERT INTO organization_members
                   (organization_id, user_id, role, invited_by, joined_at)
               VALUES ($1, $2, $3, $4, $5)
               RETURNING organization_id, user_id, role, joined_at, invited_by""",
            org_id,
            user_id,
            role.value,
            invited_by,
            datetime.now(UTC),
        )
        if row is None:
            raise StorageFailure("INSERT RETURNING returned no row for organization_members")
        return self._row_to_membership(row)

    async def change_role(self, org_id: UUID, user_id: UUID, role: OrgRole) -> OrgMembership:
        """Change a member's role under the organization lock."""
        async with self._db.transaction() as conn:
            current = await self._lock_and_check(conn, org_id, user_id, role)
            row = await conn.fetchrow(
                """UPDATE organization_members SET role = $3
                   WHERE organization_id = $1 AND user_id = $2
                   RETURNING organization_id, user_id, role, joined_at, invited_by""",
                org_id,
                user_id,
                role.value,
            )
        if row is None:
            raise StorageFailure("UPDATE RETURNING returned no row for organization_members")

        logger.info(
            "membership_role_changed",
            org_id=str(org_id),
            user_id=str(user_id),
            old_role=current.value,
            new_role=role.value,
        )
        return self._row_to_membership(dict(row))

    async def remove_member(self, org_id: UUID, user_id: UUID) -> None:
        """Remove a member under the organization lock."""
        async with self._db.transaction() as conn:
            current = await self._lock_and_check(conn, org_id, user_id, REMOVAL)
            await conn.execute(
                "DELETE FROM organization_members WHERE organization_id = $1 AND user_id = $2",
                org_id,
                user_id,
            )

        logger.info(
            "membership_removed",
            org_id=str(org_id),
            user_id=str(user_id),
            old_role=current.value,
        )

    async def _lock_and_check(
        self,
        conn: asyncpg.Connection[asyncpg.Record],
        org_id: UUID,
        user_id: UUID,
        proposed: OrgRole | Removal,
    ) -> OrgRole:
        """Lock the organization, load the target and run the last-admin guard.

        Returns:
            The target's role before the mutation.
        """
        await conn.execute("SELECT id FROM organizations WHERE id = $1 FOR UPDATE", org_id)

        target = await conn.fetchrow(
            """SELECT role FROM organization_members
               WHERE organization_id = $1 AND user_id = $2""",
            org_id,
            user_id,
        )
        if target is None:
            raise NotFound("Member not found")
        current_role = OrgRole(target["role"])

        if self._guard.applies(current_role, proposed):
            admins = await conn.fetch(
                """SELECT user_id FROM organization_members
                   WHERE organization_id = $1 AND role = 'admin'""",
                org_id,
            )
            self._guard.check_mutation(
                org_id,
                user_id,
                current_role,
                proposed,
                {a["user_id"] for a in admins},
            )
        return current_role

    async def find_user_id_by_email(self, email: str) -> UUID | None:
        """Resolve a registered user's id from their email."""
        row = await self._db.fetch_one(
            f"SELECT id FROM {USERS_TABLE} WHERE lower(email) = lower($1)",
            email,
        )
        return row["id"] if row else None

    # Organization operations
    async def get_org_by_id(self, org_id: UUID) -> Organization | None:
        """Get organization by ID."""
        row = await self._db.fetch_one(
            f"SELECT {_ORG_COLUMNS} FROM organizations WHERE id = $1",
            org_id,
        )
        return self._row_to_org(row) if row else None

    async def get_org_by_slug(self, slug: str) -> Organization | None:
        """Get organization by slug."""
        row = await self._db.fetch_one(
            f"SELECT {_ORG_COLUMNS} FROM organizations WHERE slug = $1",
            slug,
        )
        return self._row_to_org(row) if row else None

    async def get_user_orgs(self, user_id: UUID) -> list[tuple[Organization, OrgRole]]:
        """Get all organizations a user belongs to with their roles."""
        rows = await self._db.fetch_all(
            """SELECT o.id, o.name, o.slug, o.description, o.logo_url, o.website_url,
                      o.created_at, m.role
               FROM organizations o
               JOIN organization_members m ON o.id = m.organization_id
               WHERE m.user_id = $1
               ORDER BY o.name""",
            user_id,
        )
        return [(self._row_to_org(row), OrgRole(row["role"])) for row in rows]

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
        async with self._db.transaction() as conn:
            org_row = await conn.fetchrow(
                f"""INSERT INTO organizations (name, slug, description, website_url, logo_url)
                    VALUES ($1, $2, $3, $4, $5)
                    RETURNING {_ORG_COLUMNS}""",
                name,
                slug,
                description,
                website_url,
                logo_url,
            )
            if org_row is None:
                raise StorageFailure("INSERT RETURNING returned no row for organizations")
            await conn.execute(
                """INSERT INTO organization_members (organization_id, user_id, role, joined_at)
                   VALUES ($1, $2, 'admin', $3)""",
                org_row["id"],
                admin_user_id,
                datetime.now(UTC),
            )

        org = self._row_to_org(dict(org_row))
        logger.info("organization_created", org_id=str(org.id), slug=org.slug)
        return org

    async def update_org(self, org_id: UUID, changes: dict[str, str | None]) -> Organization | None:
        """Apply column changes to an organization."""
        unknown = set(changes) - _UPDATABLE_ORG_COLUMNS
        if unknown:
            raise ValueError(f"Cannot update organization columns: {sorted(unknown)}")
        if not changes:
            return await self.get_org_by_id(org_id)

        columns = list(changes)
        assignments = ", ".join(f"{col} = ${idx}" for idx, col in enumerate(columns, start=2))
        row = await self._db.fetch_one(
            f"""UPDATE organizations SET {assignments}
                WHERE id = $1
                RETURNING {_ORG_COLUMNS}""",
            org_id,
            *(changes[col] for col in columns),
        )
        return self._row_to_org(row) if row else None

    async def delete_org(self, org_id: UUID) -> bool:
        """Delete an organization."""
        result = await self._db.execute("DELETE FROM organizations WHERE id = $1", org_id)
        return result == "DELETE 1"
