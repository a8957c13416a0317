"""Application database adapter using asyncpg."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any
from uuid import UUID

import asyncpg
import structlog

logger = structlog.get_logger()


class AppDatabase:
    """Application database for organizations, memberships, services and incidents."""

    def __init__(self, dsn: str, min_size: int = 2, max_size: int = 10):
        """Initialize the app database adapter."""
        self.dsn = dsn
        self.min_size = min_size
        self.max_size = max_size
        self.pool: asyncpg.Pool[asyncpg.Connection[asyncpg.Record]] | None = None

    async def connect(self) -> None:
        """Create connection pool."""
        self.pool = await asyncpg.create_pool(
            self.dsn,
            min_size=self.min_size,
            max_size=self.max_size,
            command_timeout=60,
        )
        logger.info("app_database_connected", dsn=self.dsn.split("@")[-1])

    async def close(self) -> None:
        """Close connection pool."""
        if self.pool:
            await self.pool.close()
            logger.info("app_database_disconnected")

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[asyncpg.Connection[asyncpg.Record]]:
        """Acquire a connection from the pool."""
        if self.pool is None:
            raise RuntimeError("Database pool not initialized")
        async with self.pool.acquire() as conn:
            yield conn

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[asyncpg.Connection[asyncpg.Record]]:
        """Acquire a connection and run the block in one transaction.

        The transaction commits when the block exits normally and rolls back
        if it raises.
        """
        async with self.acquire() as conn:
            async with conn.transaction():
                yield conn

    async def fetch_one(self, query: str, *args: Any) -> dict[str, Any] | None:
        """Fetch a single row."""
        async with self.acquire() as conn:
            row = await conn.fetchrow(query, *args)
            if row:
                return dict(row)
            return None

    async def fetch_all(self, query: str, *args: Any) -> list[dict[str, Any]]:
        """Fetch all rows."""
        async with self.acquire() as conn:
            rows = await conn.fetch(query, *args)
            return [dict(row) for row in rows]

    async def execute(self, query: str, *args: Any) -> str:
        """Execute a query and return status."""
        async with self.acquire() as conn:
            result: str = await conn.execute(query, *args)
            return result

    # Public status page reads
    async def get_public_organization(self, slug: str) -> dict[str, Any] | None:
        """Get the public fields of an organization by slug."""
        return await self.fetch_one(
            """SELECT id, name, slug, description, logo_url, website_url
               FROM organizations WHERE slug = $1""",
            slug,
        )

    async def list_public_services(self, org_id: UUID) -> list[dict[str, Any]]:
        """List an organization's services in display order."""
        return await self.fetch_all(
            """SELECT id, name, description, current_status, display_order
               FROM services
               WHERE organization_id = $1
               ORDER BY display_order""",
            org_id,
        )

    async def get_service(self, service_id: UUID, org_id: UUID) -> dict[str, Any] | None:
        """Get a service, scoped to its organization."""
        return await self.fetch_one(
            """SELECT id, name, description, current_status, target_url, display_order
               FROM services
               WHERE id = $1 AND organization_id = $2""",
            service_id,
            org_id,
        )

    async def list_service_incidents(
        self, service_id: UUID, limit: int = 10
    ) -> list[dict[str, Any]]:
        """List the most recent incidents affecting a service, with their updates."""
        incidents = await self.fetch_all(
            """SELECT i.id, i.title, i.description, i.status, i.impact,
                      i.started_at, i.resolved_at
               FROM incidents i
               JOIN incident_services s ON s.incident_id = i.id
               WHERE s.service_id = $1
               ORDER BY i.started_at DESC
               LIMIT $2""",
            service_id,
            limit,
        )
        return await self._attach_updates(incidents)

    async def list_active_incidents(self, org_id: UUID) -> list[dict[str, Any]]:
        """Unresolved incidents, newest first, with affected services and updates."""
        incidents = await self.fetch_all(
            """SELECT id, title, description, status, impact, started_at, resolved_at
               FROM incidents
               WHERE organization_id = $1 AND status <> 'resolved'
               ORDER BY started_at DESC""",
            org_id,
        )
        incidents = await self._attach_affected_services(
            incidents, "incident_services", "incident_id"
        )
        return await self._attach_updates(incidents)

    async def list_recent_incidents(self, org_id: UUID, limit: int = 10) -> list[dict[str, Any]]:
        """Most recently resolved incidents."""
        return await self.fetch_all(
            """SELECT id, title, status, impact, started_at, resolved_at
               FROM incidents
               WHERE organization_id = $1 AND status = 'resolved'
               ORDER BY resolved_at DESC
               LIMIT $2""",
            org_id,
            limit,
        )

    async def list_upcoming_maintenances(
        self, org_id: UUID, now: datetime
    ) -> list[dict[str, Any]]:
        """Scheduled or in-progress maintenances that have not ended, soonest first."""
        maintenances = await self.fetch_all(
            """SELECT id, title, description, status, scheduled_start, scheduled_end
               FROM maintenances
               WHERE organization_id = $1
                 AND status IN ('scheduled', 'in_progress')
                 AND scheduled_end >= $2
               ORDER BY scheduled_start""",
            org_id,
            now,
        )
        return await self._attach_affected_services(
            maintenances, "maintenance_services", "maintenance_id"
        )

    async def _attach_updates(self, incidents: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Add each incident's updates, newest first, as ``updates``."""
        if not incidents:
            return incidents

        updates = await self.fetch_all(
            """SELECT id, incident_id, status, message, created_at
               FROM incident_updates
               WHERE incident_id = ANY($1::uuid[])
               ORDER BY created_at DESC""",
            [i["id"] for i in incidents],
        )
        by_incident: dict[UUID, list[dict[str, Any]]] = {}
        for update in updates:
            by_incident.setdefault(update.pop("incident_id"), []).append(update)
        for incident in incidents:
            incident["updates"] = by_incident.get(incident["id"], [])
        return incidents

    async def _attach_affected_services(
        self,
        rows: list[dict[str, Any]],
        link_table: str,
        link_column: str,
    ) -> list[dict[str, Any]]:
        """Add the linked services (id, name) of each row as ``affected_services``."""
        if not rows:
            return rows

        # link_table and link_column are fixed identifiers, never request input
        links = await self.fetch_all(
            f"""SELECT l.{link_column} AS owner_id, s.id, s.name
                FROM {link_table} l
                JOIN services s ON s.id = l.service_id
                WHERE l.{link_column} = ANY($1::uuid[])
                ORDER BY s.display_order""",
            [r["id"] for r in rows],
        )
        by_owner: dict[UUID, list[dict[str, Any]]] = {}
        for link in links:
            by_owner.setdefault(link.pop("owner_id"), []).append(link)
        for row in rows:
            row["affected_services"] = by_owner.get(row["id"], [])
        return rows

    # Service inventory and target sync reads
    async def list_organizations(self) -> list[dict[str, Any]]:
        """List all organizations (id, name, slug)."""
        return await self.fetch_all("SELECT id, name, slug FROM organizations ORDER BY name")

    async def list_services(self, org_id: UUID) -> list[dict[str, Any]]:
        """List every service of an organization in display order."""
        return await self.fetch_all(
            """SELECT id, organization_id, name, description, current_status,
                      target_url, display_order, created_at
               FROM services
               WHERE organization_id = $1
               ORDER BY display_order""",
            org_id,
        )

    async def list_monitored_services(self, org_id: UUID) -> list[dict[str, Any]]:
        """List an organization's services that have a probe target."""
        return await self.fetch_all(
            """SELECT id, name, target_url, current_status
               FROM services
               WHERE organization_id = $1 AND target_url IS NOT NULL AND target_url <> ''
               ORDER BY display_order""",
            org_id,
        )
