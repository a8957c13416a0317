"""Public status page and internal service inventory services."""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

import structlog

from statusboard.adapters.db.app_db import AppDatabase
from statusboard.core.exceptions import NotFound
from statusboard.core.metrics.bridge import MetricsBridge
from statusboard.core.metrics.stats import summarize
from statusboard.core.metrics.types import MetricsSummary, ServiceMetrics

logger = structlog.get_logger()

RECENT_INCIDENT_LIMIT = 10

# Worst first
_SEVERITY = ("major_outage", "partial_outage", "degraded_performance")


def overall_status(services: list[dict[str, Any]]) -> str:
    """Roll individual service statuses up into one page-level status."""
    statuses = {s.get("current_status") for s in services}
    for status in _SEVERITY:
        if status in statuses:
            return status
    return "operational"


@dataclass
class ServiceDetail:
    """Everything shown on the public service-detail page."""

    organization: dict[str, Any]
    service: dict[str, Any]
    metrics: ServiceMetrics
    summary: MetricsSummary
    incidents: list[dict[str, Any]] = field(default_factory=list)


class PublicStatusService:
    """Assembles unauthenticated status views."""

    def __init__(
        self,
        db: AppDatabase,
        bridge: MetricsBridge,
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
    ):
        self.db = db
        self.bridge = bridge
        self._clock = clock

    async def get_status_page(self, org_slug: str) -> dict[str, Any]:
        """Organization, its services, incidents, maintenances and the rolled-up status.

        Active incidents are newest first, each with its affected services and
        its updates newest first. Recent incidents are the last ten resolved.
        Upcoming maintenances are scheduled or in progress and not yet ended.
        """
        organization = await self.db.get_public_organization(org_slug)
        if not organization:
            raise NotFound("Organization not found")

        org_id = organization["id"]
        services = await self.db.list_public_services(org_id)
        active_incidents = await self.db.list_active_incidents(org_id)
        recent_incidents = await self.db.list_recent_incidents(org_id, limit=RECENT_INCIDENT_LIMIT)
        maintenances = await self.db.list_upcoming_maintenances(org_id, self._clock())

        return {
            "organization": organization,
            "overall_status": overall_status(services),
            "services": services,
            "active_incidents": active_incidents,
            "recent_incidents": recent_incidents,
            "upcoming_maintenances": maintenances,
        }

    async def get_service_detail(
        self,
        org_slug: str,
        service_id: UUID,
        time_range: str | None = None,
    ) -> ServiceDetail:
        """Resolve organization, service, recent incidents and metrics.

        Incident and metrics failures degrade to empty data; only a missing
        organization or service fails the request.
        """
        organization = await self.db.get_public_organization(org_slug)
        if not organization:
            raise NotFound("Organization not found")

        service = await self.db.get_service(service_id, organization["id"])
        if not service:
            raise NotFound("Service not found")

        try:
            incidents = await self.db.list_service_incidents(service_id, limit=RECENT_INCIDENT_LIMIT)
        except Exception as e:
            logger.error("service_incidents_failed", service_id=str(service_id), error=str(e))
            incidents = []

        metrics = await self.bridge.get_service_metrics(str(service_id), time_range)

        return ServiceDetail(
            organization=organization,
            service=service,
            incidents=incidents,
            metrics=metrics,
            summary=summarize(metrics),
        )


class ServiceInventory:
    """Every organization with its services, for internal tooling."""

    def __init__(self, db: AppDatabase):
        self.db = db

    async def list_by_organization(self) -> dict[str, Any]:
        """Group all services under their organization.

        An organization whose services cannot be read is left out of
        ``data`` but still counted in ``total_organizations``.
        """
        organizations = await self.db.list_organizations()

        data = []
        for org in organizations:
            try:
                services = await self.db.list_services(org["id"])
            except Exception as e:
                logger.error("inventory_services_failed", org_id=str(org["id"]), error=str(e))
                continue
            data.append(
                {
                    "organization": {"id": org["id"], "name": org["name"], "slug": org["slug"]},
                    "services": services,
                    "service_count": len(services),
                }
            )

        logger.info("inventory_listed", organizations=len(organizations))
        return {
            "total_organizations": len(organizations),
            "total_services": sum(entry["service_count"] for entry in data),
            "data": data,
        }
