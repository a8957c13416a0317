"""Public status page routes. No authentication."""

from __future__ import annotations

from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from statusboard.core.metrics.types import MetricKind, MetricsSummary, ServiceMetrics
from statusboard.entrypoints.api.deps import get_public_status_service
from statusboard.services.status import PublicStatusService

router = APIRouter(prefix="/public/status", tags=["public"])

StatusServiceDep = Annotated[PublicStatusService, Depends(get_public_status_service)]


class StatusPageResponse(BaseModel):
    """Organization status page."""

    organization: dict[str, Any]
    overall_status: str
    services: list[dict[str, Any]]
    active_incidents: list[dict[str, Any]]
    recent_incidents: list[dict[str, Any]]
    upcoming_maintenances: list[dict[str, Any]]


class ServiceDetailResponse(BaseModel):
    """Service detail with incidents and metrics."""

    organization: dict[str, Any]
    service: dict[str, Any]
    incidents: list[dict[str, Any]]
    metrics: dict[str, Any]
    summary: MetricsSummary


def metrics_payload(metrics: ServiceMetrics) -> dict[str, Any]:
    """Flatten metrics into ``{kind: [[ts_ms, value], ...]}`` plus status tags."""
    payload: dict[str, Any] = {
        "timeRange": metrics.time_range.value,
        "step": metrics.step,
        "status": {},
    }
    for kind in MetricKind:
        series = metrics.series.get(kind)
        payload[kind.value] = [[p.timestamp, p.value] for p in metrics.points(kind)]
        payload["status"][kind.value] = series.status.value if series else None
    payload["current"] = metrics.current.model_dump() if metrics.current else None
    payload["error"] = metrics.error
    return payload


@router.get("/{org_slug}", response_model=StatusPageResponse)
async def get_status_page(
    org_slug: str,
    service: StatusServiceDep,
) -> StatusPageResponse:
    """Get an organization's public status page."""
    page = await service.get_status_page(org_slug)
    return StatusPageResponse(**page)


@router.get("/{org_slug}/{service_id}", response_model=ServiceDetailResponse)
async def get_service_detail(
    org_slug: str,
    service_id: UUID,
    service: StatusServiceDep,
    time_range: Annotated[str | None, Query(alias="timeRange")] = None,
) -> ServiceDetailResponse:
    """Get one service with recent incidents and metrics.

    Unknown ``timeRange`` values fall back to 1h. Metrics failures are
    reported inside ``metrics`` and never fail the request.
    """
    detail = await service.get_service_detail(org_slug, service_id, time_range)
    return ServiceDetailResponse(
        organization=detail.organization,
        service=detail.service,
        incidents=detail.incidents,
        metrics=metrics_payload(detail.metrics),
        summary=detail.summary,
    )
