"""Internal operations routes: service inventory and the Prometheus target sync."""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException

from statusboard.adapters.metrics.target_sync import PrometheusTargetSync
from statusboard.entrypoints.api.deps import get_service_inventory, get_target_sync
from statusboard.services.status import ServiceInventory

router = APIRouter(prefix="/internal", tags=["internal"])

TargetSyncDep = Annotated[PrometheusTargetSync | None, Depends(get_target_sync)]
InventoryDep = Annotated[ServiceInventory, Depends(get_service_inventory)]


@router.get("/services")
async def list_services(inventory: InventoryDep) -> dict[str, Any]:
    """List every organization with its services and the totals."""
    return await inventory.list_by_organization()


@router.get("/prometheus/status")
async def sync_status(target_sync: TargetSyncDep) -> dict[str, Any]:
    """Report whether service discovery sync is enabled and running."""
    if target_sync is None:
        return {
            "enabled": False,
            "message": "Prometheus sync is disabled. Set PROMETHEUS_SYNC_ENABLED=true to enable.",
        }
    return target_sync.status()


@router.post("/prometheus/sync")
async def trigger_sync(target_sync: TargetSyncDep) -> dict[str, Any]:
    """Run one sync immediately."""
    if target_sync is None:
        raise HTTPException(status_code=503, detail="Prometheus sync is not enabled")

    result = await target_sync.sync_now()
    if not result["success"]:
        raise HTTPException(status_code=500, detail=result.get("error", "Sync failed"))
    return result
