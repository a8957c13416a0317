"""Prometheus service discovery sync.

Writes every monitored service as a Prometheus ``file_sd`` target group so
the probe exporter picks it up, either periodically or on demand.
"""

import asyncio
import json
import os
import re
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import structlog

from statusboard.adapters.db.app_db import AppDatabase

logger = structlog.get_logger()

_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class TargetSyncConfig:
    """Configuration for the target sync job.

    Attributes:
        services_file: Path of the file_sd JSON file.
        interval_seconds: Delay between periodic syncs.
    """

    services_file: Path = Path("./prometheus-services.json")
    interval_seconds: float = 30.0


def format_target_groups(services: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Render services as file_sd target groups."""
    return [
        {
            "targets": [service["target_url"]],
            "labels": {
                "org_id": str(service["organization_id"]),
                "org_name": service["organization_slug"],
                "service_id": str(service["id"]),
                "service_name": _WHITESPACE.sub("_", service["name"].lower()),
            },
        }
        for service in services
    ]


class PrometheusTargetSync:
    """Keeps the Prometheus file_sd target list in step with the database."""

    def __init__(self, db: AppDatabase, config: TargetSyncConfig | None = None) -> None:
        """Initialize the sync job.

        Args:
            db: Application database.
            config: Sync settings. Uses defaults if not provided.
        """
        self._db = db
        self.config = config or TargetSyncConfig()
        self._task: asyncio.Task[None] | None = None
        self.config.services_file.parent.mkdir(parents=True, exist_ok=True)

    @property
    def running(self) -> bool:
        """Whether the periodic loop is active."""
        return self._task is not None and not self._task.done()

    async def fetch_services(self) -> list[dict[str, Any]]:
        """Collect monitored services across all organizations.

        An organization whose services cannot be read is skipped.
        """
        services: list[dict[str, Any]] = []
        for org in await self._db.list_organizations():
            try:
                rows = await self._db.list_monitored_services(org["id"])
            except Exception as e:
                logger.error("target_sync_org_failed", org_id=str(org["id"]), error=str(e))
                continue
            for row in rows:
                services.append(
                    {
                        **row,
                        "organization_id": org["id"],
                        "organization_slug": org["slug"],
                    }
                )
        logger.debug("target_sync_services_found", count=len(services))
        return services

    async def sync_now(self) -> dict[str, Any]:
        """Run one sync and report the outcome without raising."""
        timestamp = datetime.now(UTC).isoformat()
        try:
            services = await self.fetch_services()
            await asyncio.to_thread(self._write, format_target_groups(services))
        except Exception as e:
            logger.exception("target_sync_failed")
            return {"success": False, "error": str(e), "timestamp": timestamp}

        logger.info(
            "target_sync_completed",
            services_count=len(services),
            path=str(self.config.services_file),
        )
        return {"success": True, "services_count": len(services), "timestamp": timestamp}

    def _write(self, groups: list[dict[str, Any]]) -> None:
        """Write the target file atomically via a temp file and rename."""
        path = self.config.services_file
        tmp_path = path.with_name(path.name + ".tmp")
        tmp_path.write_text(json.dumps(groups, indent=2), encoding="utf-8")
        os.replace(tmp_path, path)

    def start(self) -> None:
        """Start the periodic sync loop; the first sync runs immediately."""
        if self.running:
            return
        logger.info(
            "target_sync_started",
            interval_seconds=self.config.interval_seconds,
            path=str(self.config.services_file),
        )
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Stop the periodic sync loop."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("target_sync_stopped")

    async def _run(self) -> None:
        while True:
            await self.sync_now()
            await asyncio.sleep(self.config.interval_seconds)

    def status(self) -> dict[str, Any]:
        """Describe the job for the internal status endpoint."""
        return {
            "enabled": True,
            "running": self.running,
            "config_path": str(self.config.services_file),
            "sync_interval": self.config.interval_seconds,
            "message": "Prometheus sync is active",
        }
