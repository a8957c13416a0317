"""Unit tests for the Prometheus target sync job."""

from __future__ import annotations

import asyncio
import json
import threading
import uuid
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock

import pytest

from statusboard.adapters.metrics.target_sync import (
    PrometheusTargetSync,
    TargetSyncConfig,
    format_target_groups,
)


class TestFormatTargetGroups:
    """Tests for format_target_groups."""

    def test_labels(self) -> None:
        """Test the file_sd labels for one service."""
        org_id, service_id = uuid.uuid4(), uuid.uuid4()

        groups = format_target_groups(
            [
                {
                    "id": service_id,
                    "name": "Public  API Gateway",
                    "target_url": "https://api.example.com/health",
                    "organization_id": org_id,
                    "organization_slug": "acme",
                }
            ]
        )

        assert groups == [
            {
                "targets": ["https://api.example.com/health"],
                "labels": {
                    "org_id": str(org_id),
                    "org_name": "acme",
                    "service_id": str(service_id),
                    "service_name": "public_api_gateway",
                },
            }
        ]


class TestPrometheusTargetSync:
    """Tests for PrometheusTargetSync."""

    @pytest.fixture
    def mock_db(self) -> AsyncMock:
        """Return a mock database with two organizations."""
        db = AsyncMock()
        db.list_organizations.return_value = [
            {"id": uuid.uuid4(), "name": "Acme", "slug": "acme"},
            {"id": uuid.uuid4(), "name": "Globex", "slug": "globex"},
        ]
        db.list_monitored_services.return_value = [
            {"id": uuid.uuid4(), "name": "Web", "target_url": "https://web.example.com"}
        ]
        return db

    @pytest.fixture
    def services_file(self, tmp_path: Path) -> Path:
        """Return the target file path."""
        return tmp_path / "sd" / "services.json"

    @pytest.fixture
    def sync(self, mock_db: AsyncMock, services_file: Path) -> PrometheusTargetSync:
        """Return a sync job writing into tmp_path."""
        return PrometheusTargetSync(
            mock_db, TargetSyncConfig(services_file=services_file, interval_seconds=0.01)
        )

    async def test_sync_now_writes_file(
        self, sync: PrometheusTargetSync, services_file: Path
    ) -> None:
        """Test that a sync writes one group per service."""
        result = await sync.sync_now()

        assert result["success"] is True
        assert result["services_count"] == 2
        assert "timestamp" in result
        groups = json.loads(services_file.read_text())
        assert {g["labels"]["org_name"] for g in groups} == {"acme", "globex"}
        assert not services_file.with_name(services_file.name + ".tmp").exists()

    async def test_write_runs_off_the_event_loop(
        self, sync: PrometheusTargetSync, services_file: Path
    ) -> None:
        """Test that the target file is written from a worker thread."""
        loop_thread = threading.get_ident()
        write_threads: list[int] = []
        write = sync._write

        def recording_write(groups: list[dict[str, Any]]) -> None:
            write_threads.append(threading.get_ident())
            write(groups)

        sync._write = recording_write  # type: ignore[method-assign]

        result = await sync.sync_now()

        assert result["success"] is True
        assert len(write_threads) == 1
        assert write_threads[0] != loop_thread
        assert services_file.exists()

    async def test_failing_org_skipped(
        self, sync: PrometheusTargetSync, mock_db: AsyncMock, services_file: Path
    ) -> None:
        """Test that one organization's failure does not abort the sync."""
        ok_rows = mock_db.list_monitored_services.return_value
        mock_db.list_monitored_services.side_effect = [RuntimeError("boom"), ok_rows]

        result = await sync.sync_now()

        assert result["success"] is True
        assert result["services_count"] == 1
        assert len(json.loads(services_file.read_text())) == 1

    async def test_sync_now_reports_failure(
        self, sync: PrometheusTargetSync, mock_db: AsyncMock
    ) -> None:
        """Test that sync_now returns an error instead of raising."""
        mock_db.list_organizations.side_effect = RuntimeError("db down")

        result = await sync.sync_now()

        assert result["success"] is False
        assert result["error"] == "db down"

    async def test_start_and_stop(self, sync: PrometheusTargetSync, services_file: Path) -> None:
        """Test the periodic loop lifecycle."""
        sync.start()
        assert sync.running is True
        assert sync.status()["running"] is True

        await asyncio.sleep(0.05)
        await sync.stop()

        assert sync.running is False
        assert services_file.exists()

    def test_status(self, sync: PrometheusTargetSync, services_file: Path) -> None:
        """Test the status payload."""
        status = sync.status()

        assert status["enabled"] is True
        assert status["running"] is False
        assert status["config_path"] == str(services_file)
        assert status["sync_interval"] == 0.01
