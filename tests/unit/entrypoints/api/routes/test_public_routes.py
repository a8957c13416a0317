"""Tests for the public status routes."""

from __future__ import annotations

import uuid
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from statusboard.core.exceptions import ExternalUnavailable
from statusboard.core.metrics.bridge import STORE_UNREACHABLE_MESSAGE, MetricsBridge
from statusboard.core.metrics.types import MetricKind
from statusboard.entrypoints.api.deps import get_public_status_service
from statusboard.entrypoints.api.errors import setup_exception_handlers
from statusboard.entrypoints.api.routes.public import router
from statusboard.services.status import PublicStatusService
from tests.fixtures.mocks import StaticMetricsStore

NOW = 1_700_000_000


class TestPublicRoutes:
    """Tests for /public/status."""

    @pytest.fixture
    def mock_db(self) -> AsyncMock:
        """Return a mock database with one org and service."""
        db = AsyncMock()
        org = {"id": uuid.uuid4(), "name": "Acme", "slug": "acme"}
        db.get_public_organization.side_effect = (
            lambda slug: org if slug == "acme" else None
        )
        db.list_public_services.return_value = [
            {"id": uuid.uuid4(), "name": "API", "current_status": "degraded_performance"}
        ]
        db.get_service.return_value = {"id": uuid.uuid4(), "name": "API"}
        db.list_service_incidents.return_value = []
        db.list_active_incidents.return_value = [
            {
                "id": uuid.uuid4(),
                "title": "Elevated latency",
                "status": "investigating",
                "affected_services": [{"id": uuid.uuid4(), "name": "API"}],
                "updates": [{"id": uuid.uuid4(), "message": "Looking into it"}],
            }
        ]
        db.list_recent_incidents.return_value = []
        db.list_upcoming_maintenances.return_value = []
        return db

    def make_client(self, mock_db: AsyncMock, store: StaticMetricsStore) -> TestClient:
        """Return a client whose status service uses the given store."""
        app = FastAPI()
        setup_exception_handlers(app)
        app.include_router(router, prefix="/api")
        service = PublicStatusService(mock_db, MetricsBridge(store, clock=lambda: NOW))
        app.dependency_overrides[get_public_status_service] = lambda: service
        return TestClient(app)

    def test_status_page(self, mock_db: AsyncMock) -> None:
        """Test the status page needs no token and rolls up service status."""
        client = self.make_client(mock_db, StaticMetricsStore())

        response = client.get("/api/public/status/acme")

        assert response.status_code == 200
        assert response.json()["overall_status"] == "degraded_performance"
        incident = response.json()["active_incidents"][0]
        assert incident["affected_services"][0]["name"] == "API"
        assert incident["updates"][0]["message"] == "Looking into it"
        assert response.json()["recent_incidents"] == []
        assert response.json()["upcoming_maintenances"] == []

    def test_unknown_org(self, mock_db: AsyncMock) -> None:
        """Test that an unknown slug is 404."""
        client = self.make_client(mock_db, StaticMetricsStore())

        response = client.get(f"/api/public/status/nope/{uuid.uuid4()}")

        assert response.status_code == 404
        assert response.json()["detail"] == "Organization not found"

    def test_service_detail_metrics(self, mock_db: AsyncMock) -> None:
        """Test the metrics payload for a service."""
        store = StaticMetricsStore(
            range_results={"up": [{"values": [[NOW - 60, "1"], [NOW, "0"]]}]},
            instant_result=[{"value": [NOW, "0"]}],
        )
        client = self.make_client(mock_db, store)

        response = client.get(f"/api/public/status/acme/{uuid.uuid4()}?timeRange=6h")

        assert response.status_code == 200
        metrics = response.json()["metrics"]
        assert metrics["timeRange"] == "6h"
        assert metrics["step"] == "5m"
        assert metrics["uptime"] == [[(NOW - 60) * 1000, 1.0], [NOW * 1000, 0.0]]
        assert metrics["status"]["uptime"] == "ok"
        assert metrics["status"]["responseTime"] == "no_data"
        assert metrics["current"] == {"up": False, "timestamp": NOW * 1000}
        assert metrics["error"] is None
        assert response.json()["summary"]["uptime_percentage"] == 50.0

    def test_unknown_time_range_falls_back(self, mock_db: AsyncMock) -> None:
        """Test that an unsupported range is served as 1h."""
        client = self.make_client(mock_db, StaticMetricsStore())

        response = client.get(f"/api/public/status/acme/{uuid.uuid4()}?timeRange=garbage")

        assert response.status_code == 200
        assert response.json()["metrics"]["timeRange"] == "1h"
        assert response.json()["metrics"]["step"] == "1m"

    def test_store_down_still_200(self, mock_db: AsyncMock) -> None:
        """Test that an unreachable metrics store never fails the page."""
        down = ExternalUnavailable("prometheus", "refused", unreachable=True)
        store = StaticMetricsStore(
            range_results={kind.metric_name: down for kind in MetricKind},
            instant_result=down,
        )
        client = self.make_client(mock_db, store)

        response = client.get(f"/api/public/status/acme/{uuid.uuid4()}")

        assert response.status_code == 200
        body = response.json()
        assert body["metrics"]["error"] == STORE_UNREACHABLE_MESSAGE
        assert body["metrics"]["status"]["uptime"] == "error"
        assert body["service"]["name"] == "API"
        assert body["summary"]["uptime_percentage"] is None
