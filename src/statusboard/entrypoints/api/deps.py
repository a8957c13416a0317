"""Dependency injection and application lifespan management."""

from __future__ import annotations

import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import TYPE_CHECKING

from fastapi import Request

from statusboard.adapters.auth.identity import HttpIdentityVerifier, IdentityProviderConfig
from statusboard.adapters.auth.postgres import PostgresMembershipRepository
from statusboard.adapters.db.app_db import AppDatabase
from statusboard.adapters.metrics.prometheus import PrometheusClient, PrometheusConfig
from statusboard.adapters.metrics.target_sync import PrometheusTargetSync, TargetSyncConfig
from statusboard.core.access import AccessGate
from statusboard.core.auth.identity import IdentityVerifier
from statusboard.core.metrics.bridge import MetricsBridge, MetricsBridgeConfig
from statusboard.services.organization import OrganizationService
from statusboard.services.status import PublicStatusService, ServiceInventory

if TYPE_CHECKING:
    from fastapi import FastAPI

logger = logging.getLogger(__name__)


class Settings:
    """Application settings loaded from environment."""

    def __init__(self) -> None:
        """Load settings from environment variables."""
        self.database_url = os.getenv("DATABASE_URL", "postgresql://localhost:5432/statusboard")
        self.auth_url = os.getenv("AUTH_URL", "http://localhost:54321")
        self.auth_api_key = os.getenv("AUTH_API_KEY", "")
        self.cors_origin = os.getenv("CORS_ORIGIN", "http://localhost:5173")
        self.host = os.getenv("HOST", "0.0.0.0")
        self.port = int(os.getenv("PORT", "5000"))

        # Metrics store
        self.prometheus_url = os.getenv("PROMETHEUS_URL", "http://127.0.0.1:9090")
        self.metrics_query_timeout = float(os.getenv("METRICS_QUERY_TIMEOUT", "5"))

        # Service discovery sync
        self.prometheus_sync_enabled = (
            os.getenv("PROMETHEUS_SYNC_ENABLED", "false").lower() == "true"
        )
        self.prometheus_services_file = Path(
            os.getenv("PROMETHEUS_SERVICES_FILE", "./prometheus-services.json")
        )
        self.prometheus_sync_interval = float(os.getenv("PROMETHEUS_SYNC_INTERVAL", "30"))


settings = Settings()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan - setup and teardown.

    This context manager handles:
    - Database connection pool setup
    - Identity provider and Prometheus HTTP clients
    - The optional Prometheus target sync job
    """
    app_db = AppDatabase(settings.database_url)
    await app_db.connect()

    identity_verifier = HttpIdentityVerifier(
        IdentityProviderConfig(url=settings.auth_url, api_key=settings.auth_api_key)
    )
    prometheus = PrometheusClient(
        PrometheusConfig(
            url=settings.prometheus_url,
            timeout_seconds=settings.metrics_query_timeout,
        )
    )

    repository = PostgresMembershipRepository(app_db)
    bridge = MetricsBridge(
        prometheus,
        MetricsBridgeConfig(query_timeout_seconds=settings.metrics_query_timeout),
    )

    target_sync: PrometheusTargetSync | None = None
    if settings.prometheus_sync_enabled:
        target_sync = PrometheusTargetSync(
            app_db,
            TargetSyncConfig(
                services_file=settings.prometheus_services_file,
                interval_seconds=settings.prometheus_sync_interval,
            ),
        )
        target_sync.start()
    else:
        logger.info("Prometheus sync disabled")

    # Store in app state
    app.state.app_db = app_db
    app.state.identity_verifier = identity_verifier
    app.state.access_gate = AccessGate(repository)
    app.state.organization_service = OrganizationService(repository)
    app.state.public_status_service = PublicStatusService(app_db, bridge)
    app.state.service_inventory = ServiceInventory(app_db)
    app.state.target_sync = target_sync

    logger.info(f"statusboard_started: prometheus={settings.prometheus_url}")

    yield

    if target_sync is not None:
        await target_sync.stop()
    await prometheus.close()
    await identity_verifier.close()
    await app_db.close()
    logger.info("statusboard_stopped")


def get_identity_verifier(request: Request) -> IdentityVerifier:
    """Get the identity verifier from app state."""
    verifier: IdentityVerifier = request.app.state.identity_verifier
    return verifier


def get_access_gate(request: Request) -> AccessGate:
    """Get the access gate from app state."""
    gate: AccessGate = request.app.state.access_gate
    return gate


def get_organization_service(request: Request) -> OrganizationService:
    """Get the organization service from app state."""
    service: OrganizationService = request.app.state.organization_service
    return service


def get_public_status_service(request: Request) -> PublicStatusService:
    """Get the public status service from app state."""
    service: PublicStatusService = request.app.state.public_status_service
    return service


def get_service_inventory(request: Request) -> ServiceInventory:
    """Get the internal service inventory from app state."""
    inventory: ServiceInventory = request.app.state.service_inventory
    return inventory


def get_target_sync(request: Request) -> PrometheusTargetSync | None:
    """Get the target sync job, or None when sync is disabled."""
    target_sync: PrometheusTargetSync | None = request.app.state.target_sync
    return target_sync
