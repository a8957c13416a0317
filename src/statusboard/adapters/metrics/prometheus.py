"""Prometheus HTTP API client."""

from dataclasses import dataclass
from typing import Any

import httpx
import structlog

from statusboard.core.exceptions import ExternalUnavailable

logger = structlog.get_logger()

SYSTEM_NAME = "prometheus"


@dataclass
class PrometheusConfig:
    """Prometheus connection configuration."""

    url: str = "http://127.0.0.1:9090"
    timeout_seconds: float = 5.0


class PrometheusClient:
    """Async client for the Prometheus query API.

    One instance is shared by all in-flight requests for the lifetime of
    the process.
    """

    def __init__(self, config: PrometheusConfig, client: httpx.AsyncClient | None = None):
        """Initialize the client.

        Args:
            config: Connection settings.
            client: Optional pre-built HTTP client.
        """
        self.config = config
        self._client = client or httpx.AsyncClient(
            base_url=config.url.rstrip("/"),
            timeout=config.timeout_seconds,
        )

    async def query_range(
        self,
        query: str,
        start: int,
        end: int,
        step: str,
    ) -> list[dict[str, Any]]:
        """Run a range query against /api/v1/query_range."""
        return await self._get(
            "/api/v1/query_range",
            {"query": query, "start": start, "end": end, "step": step},
        )

    async def query(self, query: str) -> list[dict[str, Any]]:
        """Run an instantaneous query against /api/v1/query."""
        return await self._get("/api/v1/query", {"query": query})

    async def _get(self, path: str, params: dict[str, Any]) -> list[dict[str, Any]]:
        """Issue a query and unwrap the success envelope."""
        try:
            response = await self._client.get(path, params=params)
        except httpx.TimeoutException:
            raise ExternalUnavailable(SYSTEM_NAME, "Query timed out") from None
        except httpx.RequestError as e:
            raise ExternalUnavailable(
                SYSTEM_NAME, f"Connection failed: {e}", unreachable=True
            ) from None

        try:
            body = response.json()
        except ValueError:
            raise ExternalUnavailable(
                SYSTEM_NAME, f"Non-JSON response (HTTP {response.status_code})"
            ) from None

        if not isinstance(body, dict):
            raise ExternalUnavailable(
                SYSTEM_NAME, f"Malformed response (HTTP {response.status_code})"
            )

        if not response.is_success or body.get("status") != "success":
            logger.warning(
                "prometheus_query_error",
                path=path,
                status_code=response.status_code,
                error_type=body.get("errorType"),
                error=body.get("error"),
            )
            raise ExternalUnavailable(
                SYSTEM_NAME, body.get("error") or f"HTTP {response.status_code}"
            )

        data = body.get("data")
        result = data.get("result") if isinstance(data, dict) else None
        if not isinstance(result, list):
            logger.warning("prometheus_malformed_envelope", path=path)
            raise ExternalUnavailable(SYSTEM_NAME, "Malformed response envelope")
        return result

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()
