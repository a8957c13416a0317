"""Metrics Bridge - per-service queries against the metrics store.

Translates a (service, time range) request into one range query per metric
kind plus one instantaneous "up" query, all issued concurrently. Each query
is fault-isolated: a failure or timeout empties only its own series and never
fails the request.
"""

from __future__ import annotations

import asyncio
import re
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import structlog

from statusboard.core.exceptions import ExternalUnavailable
from statusboard.core.interfaces import MetricsStore
from statusboard.core.metrics.types import (
    CurrentStatus,
    MetricKind,
    MetricPoint,
    MetricSeries,
    SeriesStatus,
    ServiceMetrics,
    TimeRange,
)

logger = structlog.get_logger()

DEFAULT_RANGE_SECONDS = 3600
STORE_UNREACHABLE_MESSAGE = "Failed to fetch metrics from Prometheus"
MALFORMED_RESULT_MESSAGE = "Malformed query result"

_RANGE_PATTERN = re.compile(r"^(\d+)([mhd])$")
_UNIT_SECONDS = {"m": 60, "h": 3600, "d": 86400}


def parse_time_range(value: str) -> int:
    """Convert a duration like "30m", "6h" or "7d" to seconds.

    Malformed input falls back to one hour instead of failing.
    """
    match = _RANGE_PATTERN.match(value)
    if not match:
        return DEFAULT_RANGE_SECONDS
    amount, unit = match.groups()
    return int(amount) * _UNIT_SECONDS[unit]


@dataclass(frozen=True)
class MetricsBridgeConfig:
    """Configuration for metrics queries.

    Attributes:
        query_timeout_seconds: Upper bound for each individual query.
    """

    query_timeout_seconds: float = 5.0


class MetricsBridge:
    """Fetches and normalizes service metrics from the metrics store."""

    def __init__(
        self,
        store: MetricsStore,
        config: MetricsBridgeConfig | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the bridge.

        Args:
            store: Metrics store client, shared process-wide.
            config: Query configuration. Uses defaults if not provided.
            clock: Source of the current epoch time.
        """
        self._store = store
        self.config = config or MetricsBridgeConfig()
        self._clock = clock

    async def get_service_metrics(
        self,
        service_id: str,
        time_range: str | None = None,
    ) -> ServiceMetrics:
        """Query all metric kinds and the current status for a service.

        Args:
            service_id: Service whose metrics to fetch.
            time_range: One of 1h, 6h, 24h, 7d, 30d. Anything else means 1h.

        Returns:
            ServiceMetrics with one series per kind. ``error`` is only set
            when every query failed because the store was unreachable.
        """
        effective_range = TimeRange.parse(time_range)
        step = effective_range.step
        end = int(self._clock())
        start = end - parse_time_range(effective_range.value)

        kinds = list(MetricKind)
        outcomes = await asyncio.gather(
            *(self._query_series(kind, service_id, start, end, step) for kind in kinds),
            self._query_current(service_id),
        )
        series_outcomes: list[tuple[MetricSeries, bool]] = list(outcomes[:-1])
        current, current_unreachable = outcomes[-1]

        series = {s.kind: s for s, _ in series_outcomes}
        unreachable = current_unreachable and all(u for _, u in series_outcomes)

        error = None
        if unreachable:
            logger.error("metrics_store_unreachable", service_id=service_id)
            error = STORE_UNREACHABLE_MESSAGE

        return ServiceMetrics(
            time_range=effective_range,
            step=step,
            series=series,
            current=current,
            error=error,
        )

    async def _query_series(
        self,
        kind: MetricKind,
        service_id: str,
        start: int,
        end: int,
        step: str,
    ) -> tuple[MetricSeries, bool]:
        """Run one range query; returns the series and an unreachable flag."""
        query = kind.selector(service_id)
        try:
            result = await asyncio.wait_for(
                self._store.query_range(query, start=start, end=end, step=step),
                timeout=self.config.query_timeout_seconds,
            )
        except TimeoutError:
            logger.warning("metric_query_timeout", kind=kind.value, service_id=service_id)
            return MetricSeries.failed(kind, "Query timed out"), False
        except ExternalUnavailable as e:
            logger.warning(
                "metric_query_failed",
                kind=kind.value,
                service_id=service_id,
                error=str(e),
            )
            return MetricSeries.failed(kind, str(e)), e.unreachable

        if not result:
            logger.debug("metric_query_no_data", kind=kind.value, service_id=service_id)
            return MetricSeries(kind=kind, status=SeriesStatus.NO_DATA), False

        values = _first_entry(result).get("values")
        if not isinstance(values, list):
            logger.warning("metric_query_malformed", kind=kind.value, service_id=service_id)
            return MetricSeries.failed(kind, MALFORMED_RESULT_MESSAGE), False

        points = tuple(_to_points(values))
        status = SeriesStatus.OK if points else SeriesStatus.NO_DATA
        logger.debug(
            "metric_query_succeeded",
            kind=kind.value,
            service_id=service_id,
            points=len(points),
        )
        return MetricSeries(kind=kind, status=status, points=points), False

    async def _query_current(self, service_id: str) -> tuple[CurrentStatus | None, bool]:
        """Run the instantaneous up query; best-effort."""
        query = MetricKind.UPTIME.selector(service_id)
        try:
            result = await asyncio.wait_for(
                self._store.query(query),
                timeout=self.config.query_timeout_seconds,
            )
        except TimeoutError:
            logger.warning("current_status_timeout", service_id=service_id)
            return None, False
        except ExternalUnavailable as e:
            logger.warning("current_status_failed", service_id=service_id, error=str(e))
            return None, e.unreachable

        if not result:
            return None, False

        sample = _to_point(_first_entry(result).get("value"))
        if sample is None:
            return None, False
        return CurrentStatus(up=sample.value == 1, timestamp=sample.timestamp), False


def _to_point(pair: Any) -> MetricPoint | None:
    """Convert a [timestamp, "value"] pair, skipping malformed samples."""
    try:
        timestamp, value = pair
        return MetricPoint(timestamp=int(float(timestamp) * 1000), value=float(value))
    except (TypeError, ValueError, OverflowError):
        return None


def _first_entry(result: Any) -> dict[str, Any]:
    """Return the first series of a result, or an empty mapping if malformed."""
    if isinstance(result, list) and result and isinstance(result[0], dict):
        entry: dict[str, Any] = result[0]
        return entry
    return {}


def _to_points(pairs: list[Any]) -> list[MetricPoint]:
    points = []
    for pair in pairs:
        point = _to_point(pair)
        if point is not None:
            points.append(point)
    return points
