"""Metrics domain types.

Time ranges, metric kinds and the normalized series returned to the public
service-detail view. All models are frozen.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class TimeRange(str, Enum):
    """Query windows offered on the public service-detail view."""

    ONE_HOUR = "1h"
    SIX_HOURS = "6h"
    ONE_DAY = "24h"
    SEVEN_DAYS = "7d"
    THIRTY_DAYS = "30d"

    @classmethod
    def parse(cls, value: str | None) -> TimeRange:
        """Parse a range string, silently falling back to 1h."""
        if value is None:
            return cls.ONE_HOUR
        try:
            return cls(value)
        except ValueError:
            return cls.ONE_HOUR

    @property
    def step(self) -> str:
        """Sampling step that keeps the point count roughly constant."""
        return _STEPS[self]


_STEPS: dict[TimeRange, str] = {
    TimeRange.ONE_HOUR: "1m",
    TimeRange.SIX_HOURS: "5m",
    TimeRange.ONE_DAY: "15m",
    TimeRange.SEVEN_DAYS: "1h",
    TimeRange.THIRTY_DAYS: "2h",
}


class MetricKind(str, Enum):
    """Metric kinds queried per service."""

    UPTIME = "uptime"
    RESPONSE_TIME = "responseTime"
    HTTP_STATUS_CODE = "httpStatusCode"
    SSL_EXPIRY = "sslExpiry"

    @property
    def metric_name(self) -> str:
        """Prometheus metric name backing this kind."""
        return _METRIC_NAMES[self]

    def selector(self, service_id: str) -> str:
        """Metric selector scoped to one service."""
        return f'{self.metric_name}{{service_id="{service_id}"}}'


_METRIC_NAMES: dict[MetricKind, str] = {
    MetricKind.UPTIME: "up",
    MetricKind.RESPONSE_TIME: "probe_duration_seconds",
    MetricKind.HTTP_STATUS_CODE: "probe_http_status_code",
    MetricKind.SSL_EXPIRY: "probe_ssl_earliest_cert_expiry",
}


class SeriesStatus(str, Enum):
    """Distinguishes "no data in range" from "query failed"."""

    OK = "ok"
    NO_DATA = "no_data"
    ERROR = "error"


class MetricPoint(BaseModel):
    """A single sample.

    Attributes:
        timestamp: Epoch milliseconds.
        value: Sample value.
    """

    model_config = ConfigDict(frozen=True)

    timestamp: int
    value: float


class MetricSeries(BaseModel):
    """Normalized series for one metric kind."""

    model_config = ConfigDict(frozen=True)

    kind: MetricKind
    status: SeriesStatus
    points: tuple[MetricPoint, ...] = ()
    error: str | None = None

    @classmethod
    def failed(cls, kind: MetricKind, error: str) -> MetricSeries:
        """Empty series for a query that failed or timed out."""
        return cls(kind=kind, status=SeriesStatus.ERROR, error=error)


class CurrentStatus(BaseModel):
    """Instantaneous up/down reading."""

    model_config = ConfigDict(frozen=True)

    up: bool
    timestamp: int


class ServiceMetrics(BaseModel):
    """Everything the bridge returns for one service.

    Attributes:
        time_range: The effective range after fallback.
        step: Step used for the range queries.
        series: One entry per metric kind, always present.
        current: Latest up/down reading, if available.
        error: Top-level marker set only when the store was unreachable.
    """

    model_config = ConfigDict(frozen=True)

    time_range: TimeRange
    step: str
    series: dict[MetricKind, MetricSeries] = Field(default_factory=dict)
    current: CurrentStatus | None = None
    error: str | None = None

    def points(self, kind: MetricKind) -> tuple[MetricPoint, ...]:
        """Points for a kind, empty if missing."""
        series = self.series.get(kind)
        return series.points if series else ()


class MetricsSummary(BaseModel):
    """Derived statistics; None means unavailable."""

    model_config = ConfigDict(frozen=True)

    uptime_percentage: float | None = None
    average_response_time_ms: int | None = None
