"""Metrics bridging and aggregation."""

from statusboard.core.metrics.bridge import (
    MetricsBridge,
    MetricsBridgeConfig,
    parse_time_range,
)
from statusboard.core.metrics.stats import average_response_time_ms, summarize, uptime_percentage
from statusboard.core.metrics.types import (
    CurrentStatus,
    MetricKind,
    MetricPoint,
    MetricSeries,
    MetricsSummary,
    SeriesStatus,
    ServiceMetrics,
    TimeRange,
)

__all__ = [
    "MetricsBridge",
    "MetricsBridgeConfig",
    "parse_time_range",
    "uptime_percentage",
    "average_response_time_ms",
    "summarize",
    "CurrentStatus",
    "MetricKind",
    "MetricPoint",
    "MetricSeries",
    "MetricsSummary",
    "SeriesStatus",
    "ServiceMetrics",
    "TimeRange",
]
