"""Summary statistics derived from metric series."""

from __future__ import annotations

from collections.abc import Sequence
from decimal import ROUND_HALF_UP, Decimal

from statusboard.core.metrics.types import MetricKind, MetricPoint, MetricsSummary, ServiceMetrics

_HUNDREDTHS = Decimal("0.01")
_UNITS = Decimal("1")


def _round_half_up(value: float, quantum: Decimal) -> Decimal:
    # Decimal(float) is the exact binary value, so ties are the float's own ties.
    return Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP)


def uptime_percentage(points: Sequence[MetricPoint]) -> float | None:
    """Share of samples equal to 1, as a percentage rounded half up to 2 decimals.

    Returns None (unavailable) for an empty series.
    """
    if not points:
        return None
    up = sum(1 for p in points if p.value == 1)
    return float(_round_half_up(up / len(points) * 100, _HUNDREDTHS))


def average_response_time_ms(points: Sequence[MetricPoint]) -> int | None:
    """Mean probe duration converted from seconds to whole milliseconds.

    Halves round up. Returns None (unavailable) for an empty series.
    """
    if not points:
        return None
    mean = sum(p.value for p in points) / len(points)
    return int(_round_half_up(mean * 1000, _UNITS))


def summarize(metrics: ServiceMetrics) -> MetricsSummary:
    """Compute the uptime and latency summary for a service."""
    return MetricsSummary(
        uptime_percentage=uptime_percentage(metrics.points(MetricKind.UPTIME)),
        average_response_time_ms=average_response_time_ms(
            metrics.points(MetricKind.RESPONSE_TIME)
        ),
    )
