"""Metrics store adapters."""

from statusboard.adapters.metrics.prometheus import PrometheusClient, PrometheusConfig
from statusboard.adapters.metrics.target_sync import (
    PrometheusTargetSync,
    TargetSyncConfig,
    format_target_groups,
)

__all__ = [
    "PrometheusClient",
    "PrometheusConfig",
    "PrometheusTargetSync",
    "TargetSyncConfig",
    "format_target_groups",
]
