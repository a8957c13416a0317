"""Protocol definitions for external dependencies.

The core domain only depends on these protocols, never on concrete
implementations.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class MetricsStore(Protocol):
    """Interface for the external time-series store.

    Implementations raise ExternalUnavailable for error envelopes, HTTP
    errors and transport failures, setting ``unreachable`` when the store
    could not be contacted at all.
    """

    async def query_range(
        self,
        query: str,
        start: int,
        end: int,
        step: str,
    ) -> list[dict[str, Any]]:
        """Run a range query.

        Args:
            query: Metric selector.
            start: Window start, epoch seconds.
            end: Window end, epoch seconds.
            step: Step duration string, e.g. "15m".

        Returns:
            List of series, each with a "values" list of [timestamp, "value"].
        """
        ...

    async def query(self, query: str) -> list[dict[str, Any]]:
        """Run an instantaneous query.

        Returns:
            List of series, each with a "value" pair [timestamp, "value"].
        """
        ...
