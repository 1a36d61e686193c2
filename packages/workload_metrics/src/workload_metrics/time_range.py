"""Time range resolver.

Pure and deterministic: the query time is fixed by the parser, so resolving
the same spec twice yields the same range.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from workload_metrics.models import TimeRange

if TYPE_CHECKING:
    from workload_metrics.models import MetricsQuerySpec


def resolve_time_range(spec: MetricsQuerySpec) -> TimeRange:
    """Return the window ``[query_time - duration, query_time]`` at ``step`` resolution."""
    return TimeRange(
        start=spec.query_time - spec.duration,
        end=spec.query_time,
        step=spec.step,
    )
