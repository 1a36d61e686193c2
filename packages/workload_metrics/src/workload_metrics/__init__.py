"""Workload metrics query core.

Parses request parameters, resolves the query window and renders PromQL for
a workload's traffic metrics. Pure functions only; all I/O lives in the
service package.
"""

from workload_metrics.errors import (
    AccessDeniedError,
    BackendQueryError,
    MetricsQueryError,
    ParameterValidationError,
    QueryExecutionError,
)
from workload_metrics.expressions import build_expressions
from workload_metrics.models import (
    AccessDecision,
    Direction,
    Expression,
    MetricsQuerySpec,
    QueryDefaults,
    QueryResult,
    RateFunc,
    Reporter,
    Sample,
    Series,
    SeriesSet,
    TimeRange,
)
from workload_metrics.params import parse_query_params
from workload_metrics.time_range import resolve_time_range

__all__ = [
    "AccessDecision",
    "AccessDeniedError",
    "BackendQueryError",
    "Direction",
    "Expression",
    "MetricsQueryError",
    "MetricsQuerySpec",
    "ParameterValidationError",
    "QueryDefaults",
    "QueryExecutionError",
    "QueryResult",
    "RateFunc",
    "Reporter",
    "Sample",
    "Series",
    "SeriesSet",
    "TimeRange",
    "build_expressions",
    "parse_query_params",
    "resolve_time_range",
]
