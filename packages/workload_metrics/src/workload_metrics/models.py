"""Request-scoped models for workload metric queries.

Every model is frozen: a spec, range or expression is built once per request
and read by the downstream components without further mutation.

Date/Time: Uses `whenever` library (UTC-first, Rust-backed).
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from whenever import Instant, TimeDelta  # noqa: TC002  # needed at runtime by pydantic

from workload_metrics.durations import parse_duration

_FROZEN = ConfigDict(frozen=True, arbitrary_types_allowed=True)


class RateFunc(StrEnum):
    RATE = "rate"
    IRATE = "irate"


class Direction(StrEnum):
    INBOUND = "inbound"
    OUTBOUND = "outbound"

    @property
    def label_prefix(self) -> str:
        return "destination" if self is Direction.INBOUND else "source"


class Reporter(StrEnum):
    SOURCE = "source"
    DESTINATION = "destination"


# =============================================================================
# PARSED PARAMETERS
# =============================================================================


class QueryDefaults(BaseModel):
    """Fallback values used for every parameter the caller leaves out."""

    model_config = ConfigDict(frozen=True)

    rate_interval: str = Field(default="1m", description="Window used inside rate functions")
    rate_func: RateFunc = Field(default=RateFunc.RATE)
    duration: int = Field(default=1800, gt=0, description="Seconds back from queryTime")
    step: int = Field(default=15, gt=0, description="Range query resolution in seconds")
    direction: Direction = Field(default=Direction.OUTBOUND)

    @field_validator("rate_interval")
    @classmethod
    def _check_rate_interval(cls, value: str) -> str:
        parse_duration(value)
        return value


class MetricsQuerySpec(BaseModel):
    """Validated query parameters for one request."""

    model_config = _FROZEN

    rate_interval: str
    rate_func: RateFunc
    query_time: Instant
    duration: TimeDelta
    step: TimeDelta
    by_labels: tuple[str, ...] = ()
    quantiles: tuple[float, ...] = ()
    filters: frozenset[str] = frozenset()
    direction: Direction = Direction.OUTBOUND
    reporter: Reporter = Reporter.SOURCE
    request_protocol: str | None = None


class TimeRange(BaseModel):
    """Absolute window handed to the metrics backend."""

    model_config = _FROZEN

    start: Instant
    end: Instant
    step: TimeDelta

    @model_validator(mode="after")
    def _check_bounds(self) -> TimeRange:
        if not self.start < self.end:
            raise ValueError("time range start must be before end")
        if self.step.total("seconds") <= 0:
            raise ValueError("time range step must be positive")
        return self


class Expression(BaseModel):
    """A rendered PromQL expression for one family (and quantile)."""

    model_config = _FROZEN

    family: str
    text: str
    is_histogram: bool = False
    quantile: float | None = None

    @model_validator(mode="after")
    def _quantile_iff_histogram(self) -> Expression:
        if self.is_histogram != (self.quantile is not None):
            raise ValueError("quantile must be set exactly when the expression is a histogram")
        return self


# =============================================================================
# ACCESS AND RESULTS
# =============================================================================


class AccessDecision(BaseModel):
    model_config = _FROZEN

    allowed: bool
    reason: str | None = None

    @classmethod
    def allow(cls) -> AccessDecision:
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: str) -> AccessDecision:
        return cls(allowed=False, reason=reason)


class Sample(BaseModel):
    model_config = _FROZEN

    timestamp: float
    value: float


class Series(BaseModel):
    model_config = _FROZEN

    labels: dict[str, str] = Field(default_factory=dict)
    samples: tuple[Sample, ...] = ()


class SeriesSet(BaseModel):
    """Raw range-query result for one expression."""

    model_config = _FROZEN

    series: tuple[Series, ...] = ()


class QueryResult(BaseModel):
    """A backend result tagged with the expression that produced it."""

    model_config = _FROZEN

    expression: Expression
    series_set: SeriesSet
