"""Parameter parser: raw query-string values into a MetricsQuerySpec.

Parameters are validated in a fixed order and the first failure is raised
immediately, so callers never observe a partially parsed spec. Unknown
parameters are ignored.
"""

from __future__ import annotations

import math
import re
from typing import TYPE_CHECKING

from whenever import Instant, TimeDelta

from workload_metrics.durations import parse_duration
from workload_metrics.errors import ParameterValidationError
from workload_metrics.models import (
    Direction,
    MetricsQuerySpec,
    QueryDefaults,
    RateFunc,
    Reporter,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence
    from enum import StrEnum

# Query parameter names as they appear on the wire.
RATE_INTERVAL = "rateInterval"
RATE_FUNC = "rateFunc"
QUERY_TIME = "queryTime"
DURATION = "duration"
STEP = "step"
DIRECTION = "direction"
REPORTER = "reporter"
REQUEST_PROTOCOL = "requestProtocol"
BY_LABELS = "byLabels[]"
QUANTILES = "quantiles[]"
FILTERS = "filters[]"

_INTEGER_RE = re.compile(r"-?[0-9]+\Z")
_LABEL_NAME_RE = re.compile(r"[a-zA-Z_][a-zA-Z0-9_]*\Z")


def parse_query_params(
    params: Mapping[str, Sequence[str]],
    defaults: QueryDefaults,
    *,
    now: Instant | None = None,
) -> MetricsQuerySpec:
    """Build a MetricsQuerySpec from a multi-valued parameter mapping.

    Args:
        params: Parameter name to the values supplied for it, in request order.
        defaults: Process-wide fallbacks for omitted parameters.
        now: Query time used when ``queryTime`` is absent. Sampled lazily.

    Raises:
        ParameterValidationError: naming the first offending parameter.
    """
    rate_interval = _first(params, RATE_INTERVAL) or defaults.rate_interval
    try:
        parse_duration(rate_interval)
    except ValueError as exc:
        raise ParameterValidationError.unparseable(RATE_INTERVAL, str(exc)) from exc

    rate_func = _parse_choice(params, RATE_FUNC, RateFunc, defaults.rate_func)

    raw_query_time = _first(params, QUERY_TIME)
    if raw_query_time:
        seconds = _parse_int(QUERY_TIME, raw_query_time)
        if seconds < 0:
            raise ParameterValidationError.unparseable(QUERY_TIME, "must not be negative")
        try:
            query_time = Instant.from_timestamp(seconds)
        except (ValueError, OverflowError):
            raise ParameterValidationError.unparseable(QUERY_TIME, "out of range") from None
    else:
        query_time = now if now is not None else Instant.now()

    duration = _parse_positive_seconds(params, DURATION, defaults.duration)
    _window_start(query_time, duration)
    step = _parse_positive_seconds(params, STEP, defaults.step)

    direction = _parse_choice(params, DIRECTION, Direction, defaults.direction)
    default_reporter = Reporter.DESTINATION if direction is Direction.INBOUND else Reporter.SOURCE
    reporter = _parse_choice(params, REPORTER, Reporter, default_reporter)
    request_protocol = _first(params, REQUEST_PROTOCOL) or None

    by_labels = _unique(value for value in params.get(BY_LABELS, ()) if value)
    for label in by_labels:
        if not _LABEL_NAME_RE.match(label):
            raise ParameterValidationError.unparseable(
                BY_LABELS, f"{label!r} is not a valid label name"
            )

    quantiles = _unique(_parse_quantile(value) for value in params.get(QUANTILES, ()) if value)
    filters = frozenset(value for value in params.get(FILTERS, ()) if value)

    return MetricsQuerySpec(
        rate_interval=rate_interval,
        rate_func=rate_func,
        query_time=query_time,
        duration=duration,
        step=step,
        by_labels=by_labels,
        quantiles=quantiles,
        filters=filters,
        direction=direction,
        reporter=reporter,
        request_protocol=request_protocol,
    )


def _first(params: Mapping[str, Sequence[str]], name: str) -> str | None:
    values = params.get(name)
    return values[0] if values else None


def _parse_int(name: str, raw: str) -> int:
    if not _INTEGER_RE.match(raw):
        raise ParameterValidationError.unparseable(name)
    return int(raw)


def _parse_positive_seconds(
    params: Mapping[str, Sequence[str]], name: str, default: int
) -> TimeDelta:
    raw = _first(params, name)
    if not raw:
        return TimeDelta(seconds=default)
    seconds = _parse_int(name, raw)
    if seconds <= 0:
        raise ParameterValidationError.unparseable(name, "must be a positive number of seconds")
    try:
        return TimeDelta(seconds=seconds)
    except (ValueError, OverflowError):
        raise ParameterValidationError.unparseable(name, "out of range") from None


def _window_start(query_time: Instant, duration: TimeDelta) -> Instant:
    try:
        return query_time - duration
    except (ValueError, OverflowError):
        raise ParameterValidationError.unparseable(
            DURATION, "reaches before the earliest supported time"
        ) from None


def _parse_choice(
    params: Mapping[str, Sequence[str]], name: str, enum: type[StrEnum], default: StrEnum
) -> StrEnum:
    raw = _first(params, name)
    if not raw:
        return default
    try:
        return enum(raw)
    except ValueError:
        allowed = tuple(member.value for member in enum)
        raise ParameterValidationError.not_one_of(name, allowed) from None


def _parse_quantile(raw: str) -> float:
    try:
        value = float(raw)
    except ValueError:
        raise ParameterValidationError.unparseable(QUANTILES, f"{raw!r} is not a number") from None
    if math.isnan(value) or not 0 < value <= 1:
        raise ParameterValidationError.unparseable(
            QUANTILES, f"{raw!r} is outside the range (0, 1]"
        )
    return value


def _unique(values: Iterable) -> tuple:
    """Drop repeated values, keeping the first occurrence of each."""
    return tuple(dict.fromkeys(values))
