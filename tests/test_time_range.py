"""Unit tests for time range resolution."""

from __future__ import annotations

import pytest
from pydantic import ValidationError
from whenever import Instant, TimeDelta

from workload_metrics import QueryDefaults, TimeRange, parse_query_params, resolve_time_range


def test_range_ends_at_query_time():
    spec = parse_query_params(
        {"queryTime": ["1523364075"], "duration": ["1000"], "step": ["2"]}, QueryDefaults()
    )
    time_range = resolve_time_range(spec)
    assert time_range.end == Instant.from_timestamp(1523364075)
    assert time_range.start == Instant.from_timestamp(1523364075 - 1000)
    assert time_range.step == TimeDelta(seconds=2)


def test_default_range_is_thirty_minutes_ending_now():
    before = Instant.now()
    time_range = resolve_time_range(parse_query_params({}, QueryDefaults()))
    after = Instant.now()
    assert before <= time_range.end <= after
    assert time_range.end - time_range.start == TimeDelta(minutes=30)
    assert time_range.step == TimeDelta(seconds=15)


def test_resolution_is_deterministic():
    spec = parse_query_params({}, QueryDefaults())
    assert resolve_time_range(spec) == resolve_time_range(spec)


def test_range_rejects_inverted_bounds():
    now = Instant.now()
    with pytest.raises(ValidationError, match="start must be before end"):
        TimeRange(start=now, end=now - TimeDelta(seconds=1), step=TimeDelta(seconds=15))


def test_range_rejects_non_positive_step():
    now = Instant.now()
    with pytest.raises(ValidationError, match="step must be positive"):
        TimeRange(start=now - TimeDelta(minutes=1), end=now, step=TimeDelta(seconds=0))
