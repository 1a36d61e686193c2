"""Property tests for parameter parsing, time ranges and expression rendering.

- The resolved range always ends at queryTime and spans exactly the duration
- Every histogram expression carries exactly one quantile, counters none
- Expression count and order follow the catalog and the requested quantiles
- Rendering is deterministic and label values cannot escape their quotes
"""

import re

from hypothesis import given, settings
from hypothesis import strategies as st
from whenever import Instant, TimeDelta

from workload_metrics import (
    QueryDefaults,
    build_expressions,
    parse_query_params,
    resolve_time_range,
)
from workload_metrics.catalog import FAMILIES, select_families
from workload_metrics.durations import parse_duration
from workload_metrics.expressions import escape_label_value

from .strategies import label_names, object_names, query_params, rate_intervals

DEFAULTS = QueryDefaults()

# =============================================================================
# TIME RANGE
# =============================================================================


@given(params=query_params())
@settings(max_examples=300)
def test_range_matches_query_time_duration_and_step(params: dict[str, list[str]]):
    """Property: end == queryTime, end - start == duration, step as given."""
    spec = parse_query_params(params, DEFAULTS)
    time_range = resolve_time_range(spec)

    assert time_range.end == Instant.from_timestamp(int(params["queryTime"][0]))
    duration = int(params.get("duration", [DEFAULTS.duration])[0])
    step = int(params.get("step", [DEFAULTS.step])[0])
    assert time_range.end - time_range.start == TimeDelta(seconds=duration)
    assert time_range.step == TimeDelta(seconds=step)
    assert time_range.start < time_range.end


@given(text=rate_intervals())
def test_rate_interval_literals_parse_to_their_sum(text: str):
    """Property: a literal's duration is the sum of its unit components."""
    seconds_per_unit = {"d": 86400, "h": 3600, "m": 60, "s": 1}
    expected = sum(
        int(amount) * seconds_per_unit[unit] for amount, unit in re.findall(r"(\d+)([dhms])", text)
    )
    assert parse_duration(text) == TimeDelta(seconds=expected)


# =============================================================================
# EXPRESSIONS
# =============================================================================


@given(params=query_params())
@settings(max_examples=300)
def test_quantile_set_exactly_on_histograms(params: dict[str, list[str]]):
    """Property: histogram expressions carry a requested quantile, others none."""
    spec = parse_query_params(params, DEFAULTS)
    for expression in build_expressions("ns", "w", spec):
        if expression.is_histogram:
            assert expression.quantile in spec.quantiles
            assert expression.text.startswith(f"histogram_quantile({expression.quantile}, ")
            assert " by (le" in expression.text
        else:
            assert expression.quantile is None
            assert "histogram_quantile" not in expression.text


@given(params=query_params())
@settings(max_examples=300)
def test_expression_count_and_order(params: dict[str, list[str]]):
    """Property: one per counter family, one per quantile per histogram family."""
    spec = parse_query_params(params, DEFAULTS)
    expected: list[tuple[str, float | None]] = []
    for family in select_families(spec.filters):
        if family.is_histogram and spec.quantiles:
            expected.extend((family.name, q) for q in spec.quantiles)
        else:
            expected.append((family.name, None))

    expressions = build_expressions("ns", "w", spec)

    assert [(e.family, e.quantile) for e in expressions] == expected
    catalog_order = [f.name for f in FAMILIES]
    indexes = [catalog_order.index(e.family) for e in expressions]
    assert indexes == sorted(indexes)


@given(params=query_params())
def test_every_expression_is_scoped_to_the_workload(params: dict[str, list[str]]):
    """Property: all expressions select the workload and rate window."""
    spec = parse_query_params(params, DEFAULTS)
    prefix = spec.direction.label_prefix
    for expression in build_expressions("ns", "my_workload", spec):
        assert f'{prefix}_workload="my_workload"' in expression.text
        assert f'{prefix}_workload_namespace="ns"' in expression.text
        assert f"{spec.rate_func}(" in expression.text
        assert f"[{spec.rate_interval}]" in expression.text


@given(params=query_params())
def test_rendering_is_deterministic(params: dict[str, list[str]]):
    """Property: the same spec always renders the same strings."""
    spec = parse_query_params(params, DEFAULTS)
    assert build_expressions("ns", "w", spec) == build_expressions("ns", "w", spec)


@given(labels=st.lists(label_names, max_size=8))
def test_group_labels_deduplicated_in_first_seen_order(labels: list[str]):
    """Property: byLabels keeps the first occurrence of each label, in order."""
    params = {"byLabels[]": labels} if labels else {}
    spec = parse_query_params(params, DEFAULTS)
    assert spec.by_labels == tuple(dict.fromkeys(labels))


@given(value=object_names)
def test_escaped_label_values_stay_quoted(value: str):
    """Property: no bare quote survives escaping."""
    escaped = escape_label_value(value)
    stripped = escaped.replace("\\\\", "").replace('\\"', "")
    assert '"' not in stripped
