"""Expression builder: renders PromQL for a workload's sub-metric families.

Shapes produced (``<sel>`` is the workload/namespace label selector):

  counter    sum(rate(<metric><sel>[1m])) by (response_code)
  histogram  histogram_quantile(0.95, sum(rate(<metric>_bucket<sel>[1m])) by (le,response_code))
  average    sum(rate(<metric>_sum<sel>[1m])) / sum(rate(<metric>_count<sel>[1m]))

The ``by (...)`` clause is omitted when no grouping labels are requested,
except on histograms, which always group by the bucket label ``le``.
No I/O happens here; the same spec always renders the same strings.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from workload_metrics.catalog import select_families
from workload_metrics.models import Expression

if TYPE_CHECKING:
    from workload_metrics.catalog import MetricFamily
    from workload_metrics.models import MetricsQuerySpec

BUCKET_LABEL = "le"


def build_expressions(namespace: str, workload: str, spec: MetricsQuerySpec) -> list[Expression]:
    """Render one expression per eligible family, or one per quantile for histograms.

    Output order is catalog order, then quantile order as requested.
    """
    expressions: list[Expression] = []
    for family in select_families(spec.filters):
        selector = label_selector(namespace, workload, spec, family)
        if family.is_histogram and spec.quantiles:
            expressions.extend(
                Expression(
                    family=family.name,
                    text=_histogram_quantile(family, selector, spec, quantile),
                    is_histogram=True,
                    quantile=quantile,
                )
                for quantile in spec.quantiles
            )
        elif family.is_histogram:
            expressions.append(
                Expression(family=family.name, text=_histogram_average(family, selector, spec))
            )
        else:
            expressions.append(
                Expression(family=family.name, text=_counter(family, selector, spec))
            )
    return expressions


def label_selector(
    namespace: str, workload: str, spec: MetricsQuerySpec, family: MetricFamily
) -> str:
    """Render the ``{...}`` matcher block restricting series to one workload."""
    prefix = spec.direction.label_prefix
    matchers = [
        f'reporter="{spec.reporter}"',
        f'{prefix}_workload_namespace="{escape_label_value(namespace)}"',
        f'{prefix}_workload="{escape_label_value(workload)}"',
    ]
    if spec.request_protocol and family.has_request_protocol:
        matchers.append(f'request_protocol="{escape_label_value(spec.request_protocol)}"')
    matchers.extend(family.extra_matchers)
    return "{" + ",".join(matchers) + "}"


def escape_label_value(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")


def _rate(metric: str, selector: str, spec: MetricsQuerySpec) -> str:
    return f"{spec.rate_func}({metric}{selector}[{spec.rate_interval}])"


def _group_by(labels: tuple[str, ...]) -> str:
    return f" by ({','.join(labels)})" if labels else ""


def _counter(family: MetricFamily, selector: str, spec: MetricsQuerySpec) -> str:
    return f"sum({_rate(family.metric, selector, spec)}){_group_by(spec.by_labels)}"


def _histogram_quantile(
    family: MetricFamily, selector: str, spec: MetricsQuerySpec, quantile: float
) -> str:
    labels = (BUCKET_LABEL, *(label for label in spec.by_labels if label != BUCKET_LABEL))
    buckets = _rate(f"{family.metric}_bucket", selector, spec)
    return f"histogram_quantile({quantile}, sum({buckets}){_group_by(labels)})"


def _histogram_average(family: MetricFamily, selector: str, spec: MetricsQuerySpec) -> str:
    group = _group_by(spec.by_labels)
    total = _rate(f"{family.metric}_sum", selector, spec)
    count = _rate(f"{family.metric}_count", selector, spec)
    return f"sum({total}){group} / sum({count}){group}"
