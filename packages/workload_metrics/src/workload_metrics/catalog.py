"""Static catalog of workload sub-metric families.

Families map a stable name (used by the ``filters[]`` parameter and in
responses) to the Istio standard metric that backs it. Whether a family has
histogram buckets is a property of the catalog, never of user input.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class MetricFamily(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    metric: str
    is_histogram: bool = False
    # Applies to request-level metrics; TCP metrics carry no protocol label.
    has_request_protocol: bool = True
    # Extra matchers rendered verbatim after the workload/namespace matchers.
    extra_matchers: tuple[str, ...] = ()


# Order is the response order: request families first, then TCP.
FAMILIES: tuple[MetricFamily, ...] = (
    MetricFamily(name="request_count", metric="istio_requests_total"),
    MetricFamily(
        name="request_error_count",
        metric="istio_requests_total",
        extra_matchers=('response_code=~"[45][0-9]{2}"',),
    ),
    MetricFamily(
        name="request_duration", metric="istio_request_duration_seconds", is_histogram=True
    ),
    MetricFamily(name="request_size", metric="istio_request_bytes", is_histogram=True),
    MetricFamily(name="response_size", metric="istio_response_bytes", is_histogram=True),
    MetricFamily(
        name="tcp_received", metric="istio_tcp_received_bytes_total", has_request_protocol=False
    ),
    MetricFamily(name="tcp_sent", metric="istio_tcp_sent_bytes_total", has_request_protocol=False),
)

FAMILIES_BY_NAME: dict[str, MetricFamily] = {family.name: family for family in FAMILIES}


def select_families(filters: frozenset[str] | set[str] = frozenset()) -> list[MetricFamily]:
    """Return catalog families in catalog order, restricted to ``filters`` when given.

    Filter names that are not in the catalog select nothing.
    """
    if not filters:
        return list(FAMILIES)
    return [family for family in FAMILIES if family.name in filters]


def is_histogram_family(name: str) -> bool:
    family = FAMILIES_BY_NAME.get(name)
    return family is not None and family.is_histogram
