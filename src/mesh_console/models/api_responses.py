"""Pydantic response models for the metrics API.

Timestamps are ISO 8601 strings; sample timestamps stay as Unix seconds so
chart clients can plot them directly.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from workload_metrics import MetricsQuerySpec, QueryResult, TimeRange


class SeriesResponse(BaseModel):
    """One labelled time series."""

    labels: dict[str, str] = Field(default_factory=dict)
    values: list[tuple[float, float]] = Field(default_factory=list)


class MetricSeriesResponse(BaseModel):
    """Series returned by one expression, tagged with its origin."""

    family: str
    expression: str
    is_histogram: bool = False
    quantile: float | None = None
    series: list[SeriesResponse] = Field(default_factory=list)


class MetricsResponse(BaseModel):
    """GET /api/namespaces/{namespace}/workloads/{workload}/metrics"""

    namespace: str
    workload: str
    start: str
    end: str
    step: int
    rate_interval: str
    rate_func: str
    direction: str
    reporter: str
    metrics: list[MetricSeriesResponse] = Field(default_factory=list)

    @classmethod
    def from_results(
        cls,
        *,
        namespace: str,
        workload: str,
        spec: MetricsQuerySpec,
        time_range: TimeRange,
        results: list[QueryResult],
    ) -> MetricsResponse:
        return cls(
            namespace=namespace,
            workload=workload,
            start=time_range.start.format_iso(),
            end=time_range.end.format_iso(),
            step=int(time_range.step.total("seconds")),
            rate_interval=spec.rate_interval,
            rate_func=spec.rate_func,
            direction=spec.direction,
            reporter=spec.reporter,
            metrics=[
                MetricSeriesResponse(
                    family=result.expression.family,
                    expression=result.expression.text,
                    is_histogram=result.expression.is_histogram,
                    quantile=result.expression.quantile,
                    series=[
                        SeriesResponse(
                            labels=series.labels,
                            values=[(sample.timestamp, sample.value) for sample in series.samples],
                        )
                        for series in result.series_set.series
                    ],
                )
                for result in results
            ],
        )


class HealthResponse(BaseModel):
    status: str = "ok"
