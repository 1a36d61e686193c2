"""Prometheus range-query adapter.

Talks to any Prometheus-compatible HTTP API (Prometheus, Thanos, Mimir) via
``/api/v1/query_range``. Failures are raised as BackendQueryError rather than
being turned into empty results; retry policy, if any, belongs here and not
in the executor.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Any

import httpx

from workload_metrics import BackendQueryError, Sample, Series, SeriesSet

if TYPE_CHECKING:
    from workload_metrics import TimeRange

logger = logging.getLogger("mesh_console.backends.prometheus")

QUERY_RANGE_PATH = "/api/v1/query_range"


class PrometheusBackend:
    """MetricsBackend over the Prometheus HTTP API.

    The underlying ``httpx.AsyncClient`` is shared by all requests for the
    lifetime of the process. Pass ``client`` to reuse or mock one; otherwise
    the backend owns its client and closes it in ``aclose``.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def query_range(self, expression: str, time_range: TimeRange) -> SeriesSet:
        params = {
            "query": expression,
            "start": str(time_range.start.timestamp()),
            "end": str(time_range.end.timestamp()),
            "step": format(time_range.step.total("seconds"), "g"),
        }
        try:
            resp = await self._client.get(QUERY_RANGE_PATH, params=params)
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPStatusError as exc:
            detail = _error_detail(exc.response)
            logger.warning(
                "Query HTTP %d: %s, query: %s", exc.response.status_code, detail, expression
            )
            raise BackendQueryError(
                expression, f"HTTP {exc.response.status_code}: {detail}"
            ) from exc
        except httpx.HTTPError as exc:
            logger.warning("Query transport error: %s, query: %s", exc, expression)
            raise BackendQueryError(expression, f"transport error: {exc}") from exc
        except ValueError as exc:
            raise BackendQueryError(expression, "response is not valid JSON") from exc

        if not isinstance(data, dict):
            raise BackendQueryError(expression, "malformed response: expected a JSON object")
        if data.get("status") != "success":
            raise BackendQueryError(
                expression, f"status {data.get('status')!r}: {data.get('error', 'unknown error')}"
            )

        try:
            return _parse_matrix(expression, data.get("data", {}))
        except (TypeError, ValueError, AttributeError) as exc:
            raise BackendQueryError(expression, f"malformed response: {exc}") from exc


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(body, dict) and "error" in body:
        return str(body["error"])
    return response.text[:200]


def _parse_matrix(expression: str, data: dict[str, Any]) -> SeriesSet:
    result_type = data.get("resultType")
    if result_type not in (None, "matrix"):
        raise BackendQueryError(expression, f"unexpected result type {result_type!r}")

    series: list[Series] = []
    for raw in data.get("result", []):
        samples = []
        for ts, val in raw.get("values", []):
            v = float(val)
            # Prometheus sends NaN and +/-Inf as strings; they are not plottable
            if math.isfinite(v):
                samples.append(Sample(timestamp=float(ts), value=v))
        series.append(Series(labels=raw.get("metric", {}), samples=tuple(samples)))
    return SeriesSet(series=tuple(series))
