"""Query executor: runs rendered expressions against the metrics backend.

Calls for one request run concurrently (bounded by a semaphore) inside a
TaskGroup, so a failure or a cancelled request cancels every outstanding
call. Results are returned in expression order regardless of completion
order.

Partial failure policy: any failed expression fails the whole request with
a single QueryExecutionError; partial results are never returned.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from workload_metrics import BackendQueryError, QueryExecutionError, QueryResult

if TYPE_CHECKING:
    from workload_metrics import Expression, TimeRange

    from mesh_console.protocols import MetricsBackend

logger = logging.getLogger("mesh_console.executor")


async def execute_expressions(
    backend: MetricsBackend,
    expressions: list[Expression],
    time_range: TimeRange,
    *,
    max_concurrency: int = 8,
    timeout_sec: float | None = None,
) -> list[QueryResult]:
    """Query every expression over ``time_range`` and collect tagged results.

    Raises:
        QueryExecutionError: if one or more backend calls failed.
        TimeoutError: if all calls did not finish within ``timeout_sec``.
    """
    if not expressions:
        return []

    semaphore = asyncio.Semaphore(max_concurrency)

    async def run(expression: Expression) -> QueryResult:
        async with semaphore:
            series_set = await backend.query_range(expression.text, time_range)
        return QueryResult(expression=expression, series_set=series_set)

    try:
        async with asyncio.timeout(timeout_sec):
            async with asyncio.TaskGroup() as group:
                tasks = [group.create_task(run(expression)) for expression in expressions]
    except ExceptionGroup as eg:
        failures, rest = eg.split(BackendQueryError)
        if failures is None or rest is not None:
            raise
        errors = [exc for exc in failures.exceptions if isinstance(exc, BackendQueryError)]
        for error in errors:
            logger.warning("Backend query failed: %s (%s)", error.expression, error.cause)
        raise QueryExecutionError(errors) from eg

    return [task.result() for task in tasks]
