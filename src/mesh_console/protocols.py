"""Capability interfaces for the two external collaborators.

The request handler receives implementations of these protocols instead of
constructing clients itself, so tests can substitute fakes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from workload_metrics import AccessDecision, SeriesSet, TimeRange


@runtime_checkable
class NamespaceAccessChecker(Protocol):
    async def check_namespace_access(self, namespace: str) -> AccessDecision: ...


@runtime_checkable
class MetricsBackend(Protocol):
    async def query_range(self, expression: str, time_range: TimeRange) -> SeriesSet:
        """Run a range query.

        Raises:
            BackendQueryError: if the backend cannot answer the query.
        """
        ...
