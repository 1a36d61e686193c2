"""Pytest configuration and fixtures for the mesh console tests."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from mesh_console.api import create_app
from mesh_console.models import ConsoleConfig
from workload_metrics import AccessDecision, BackendQueryError, SeriesSet, TimeRange


class FakeDirectory:
    """NamespaceAccessChecker that allows everything except ``denied`` namespaces."""

    def __init__(self, denied: dict[str, str] | None = None) -> None:
        self.denied = denied or {}
        self.calls: list[str] = []

    async def check_namespace_access(self, namespace: str) -> AccessDecision:
        self.calls.append(namespace)
        if namespace in self.denied:
            return AccessDecision.deny(self.denied[namespace])
        return AccessDecision.allow()


class FakeBackend:
    """MetricsBackend recording every call and returning canned series sets.

    ``failures`` maps an expression substring to the cause raised for
    matching expressions.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, TimeRange]] = []
        self.results: dict[str, SeriesSet] = {}
        self.failures: dict[str, str] = {}

    async def query_range(self, expression: str, time_range: TimeRange) -> SeriesSet:
        self.calls.append((expression, time_range))
        for fragment, cause in self.failures.items():
            if fragment in expression:
                raise BackendQueryError(expression, cause)
        for fragment, series_set in self.results.items():
            if fragment in expression:
                return series_set
        return SeriesSet()


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def config() -> ConsoleConfig:
    return ConsoleConfig(
        prometheus_url="http://prometheus.test:9090",
        kubernetes_api_url="https://kubernetes.test",
        kubernetes_token_path=None,
        kubernetes_ca_path=None,
    )


@pytest.fixture
def directory() -> FakeDirectory:
    return FakeDirectory(denied={"my_namespace": "no privileges"})


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def client(config: ConsoleConfig, directory: FakeDirectory, backend: FakeBackend) -> TestClient:
    """Test client with fake collaborators injected (no cluster, no Prometheus)."""
    app = create_app(config, directory=directory, backend=backend)
    return TestClient(app)
