"""Tests for the Kubernetes namespace access adapter."""

from __future__ import annotations

import httpx
import pytest

from mesh_console.backends import KubernetesDirectory
from mesh_console.models import ConsoleConfig

pytestmark = pytest.mark.anyio


def _directory(handler, *, openshift: bool = False) -> KubernetesDirectory:
    client = httpx.AsyncClient(
        base_url="https://kubernetes.test", transport=httpx.MockTransport(handler)
    )
    return KubernetesDirectory("https://kubernetes.test", openshift=openshift, client=client)


async def test_readable_namespace_is_allowed():
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.path)
        return httpx.Response(200, json={"kind": "Namespace", "metadata": {"name": "ns"}})

    decision = await _directory(handler).check_namespace_access("ns")

    assert decision.allowed
    assert seen == ["/api/v1/namespaces/ns"]


async def test_openshift_checks_the_project():
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.path)
        return httpx.Response(200, json={"kind": "Project"})

    decision = await _directory(handler, openshift=True).check_namespace_access("ns")

    assert decision.allowed
    assert seen == ["/apis/project.openshift.io/v1/projects/ns"]


async def test_forbidden_namespace_is_denied_with_status_message():
    status = {
        "kind": "Status",
        "status": "Failure",
        "message": 'namespaces "my_namespace" is forbidden',
        "reason": "Forbidden",
        "code": 403,
    }
    directory = _directory(lambda request: httpx.Response(403, json=status))

    decision = await directory.check_namespace_access("my_namespace")

    assert not decision.allowed
    assert decision.reason == 'HTTP 403: namespaces "my_namespace" is forbidden'


async def test_missing_namespace_is_denied():
    directory = _directory(lambda request: httpx.Response(404, text="not found"))
    decision = await directory.check_namespace_access("ghost")
    assert not decision.allowed
    assert decision.reason == "HTTP 404: Not Found"


async def test_unreachable_api_is_denied():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("no route to host", request=request)

    decision = await _directory(handler).check_namespace_access("ns")

    assert not decision.allowed
    assert "no route to host" in decision.reason


async def test_namespace_is_path_quoted():
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.raw_path.decode())
        return httpx.Response(404)

    await _directory(handler).check_namespace_access("a/b")

    assert seen == ["/api/v1/namespaces/a%2Fb"]


async def test_from_config_reads_service_account_token(tmp_path):
    token_file = tmp_path / "token"
    token_file.write_text("s3cret\n")
    config = ConsoleConfig(
        kubernetes_api_url="https://kubernetes.test",
        kubernetes_token_path=str(token_file),
        kubernetes_ca_path=None,
    )

    directory = KubernetesDirectory.from_config(config)
    try:
        assert directory._client.headers["Authorization"] == "Bearer s3cret"
        assert directory._client.base_url.host == "kubernetes.test"
    finally:
        await directory.aclose()


async def test_from_config_without_token_is_anonymous(tmp_path):
    config = ConsoleConfig(
        kubernetes_token_path=str(tmp_path / "missing"),
        kubernetes_ca_path=None,
        openshift=True,
    )

    directory = KubernetesDirectory.from_config(config)
    try:
        assert "Authorization" not in directory._client.headers
        assert directory.openshift
    finally:
        await directory.aclose()
