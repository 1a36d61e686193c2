"""Cluster directory adapter: namespace access checks against the Kubernetes API.

A namespace is readable when ``GET /api/v1/namespaces/{name}`` succeeds with
the console's credentials. On OpenShift the project endpoint is used instead,
which also honours project-level RBAC.
"""

from __future__ import annotations

import logging
import ssl
from pathlib import Path
from typing import TYPE_CHECKING
from urllib.parse import quote

import httpx

from workload_metrics import AccessDecision

if TYPE_CHECKING:
    from mesh_console.models import ConsoleConfig

logger = logging.getLogger("mesh_console.backends.kubernetes")


class KubernetesDirectory:
    """NamespaceAccessChecker backed by the Kubernetes (or OpenShift) REST API."""

    def __init__(
        self,
        api_url: str,
        *,
        token: str | None = None,
        verify: ssl.SSLContext | bool = True,
        openshift: bool = False,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.openshift = openshift
        self._owns_client = client is None
        if client is None:
            headers = {"Authorization": f"Bearer {token}"} if token else {}
            client = httpx.AsyncClient(
                base_url=api_url, headers=headers, verify=verify, timeout=timeout
            )
        self._client = client

    @classmethod
    def from_config(cls, config: ConsoleConfig) -> KubernetesDirectory:
        token = None
        if config.kubernetes_token_path and Path(config.kubernetes_token_path).is_file():
            token = Path(config.kubernetes_token_path).read_text().strip()
        else:
            logger.info("No service account token found; querying the API anonymously")

        verify: ssl.SSLContext | bool = config.kubernetes_ca_path is not None
        if config.kubernetes_ca_path and Path(config.kubernetes_ca_path).is_file():
            verify = ssl.create_default_context(cafile=config.kubernetes_ca_path)

        return cls(
            config.kubernetes_api_url,
            token=token,
            verify=verify,
            openshift=config.openshift,
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _lookup_path(self, namespace: str) -> str:
        name = quote(namespace, safe="")
        if self.openshift:
            return f"/apis/project.openshift.io/v1/projects/{name}"
        return f"/api/v1/namespaces/{name}"

    async def check_namespace_access(self, namespace: str) -> AccessDecision:
        try:
            resp = await self._client.get(self._lookup_path(namespace))
        except httpx.HTTPError as exc:
            return AccessDecision.deny(f"directory lookup failed: {exc}")

        if resp.status_code == httpx.codes.OK:
            return AccessDecision.allow()
        return AccessDecision.deny(f"HTTP {resp.status_code}: {_status_message(resp)}")


def _status_message(response: httpx.Response) -> str:
    """Extract the ``message`` of a Kubernetes Status object when present."""
    try:
        body = response.json()
    except ValueError:
        return response.reason_phrase
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return response.reason_phrase
