"""Configuration for the mesh console metrics service.

Loaded once at startup from ``MESH_CONSOLE_*`` environment variables and
shared read-only by every request. Nested query defaults use ``__`` as the
delimiter, e.g. ``MESH_CONSOLE_DEFAULTS__RATE_INTERVAL=5m``.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from workload_metrics import QueryDefaults

IN_CLUSTER_TOKEN_PATH = "/var/run/secrets/kubernetes.io/serviceaccount/token"
IN_CLUSTER_CA_PATH = "/var/run/secrets/kubernetes.io/serviceaccount/ca.crt"


class ConsoleConfig(BaseSettings):
    """Main configuration for the mesh console."""

    # Metrics backend
    prometheus_url: str = Field(
        default="http://prometheus.istio-system:9090",
        description="Prometheus-compatible query endpoint",
    )
    query_timeout_sec: float = Field(
        default=30.0, gt=0, description="Upper bound for all backend calls of one request"
    )
    max_concurrent_queries: int = Field(
        default=8, gt=0, description="Backend calls issued in parallel per request"
    )

    # Cluster directory
    kubernetes_api_url: str = Field(
        default="https://kubernetes.default.svc", description="Kubernetes API server URL"
    )
    kubernetes_token_path: str | None = Field(
        default=IN_CLUSTER_TOKEN_PATH, description="Service account bearer token file"
    )
    kubernetes_ca_path: str | None = Field(
        default=IN_CLUSTER_CA_PATH,
        description="CA bundle for the API server; unset disables TLS verification",
    )
    openshift: bool = Field(
        default=False, description="Check access through OpenShift projects instead of namespaces"
    )

    # Query parameter defaults (nested)
    defaults: QueryDefaults = Field(default_factory=QueryDefaults)

    model_config = SettingsConfigDict(
        env_prefix="MESH_CONSOLE_",
        env_nested_delimiter="__",
        frozen=True,
    )
