"""httpx-backed implementations of the collaborator protocols."""

from mesh_console.backends.kubernetes import KubernetesDirectory
from mesh_console.backends.prometheus import PrometheusBackend

__all__ = ["KubernetesDirectory", "PrometheusBackend"]
