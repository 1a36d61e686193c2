"""Mesh Console - workload traffic metrics for a service-mesh observability console.

Quick Start:
    uvicorn mesh_console.api:app

    curl 'http://localhost:8000/api/namespaces/bookinfo/workloads/reviews-v1/metrics'
"""

__version__ = "0.1.0"
