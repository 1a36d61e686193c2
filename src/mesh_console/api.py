"""FastAPI service exposing workload traffic metrics.

Request flow for ``GET /api/namespaces/{namespace}/workloads/{workload}/metrics``:

  access guard -> parameter parser -> time range + expressions -> executor

The access check runs exactly once per request and before anything else;
parameter validation completes before any metrics backend call is issued.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Annotated

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware

from mesh_console import __version__
from mesh_console.access import ensure_namespace_access
from mesh_console.backends import KubernetesDirectory, PrometheusBackend
from mesh_console.executor import execute_expressions
from mesh_console.models import ConsoleConfig, HealthResponse, MetricsResponse
from workload_metrics import (
    AccessDeniedError,
    ParameterValidationError,
    QueryExecutionError,
    build_expressions,
    parse_query_params,
    resolve_time_range,
)

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from mesh_console.protocols import MetricsBackend, NamespaceAccessChecker

logger = logging.getLogger("mesh_console.api")


@dataclass(frozen=True)
class Services:
    """Process-lifetime collaborators shared read-only by all requests."""

    config: ConsoleConfig
    directory: NamespaceAccessChecker
    backend: MetricsBackend


def _get_services(request: Request) -> Services:
    services = getattr(request.app.state, "services", None)
    if services is None:
        raise HTTPException(status_code=503, detail="Metrics services not configured")
    return services


def _multi_params(request: Request) -> dict[str, list[str]]:
    """Collect query parameters keeping every value of repeated keys, in order."""
    params: dict[str, list[str]] = {}
    for key, value in request.query_params.multi_items():
        params.setdefault(key, []).append(value)
    return params


# =============================================================================
# ENDPOINTS
# =============================================================================

router = APIRouter(prefix="/api", tags=["metrics"])


@router.get("/namespaces/{namespace}/workloads/{workload}/metrics")
async def get_workload_metrics(
    namespace: str,
    workload: str,
    request: Request,
    services: Annotated[Services, Depends(_get_services)],
) -> MetricsResponse:
    """Traffic metrics for one workload over a time window."""
    try:
        await ensure_namespace_access(services.directory, namespace)
    except AccessDeniedError as exc:
        raise HTTPException(status_code=403, detail=str(exc)) from exc

    try:
        spec = parse_query_params(_multi_params(request), services.config.defaults)
    except ParameterValidationError as exc:
        raise HTTPException(status_code=400, detail=exc.message) from exc

    time_range = resolve_time_range(spec)
    expressions = build_expressions(namespace, workload, spec)

    try:
        results = await execute_expressions(
            services.backend,
            expressions,
            time_range,
            max_concurrency=services.config.max_concurrent_queries,
            timeout_sec=services.config.query_timeout_sec,
        )
    except QueryExecutionError as exc:
        logger.error("Metrics for %s/%s failed: %s", namespace, workload, exc)
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    except TimeoutError as exc:
        timeout = services.config.query_timeout_sec
        logger.error("Metrics for %s/%s timed out after %ss", namespace, workload, timeout)
        raise HTTPException(
            status_code=504, detail=f"metrics queries did not complete within {timeout}s"
        ) from exc

    logger.info(
        "Served %d expressions for %s/%s over [%s, %s]",
        len(expressions),
        namespace,
        workload,
        time_range.start.format_iso(),
        time_range.end.format_iso(),
    )
    return MetricsResponse.from_results(
        namespace=namespace,
        workload=workload,
        spec=spec,
        time_range=time_range,
        results=results,
    )


# =============================================================================
# FASTAPI APPLICATION
# =============================================================================


def create_app(
    config: ConsoleConfig | None = None,
    *,
    directory: NamespaceAccessChecker | None = None,
    backend: MetricsBackend | None = None,
) -> FastAPI:
    """Build the application.

    When both collaborators are injected they are used as-is and nothing is
    created at startup. Otherwise the lifespan builds httpx-backed clients
    from ``config`` (or the environment) and closes them on shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if app.state.services is not None:
            yield
            return

        cfg = config or ConsoleConfig()
        owned: list[KubernetesDirectory | PrometheusBackend] = []
        if directory is None:
            kube = KubernetesDirectory.from_config(cfg)
            owned.append(kube)
        else:
            kube = directory
        if backend is None:
            prom = PrometheusBackend(cfg.prometheus_url, timeout=cfg.query_timeout_sec)
            owned.append(prom)
        else:
            prom = backend

        logger.info(
            "Metrics backend %s, cluster directory %s",
            cfg.prometheus_url,
            cfg.kubernetes_api_url,
        )
        app.state.services = Services(config=cfg, directory=kube, backend=prom)
        try:
            yield
        finally:
            app.state.services = None
            for client in owned:
                await client.aclose()

    app = FastAPI(
        title="Mesh Console Metrics API",
        description="Workload traffic metrics scoped by namespace.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.services = None
    if directory is not None and backend is not None:
        app.state.services = Services(
            config=config or ConsoleConfig(), directory=directory, backend=backend
        )

    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]  # Starlette middleware typing
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    app.include_router(router)

    @app.get("/healthz")
    async def healthz() -> HealthResponse:
        return HealthResponse()

    return app


app = create_app()
