"""Pydantic models for the mesh console service."""

from .api_responses import (
    HealthResponse,
    MetricSeriesResponse,
    MetricsResponse,
    SeriesResponse,
)
from .config import ConsoleConfig

__all__ = [
    "ConsoleConfig",
    "HealthResponse",
    "MetricSeriesResponse",
    "MetricsResponse",
    "SeriesResponse",
]
