"""Tests for environment-driven service configuration."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from mesh_console.models import ConsoleConfig


def test_nested_defaults_from_environment(monkeypatch):
    monkeypatch.setenv("MESH_CONSOLE_DEFAULTS__RATE_INTERVAL", "5m")
    monkeypatch.setenv("MESH_CONSOLE_DEFAULTS__STEP", "30")
    config = ConsoleConfig()
    assert config.defaults.rate_interval == "5m"
    assert config.defaults.step == 30


def test_bad_default_rate_interval_fails_at_startup(monkeypatch):
    monkeypatch.setenv("MESH_CONSOLE_DEFAULTS__RATE_INTERVAL", "5 minutes")
    with pytest.raises(ValidationError, match="rate_interval"):
        ConsoleConfig()
