"""Shared fixtures for exporter tests."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import pytest
import yaml

from health_exporter.config.models import ExporterConfig
from health_exporter.registry.registry import ServiceRegistry


SAMPLE_CONFIG: Dict[str, Any] = {
    "identity": "name",
    "timeout": 2.0,
    "services": [
        {
            "name": "api",
            "uri": "http://api.internal:8080/health",
            "labels": {"team": "core", "env": "prod"},
        },
        {
            "name": "billing",
            "uri": "http://billing.internal:8090/health",
            "labels": {"team": "payments", "region": "eu"},
        },
        {
            "name": "legacy",
            "uri": "http://legacy.internal/status",
        },
    ],
    "telemetry": {"address": "127.0.0.1:9990", "endpoint": "/metrics"},
}


@pytest.fixture()
def sample_config() -> ExporterConfig:
    """Return a parsed ExporterConfig from sample data."""
    return ExporterConfig(**SAMPLE_CONFIG)


@pytest.fixture()
def sample_config_dict() -> Dict[str, Any]:
    """Return raw sample config dict."""
    return dict(SAMPLE_CONFIG)


@pytest.fixture()
def sample_registry(sample_config: ExporterConfig) -> ServiceRegistry:
    return ServiceRegistry.from_config(sample_config)


@pytest.fixture()
def config_file(tmp_path: Path) -> Path:
    """Write sample config to a temp health-exporter.yaml and return the path."""
    path = tmp_path / "health-exporter.yaml"
    with path.open("w") as fh:
        yaml.dump(SAMPLE_CONFIG, fh)
    return path
