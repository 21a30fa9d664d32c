"""Exporter configuration system."""

from health_exporter.config.loader import load_config, resolve_config_path
from health_exporter.config.models import ExporterConfig, IdentityMode, ServiceEntry, TelemetryConfig

__all__ = [
    "ExporterConfig",
    "IdentityMode",
    "ServiceEntry",
    "TelemetryConfig",
    "load_config",
    "resolve_config_path",
]
