"""Exception hierarchy for the health exporter."""

from __future__ import annotations


class HealthExporterError(Exception):
    """Base class for all exporter errors."""


class ConfigError(HealthExporterError, ValueError):
    """Configuration is missing, unreadable or invalid. Fatal at startup."""


class ProbeError(HealthExporterError):
    """A single probe could not complete the request (connect, timeout, bad URL)."""

    def __init__(self, uri: str, message: str) -> None:
        super().__init__(f"{uri}: {message}")
        self.uri = uri
        self.message = message


class SchemaViolation(HealthExporterError):
    """A label map does not match the label schema."""


class RegistryNotInitializedError(HealthExporterError):
    """The engine was asked to collect before a service registry was bound."""
