"""Service registry, probes and result models."""

from health_exporter.registry.health import probe, probe_all, status_from_code
from health_exporter.registry.models import CheckOutcome, CheckStatus, LabelSchema, Service, Snapshot
from health_exporter.registry.registry import ServiceRegistry

__all__ = [
    "CheckOutcome",
    "CheckStatus",
    "LabelSchema",
    "Service",
    "ServiceRegistry",
    "Snapshot",
    "probe",
    "probe_all",
    "status_from_code",
]
