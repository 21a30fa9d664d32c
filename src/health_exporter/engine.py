"""Health-check engine: probe every service and publish one snapshot per cycle."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from health_exporter.errors import RegistryNotInitializedError
from health_exporter.metrics import HealthMetrics
from health_exporter.registry.health import probe_all
from health_exporter.registry.models import Snapshot
from health_exporter.registry.registry import ServiceRegistry

logger = logging.getLogger(__name__)


class HealthCheckEngine:
    """Runs collection cycles against a ServiceRegistry.

    Cycles are serialized by a lock; the probes inside a cycle run
    concurrently. Per-probe failures are part of the snapshot, never raised.
    """

    def __init__(
        self,
        metrics: HealthMetrics,
        registry: Optional[ServiceRegistry] = None,
        timeout: float = 5.0,
    ) -> None:
        self._metrics = metrics
        self._registry: Optional[ServiceRegistry] = None
        self._timeout = timeout
        self._lock = asyncio.Lock()
        if registry is not None:
            self.bind(registry)

    def bind(self, registry: ServiceRegistry) -> None:
        if registry.label_schema != self._metrics.schema:
            raise ValueError("registry label schema does not match the metrics schema")
        self._registry = registry

    @property
    def registry(self) -> Optional[ServiceRegistry]:
        return self._registry

    @property
    def metrics(self) -> HealthMetrics:
        return self._metrics

    @property
    def latest(self) -> Optional[Snapshot]:
        return self._metrics.snapshot

    async def collect(self) -> Snapshot:
        """Probe all services, publish the snapshot and return it."""
        if self._registry is None:
            raise RegistryNotInitializedError("collect() called before a service registry was bound")
        registry = self._registry
        async with self._lock:
            outcomes = await probe_all(registry.services, registry.label_schema, timeout=self._timeout)
            snapshot = Snapshot.from_outcomes(outcomes)
            for outcome in outcomes:
                logger.info("%s -> %s", outcome.service_key, outcome.status.name)
            self._metrics.publish(snapshot)
        logger.info(
            "collected %d services, overall %s",
            len(snapshot.per_service),
            "healthy" if snapshot.overall_healthy else "unhealthy",
        )
        return snapshot


def create_engine(registry: ServiceRegistry, timeout: float = 5.0) -> HealthCheckEngine:
    """Build an engine with its own metrics registry for *registry*."""
    metrics = HealthMetrics(registry.label_schema)
    return HealthCheckEngine(metrics, registry=registry, timeout=timeout)
