"""Prometheus exposition of health snapshots.

``HealthMetrics`` owns its own ``CollectorRegistry`` instead of using the
process-global default one. The engine hands it each finished snapshot via
:meth:`HealthMetrics.publish`; a scrape reads exactly one snapshot reference,
so the two gauge families it renders always come from the same cycle.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from typing import Optional

from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, generate_latest
from prometheus_client.core import GaugeMetricFamily, Metric

from health_exporter.registry.models import LabelSchema, Snapshot

logger = logging.getLogger(__name__)

NAMESPACE = "health"

__all__ = ["CONTENT_TYPE_LATEST", "HealthMetrics", "NAMESPACE"]


class HealthMetrics:
    """Custom collector exposing ``health_overall`` and ``health_service``."""

    def __init__(
        self,
        schema: LabelSchema,
        namespace: str = NAMESPACE,
        registry: Optional[CollectorRegistry] = None,
    ) -> None:
        self._schema = schema
        self._namespace = namespace
        self._snapshot: Optional[Snapshot] = None
        self._lock = threading.Lock()
        self.registry = registry if registry is not None else CollectorRegistry()
        self.registry.register(self)

    @property
    def schema(self) -> LabelSchema:
        return self._schema

    @property
    def snapshot(self) -> Optional[Snapshot]:
        with self._lock:
            return self._snapshot

    def publish(self, snapshot: Snapshot) -> None:
        """Replace the published snapshot. Every label map must match the schema."""
        for outcome in snapshot.per_service.values():
            self._schema.validate(outcome.labels)
        with self._lock:
            self._snapshot = snapshot

    def _families(self) -> tuple[GaugeMetricFamily, GaugeMetricFamily]:
        overall = GaugeMetricFamily(
            f"{self._namespace}_overall",
            "overall service availability",
        )
        by_service = GaugeMetricFamily(
            f"{self._namespace}_service",
            "service status by service",
            labels=list(self._schema.names),
        )
        return overall, by_service

    def describe(self) -> Iterator[Metric]:
        yield from self._families()

    def collect(self) -> Iterator[Metric]:
        snapshot = self.snapshot
        overall, by_service = self._families()
        if snapshot is None:
            overall.add_metric([], 0.0)
        else:
            overall.add_metric([], snapshot.overall_value)
            for key in sorted(snapshot.per_service):
                outcome = snapshot.per_service[key]
                by_service.add_metric([outcome.labels[name] for name in self._schema.names], outcome.value)
        yield overall
        yield by_service

    def render(self) -> bytes:
        """Serialize the registry in the Prometheus text exposition format."""
        return generate_latest(self.registry)
