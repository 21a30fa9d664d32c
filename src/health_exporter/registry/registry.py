"""Service registry: the immutable set of probed services and its label schema."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Dict, Optional

from health_exporter.config.models import ExporterConfig, IdentityMode
from health_exporter.registry.models import LabelSchema, Service


def _reject_duplicates(what: str, values: list[str]) -> None:
    duplicates = sorted({v for v in values if values.count(v) > 1})
    if duplicates:
        raise ValueError(f"duplicate {what}: {', '.join(duplicates)}")


class ServiceRegistry:
    """Registry of probed services with a label schema fixed at construction."""

    def __init__(self, services: Iterable[Service], identity: IdentityMode = IdentityMode.NAME) -> None:
        self._services = tuple(services)
        self._identity = identity
        _reject_duplicates("service names", [s.name for s in self._services])
        if identity is IdentityMode.URI:
            _reject_duplicates("service URIs", [s.uri for s in self._services])
        self._by_key: Dict[str, Service] = {s.name: s for s in self._services}
        self._label_schema = LabelSchema(
            identity,
            (label for service in self._services for label in service.labels),
        )

    @classmethod
    def from_config(cls, config: ExporterConfig) -> ServiceRegistry:
        services = [Service(name=e.name, uri=e.uri, labels=e.labels) for e in config.services]
        return cls(services, identity=config.identity)

    @property
    def services(self) -> tuple[Service, ...]:
        return self._services

    @property
    def identity(self) -> IdentityMode:
        return self._identity

    @property
    def label_schema(self) -> LabelSchema:
        return self._label_schema

    @property
    def service_keys(self) -> list[str]:
        return list(self._by_key.keys())

    def get(self, key: str) -> Optional[Service]:
        return self._by_key.get(key)

    def __len__(self) -> int:
        return len(self._services)
