"""Data models for services, label schema and check results."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import IntEnum
from types import MappingProxyType
from typing import Optional

from health_exporter.config.models import IdentityMode
from health_exporter.errors import SchemaViolation


@dataclass(frozen=True)
class Service:
    """A probed service. Immutable once loaded."""

    name: str
    uri: str
    labels: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "labels", MappingProxyType(dict(self.labels)))

    def identity_value(self, identity: IdentityMode) -> str:
        return self.name if identity is IdentityMode.NAME else self.uri


class LabelSchema:
    """Fixed, sorted set of label names shared by every published sample.

    Label maps built through :meth:`build` always carry every schema key,
    with ``""`` for keys a service does not define.
    """

    def __init__(self, identity: IdentityMode, label_names: Iterable[str] = ()) -> None:
        self._identity = identity
        self._names = tuple(sorted({identity.label_name, *label_names}))

    @property
    def identity(self) -> IdentityMode:
        return self._identity

    @property
    def identity_label(self) -> str:
        return self._identity.label_name

    @property
    def names(self) -> tuple[str, ...]:
        return self._names

    def __iter__(self) -> Iterator[str]:
        return iter(self._names)

    def __len__(self) -> int:
        return len(self._names)

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LabelSchema):
            return NotImplemented
        return self._identity is other._identity and self._names == other._names

    def __hash__(self) -> int:
        return hash((self._identity, self._names))

    def __repr__(self) -> str:
        return f"LabelSchema(identity={self._identity.value!r}, names={self._names!r})"

    def build(self, service: Service) -> dict[str, str]:
        """Return the rectangular label map for *service*."""
        labels = {name: "" for name in self._names}
        for key, value in service.labels.items():
            if key not in labels:
                raise SchemaViolation(f"label {key!r} of service {service.name!r} is not in the schema")
            labels[key] = value
        labels[self.identity_label] = service.identity_value(self._identity)
        return labels

    def validate(self, labels: Mapping[str, str]) -> None:
        """Raise SchemaViolation unless *labels* has exactly the schema's keys."""
        keys = set(labels)
        expected = set(self._names)
        if keys != expected:
            missing = sorted(expected - keys)
            extra = sorted(keys - expected)
            raise SchemaViolation(f"label map does not match schema (missing={missing}, extra={extra})")


class CheckStatus(IntEnum):
    """Ordinal probe status: ERROR < DOWN < UP."""

    ERROR = 0
    DOWN = 1
    UP = 2


@dataclass(frozen=True)
class CheckOutcome:
    """Result of probing one service during one collection cycle."""

    service_key: str
    status: CheckStatus
    labels: Mapping[str, str]
    status_code: Optional[int] = None
    latency_ms: float = 0.0
    error: Optional[str] = None

    @property
    def value(self) -> float:
        return 1.0 if self.status is CheckStatus.UP else 0.0


@dataclass(frozen=True)
class Snapshot:
    """Complete result of one collection cycle."""

    overall_healthy: bool
    per_service: Mapping[str, CheckOutcome]
    collected_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def from_outcomes(cls, outcomes: Iterable[CheckOutcome]) -> Snapshot:
        per_service = {o.service_key: o for o in outcomes}
        # all() of an empty registry is True
        overall = all(o.status is CheckStatus.UP for o in per_service.values())
        return cls(overall_healthy=overall, per_service=MappingProxyType(per_service))

    @property
    def overall_value(self) -> float:
        return 1.0 if self.overall_healthy else 0.0
