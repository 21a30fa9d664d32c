"""Pydantic models for the exporter configuration."""

from __future__ import annotations

import re
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

_LABEL_NAME_PATTERN = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")


class IdentityMode(str, Enum):
    """Which service attribute identifies a service in the published metric."""

    NAME = "name"
    URI = "uri"

    @property
    def label_name(self) -> str:
        return "service_name" if self is IdentityMode.NAME else "uri"


class ServiceEntry(BaseModel):
    """Configuration for a single probed service."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    name: str = Field(min_length=1)
    uri: str = Field(min_length=1)
    labels: dict[str, str] = Field(default_factory=dict)

    @field_validator("labels")
    @classmethod
    def _check_label_names(cls, value: dict[str, str]) -> dict[str, str]:
        for label in value:
            if not _LABEL_NAME_PATTERN.match(label):
                raise ValueError(f"invalid label name {label!r}")
            if label.startswith("__"):
                raise ValueError(f"label name {label!r} is reserved")
        return value


class TelemetryConfig(BaseModel):
    """Where the metrics are served."""

    address: str = "0.0.0.0:9990"
    endpoint: str = "/metrics"

    @field_validator("address")
    @classmethod
    def _check_address(cls, value: str) -> str:
        _, sep, port = value.rpartition(":")
        if not sep or not port.isdigit():
            raise ValueError(f"listen address {value!r} must be host:port")
        return value

    @field_validator("endpoint")
    @classmethod
    def _check_endpoint(cls, value: str) -> str:
        if not value.startswith("/"):
            raise ValueError("metrics endpoint must start with '/'")
        return value

    @property
    def host(self) -> str:
        host, _, _ = self.address.rpartition(":")
        return host or "0.0.0.0"

    @property
    def port(self) -> int:
        _, _, port = self.address.rpartition(":")
        return int(port)


class ExporterConfig(BaseModel):
    """Root configuration model for the exporter config file."""

    identity: IdentityMode = IdentityMode.NAME
    timeout: float = Field(default=5.0, gt=0)
    services: list[ServiceEntry] = Field(default_factory=list)
    telemetry: TelemetryConfig = Field(default_factory=TelemetryConfig)

    @model_validator(mode="after")
    def _check_unique_services(self) -> ExporterConfig:
        names = [s.name for s in self.services]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"duplicate service names: {', '.join(duplicates)}")
        if self.identity is IdentityMode.URI:
            uris = [s.uri for s in self.services]
            duplicates = sorted({u for u in uris if uris.count(u) > 1})
            if duplicates:
                raise ValueError(f"duplicate service URIs: {', '.join(duplicates)}")
        return self
