"""YAML/JSON config loader with environment variable interpolation."""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from health_exporter.config.models import ExporterConfig
from health_exporter.errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "health-exporter.yaml"
CONFIG_ENV_VAR = "HEALTH_EXPORTER_CONFIG"

_ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")


def _interpolate_env(value: str) -> str:
    """Replace ${VAR} and ${VAR:-default} patterns with environment values."""

    def _replace(match: re.Match[str]) -> str:
        expr = match.group(1)
        if ":-" in expr:
            var_name, default = expr.split(":-", 1)
            return os.environ.get(var_name.strip(), default)
        return os.environ.get(expr.strip(), match.group(0))

    return _ENV_VAR_PATTERN.sub(_replace, value)


def _interpolate_recursive(data: Any) -> Any:
    """Walk a nested data structure and interpolate env vars in strings."""
    if isinstance(data, str):
        return _interpolate_env(data)
    if isinstance(data, dict):
        return {k: _interpolate_recursive(v) for k, v in data.items()}
    if isinstance(data, list):
        return [_interpolate_recursive(item) for item in data]
    return data


def resolve_config_path(path: Path | None = None) -> Path:
    """Pick the config file: explicit path, then $HEALTH_EXPORTER_CONFIG, then ./health-exporter.yaml."""
    if path is not None:
        return path
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)
    return Path.cwd() / CONFIG_FILENAME


def load_config(path: Path | None = None) -> ExporterConfig:
    """Load and validate the exporter config. JSON files parse as YAML."""
    config_path = resolve_config_path(path)
    logger.info("reading config from %s", config_path)
    try:
        with config_path.open("r", encoding="utf-8") as fh:
            raw = yaml.safe_load(fh) or {}
    except OSError as exc:
        raise ConfigError(f"Could not read config file {config_path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Could not parse config file {config_path}: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigError(f"Invalid configuration in {config_path}: top level must be a mapping")
    data = _interpolate_recursive(raw)
    try:
        return ExporterConfig(**data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration in {config_path}: {exc}") from exc
