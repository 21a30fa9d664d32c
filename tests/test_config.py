"""Tests for config models and the YAML/JSON loader."""

from __future__ import annotations

import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from health_exporter.config.loader import (
    CONFIG_ENV_VAR,
    _interpolate_env,
    _interpolate_recursive,
    load_config,
    resolve_config_path,
)
from health_exporter.config.models import ExporterConfig, IdentityMode, ServiceEntry, TelemetryConfig
from health_exporter.errors import ConfigError

# ─── Model tests ───


class TestServiceEntry:
    def test_minimal(self):
        entry = ServiceEntry(name="api", uri="http://localhost:9000")
        assert entry.labels == {}

    def test_labels(self):
        entry = ServiceEntry(name="api", uri="http://x", labels={"team": "core", "_env": "prod"})
        assert entry.labels["team"] == "core"

    def test_numeric_label_values(self):
        entry = ServiceEntry(name="api", uri="http://x", labels={"version": 2})
        assert entry.labels == {"version": "2"}

    def test_empty_name_rejected(self):
        with pytest.raises(ValueError):
            ServiceEntry(name="", uri="http://x")

    def test_empty_uri_rejected(self):
        with pytest.raises(ValueError):
            ServiceEntry(name="api", uri="")

    def test_invalid_label_name(self):
        with pytest.raises(ValueError, match="invalid label name"):
            ServiceEntry(name="api", uri="http://x", labels={"team-name": "core"})

    def test_reserved_label_name(self):
        with pytest.raises(ValueError, match="reserved"):
            ServiceEntry(name="api", uri="http://x", labels={"__meta": "x"})


class TestIdentityMode:
    def test_label_names(self):
        assert IdentityMode.NAME.label_name == "service_name"
        assert IdentityMode.URI.label_name == "uri"


class TestTelemetryConfig:
    def test_defaults(self):
        cfg = TelemetryConfig()
        assert cfg.address == "0.0.0.0:9990"
        assert cfg.endpoint == "/metrics"
        assert cfg.host == "0.0.0.0"
        assert cfg.port == 9990

    def test_port_only_address(self):
        cfg = TelemetryConfig(address=":9100")
        assert cfg.host == "0.0.0.0"
        assert cfg.port == 9100

    def test_invalid_address(self):
        with pytest.raises(ValueError, match="host:port"):
            TelemetryConfig(address="localhost")

    def test_invalid_endpoint(self):
        with pytest.raises(ValueError, match="must start with"):
            TelemetryConfig(endpoint="metrics")


class TestExporterConfig:
    def test_defaults(self):
        cfg = ExporterConfig()
        assert cfg.identity is IdentityMode.NAME
        assert cfg.timeout == 5.0
        assert cfg.services == []

    def test_from_sample(self, sample_config_dict):
        cfg = ExporterConfig(**sample_config_dict)
        assert len(cfg.services) == 3
        assert cfg.services[0].name == "api"
        assert cfg.telemetry.port == 9990

    def test_duplicate_names_rejected(self):
        with pytest.raises(ValueError, match="duplicate service names: api"):
            ExporterConfig(
                services=[
                    {"name": "api", "uri": "http://a"},
                    {"name": "api", "uri": "http://b"},
                ]
            )

    def test_duplicate_uris_allowed_in_name_mode(self):
        cfg = ExporterConfig(
            services=[
                {"name": "a", "uri": "http://x"},
                {"name": "b", "uri": "http://x"},
            ]
        )
        assert len(cfg.services) == 2

    def test_duplicate_uris_rejected_in_uri_mode(self):
        with pytest.raises(ValueError, match="duplicate service URIs"):
            ExporterConfig(
                identity="uri",
                services=[
                    {"name": "a", "uri": "http://x"},
                    {"name": "b", "uri": "http://x"},
                ],
            )

    def test_non_positive_timeout(self):
        with pytest.raises(ValueError):
            ExporterConfig(timeout=0)


# ─── Env interpolation tests ───


class TestInterpolation:
    def test_simple_var(self):
        with patch.dict(os.environ, {"API_HOST": "api.prod"}):
            assert _interpolate_env("http://${API_HOST}/health") == "http://api.prod/health"

    def test_default_value(self):
        env = {k: v for k, v in os.environ.items() if k != "MISSING_VAR"}
        with patch.dict(os.environ, env, clear=True):
            assert _interpolate_env("${MISSING_VAR:-fallback}") == "fallback"

    def test_missing_var_no_default(self):
        env = {k: v for k, v in os.environ.items() if k != "MISSING_VAR"}
        with patch.dict(os.environ, env, clear=True):
            assert _interpolate_env("${MISSING_VAR}") == "${MISSING_VAR}"

    def test_recursive(self):
        with patch.dict(os.environ, {"ENV": "staging"}):
            data = {"services": [{"labels": {"env": "${ENV}"}}], "timeout": 3}
            result = _interpolate_recursive(data)
            assert result["services"][0]["labels"]["env"] == "staging"
            assert result["timeout"] == 3


# ─── Loader tests ───


class TestResolveConfigPath:
    def test_explicit_path(self, tmp_path: Path):
        path = tmp_path / "x.yaml"
        assert resolve_config_path(path) == path

    def test_env_var(self, tmp_path: Path):
        path = tmp_path / "env.yaml"
        with patch.dict(os.environ, {CONFIG_ENV_VAR: str(path)}):
            assert resolve_config_path() == path

    def test_cwd_default(self, tmp_path: Path, monkeypatch):
        monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
        monkeypatch.chdir(tmp_path)
        assert resolve_config_path() == tmp_path / "health-exporter.yaml"


class TestLoadConfig:
    def test_load_yaml(self, config_file: Path):
        cfg = load_config(config_file)
        assert [s.name for s in cfg.services] == ["api", "billing", "legacy"]
        assert cfg.timeout == 2.0

    def test_load_json(self, tmp_path: Path, sample_config_dict):
        path = tmp_path / "config.json"
        path.write_text(json.dumps(sample_config_dict))
        cfg = load_config(path)
        assert cfg.services[1].labels == {"team": "payments", "region": "eu"}

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="Could not read"):
            load_config(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path: Path):
        path = tmp_path / "bad.yaml"
        path.write_text("services: [unclosed")
        with pytest.raises(ConfigError, match="Could not parse"):
            load_config(path)

    def test_non_mapping(self, tmp_path: Path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="top level must be a mapping"):
            load_config(path)

    def test_validation_error(self, tmp_path: Path):
        path = tmp_path / "invalid.yaml"
        path.write_text("services:\n  - name: api\n")
        with pytest.raises(ConfigError, match="Invalid configuration"):
            load_config(path)

    def test_config_error_is_value_error(self, tmp_path: Path):
        with pytest.raises(ValueError):
            load_config(tmp_path / "nope.yaml")

    def test_empty_file(self, tmp_path: Path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        cfg = load_config(path)
        assert cfg.services == []

    def test_env_interpolation(self, tmp_path: Path):
        path = tmp_path / "env.yaml"
        path.write_text("services:\n  - name: api\n    uri: http://${HE_TEST_HOST:-localhost}/health\n")
        cfg = load_config(path)
        assert cfg.services[0].uri == "http://localhost/health"
