"""FastAPI application factory for the exporter."""

from __future__ import annotations

from fastapi import FastAPI

from health_exporter import __version__
from health_exporter.api.routes import telemetry
from health_exporter.config.models import ExporterConfig
from health_exporter.engine import HealthCheckEngine, create_engine
from health_exporter.registry.registry import ServiceRegistry


def create_app(
    config: ExporterConfig,
    engine: HealthCheckEngine | None = None,
    metrics_endpoint: str | None = None,
) -> FastAPI:
    app = FastAPI(title="health-exporter", version=__version__, docs_url=None, redoc_url=None)

    if engine is None:
        engine = create_engine(ServiceRegistry.from_config(config), timeout=config.timeout)
    endpoint = metrics_endpoint or config.telemetry.endpoint

    app.state.config = config
    app.state.engine = engine
    app.state.metrics_endpoint = endpoint

    app.add_api_route(endpoint, telemetry.metrics, methods=["GET"], tags=["meta"])
    app.include_router(telemetry.router)

    return app
