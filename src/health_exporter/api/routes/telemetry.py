"""Metrics, liveness and root redirect endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Request, Response
from fastapi.responses import PlainTextResponse, RedirectResponse

from health_exporter.engine import HealthCheckEngine
from health_exporter.metrics import CONTENT_TYPE_LATEST

router = APIRouter(tags=["meta"])


async def metrics(request: Request) -> Response:
    """Run one collection cycle and return it in the Prometheus text format."""
    engine: HealthCheckEngine = request.app.state.engine
    await engine.collect()
    return Response(content=engine.metrics.render(), media_type=CONTENT_TYPE_LATEST)


@router.get("/status", response_class=PlainTextResponse)
async def status() -> str:
    return "OK"


@router.get("/", include_in_schema=False)
async def root(request: Request) -> RedirectResponse:
    return RedirectResponse(request.app.state.metrics_endpoint, status_code=301)
