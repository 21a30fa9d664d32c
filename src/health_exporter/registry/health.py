"""Async HTTP probes."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Sequence

import httpx

from health_exporter.errors import ProbeError, SchemaViolation
from health_exporter.registry.models import CheckOutcome, CheckStatus, LabelSchema, Service

logger = logging.getLogger(__name__)


def status_from_code(status_code: int) -> CheckStatus:
    """Map an HTTP status code to UP for [200, 400), DOWN otherwise."""
    return CheckStatus.UP if 200 <= status_code < 400 else CheckStatus.DOWN


async def _fetch_status_code(uri: str, timeout: float) -> int:
    """Send a GET and return the status code. The response body is never read."""
    try:
        async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as client:
            request = client.build_request("GET", uri)
            resp = await asyncio.wait_for(client.send(request, stream=True), timeout=timeout)
            try:
                return resp.status_code
            finally:
                await resp.aclose()
    except (httpx.TimeoutException, TimeoutError) as exc:
        raise ProbeError(uri, f"Timeout after {timeout}s") from exc
    except httpx.ConnectError as exc:
        raise ProbeError(uri, f"Connection failed: {exc}") from exc
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        raise ProbeError(uri, str(exc) or type(exc).__name__) from exc


async def probe(service: Service, schema: LabelSchema, timeout: float = 5.0) -> CheckOutcome:
    """Probe a single service. Transport failures become ERROR outcomes."""
    labels = schema.build(service)
    start = time.monotonic()
    try:
        status_code = await _fetch_status_code(service.uri, timeout)
    except ProbeError as exc:
        latency = (time.monotonic() - start) * 1000
        logger.warning("Error reading from URI %s: %s", service.uri, exc.message)
        return CheckOutcome(
            service_key=service.name,
            status=CheckStatus.ERROR,
            labels=labels,
            latency_ms=round(latency, 1),
            error=exc.message,
        )
    latency = (time.monotonic() - start) * 1000
    status = status_from_code(status_code)
    logger.debug("status for %s: %s (%d)", service.name, status.name, status_code)
    return CheckOutcome(
        service_key=service.name,
        status=status,
        labels=labels,
        status_code=status_code,
        latency_ms=round(latency, 1),
    )


async def probe_all(
    services: Sequence[Service],
    schema: LabelSchema,
    timeout: float = 5.0,
) -> list[CheckOutcome]:
    """Probe all services concurrently and wait for every probe to finish."""
    results = await asyncio.gather(
        *(probe(service, schema, timeout=timeout) for service in services),
        return_exceptions=True,
    )
    out: list[CheckOutcome] = []
    for service, result in zip(services, results):
        if isinstance(result, BaseException):
            if isinstance(result, SchemaViolation) or not isinstance(result, Exception):
                raise result
            logger.error("Unexpected failure probing %s: %r", service.name, result)
            out.append(
                CheckOutcome(
                    service_key=service.name,
                    status=CheckStatus.ERROR,
                    labels=schema.build(service),
                    error=str(result) or type(result).__name__,
                )
            )
        else:
            out.append(result)
    return out
