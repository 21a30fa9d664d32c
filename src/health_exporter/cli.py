"""health-exporter CLI entry point."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from health_exporter.errors import ConfigError

if TYPE_CHECKING:
    from health_exporter.config.models import ExporterConfig

app = typer.Typer(
    name="health-exporter",
    help="Probe HTTP services and export their health as Prometheus metrics",
    no_args_is_help=True,
)
console = Console()

ConfigOption = typer.Option(None, "--config", "-c", help="Path to the config file (YAML or JSON)")
LogLevelOption = typer.Option("INFO", "--log-level", help="Logging level")

_STATUS_STYLES = {"UP": "green", "DOWN": "red", "ERROR": "yellow"}


def _setup_logging(level: str) -> None:
    levels = logging.getLevelNamesMapping()
    if level.upper() not in levels:
        choices = ", ".join(("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"))
        console.print(f"[red]Unknown log level {escape(level)!r} (choose from {choices})[/red]")
        raise typer.Exit(1)
    logging.basicConfig(
        level=levels[level.upper()],
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _load(path: Path | None) -> ExporterConfig:
    from health_exporter.config.loader import load_config

    try:
        return load_config(path=path)
    except ConfigError as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(1)


@app.command()
def serve(
    config_path: Path | None = ConfigOption,
    address: str | None = typer.Option(None, "--address", help="host:port to listen on"),
    endpoint: str | None = typer.Option(None, "--endpoint", help="Path under which to expose metrics"),
    log_level: str = LogLevelOption,
) -> None:
    """Start the exporter HTTP server."""
    import uvicorn

    from health_exporter.api.app import create_app
    from health_exporter.config.models import TelemetryConfig

    _setup_logging(log_level)
    config = _load(config_path)

    try:
        telemetry = TelemetryConfig(
            address=address or config.telemetry.address,
            endpoint=endpoint or config.telemetry.endpoint,
        )
    except ValueError as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(1)
    config = config.model_copy(update={"telemetry": telemetry})

    console.print(
        f"[bold]health-exporter[/bold] probing {len(config.services)} service(s), "
        f"serving http://{telemetry.address}{telemetry.endpoint}"
    )
    uvicorn.run(create_app(config), host=telemetry.host, port=telemetry.port, log_level=log_level.lower())


@app.command()
def check(
    config_path: Path | None = ConfigOption,
    log_level: str = typer.Option("WARNING", "--log-level", help="Logging level"),
) -> None:
    """Run one collection cycle and print the result."""
    from health_exporter.engine import create_engine
    from health_exporter.registry.registry import ServiceRegistry

    _setup_logging(log_level)
    config = _load(config_path)
    registry = ServiceRegistry.from_config(config)
    engine = create_engine(registry, timeout=config.timeout)
    snapshot = asyncio.run(engine.collect())

    table = Table(title="Service Health")
    table.add_column("Service", style="bold")
    table.add_column("URI")
    table.add_column("Status")
    table.add_column("Code")
    table.add_column("Latency")

    for service in registry.services:
        outcome = snapshot.per_service[service.name]
        style = _STATUS_STYLES[outcome.status.name]
        code = str(outcome.status_code) if outcome.status_code is not None else "—"
        latency = f"{outcome.latency_ms:.0f}ms" if outcome.latency_ms else "—"
        table.add_row(service.name, service.uri, f"[{style}]{outcome.status.name}[/{style}]", code, latency)

    console.print(table)
    if snapshot.overall_healthy:
        console.print("\n[green bold]All services healthy.[/green bold]")
    else:
        console.print("\n[red bold]Some services are unhealthy.[/red bold]")
        raise typer.Exit(1)


config_app = typer.Typer(name="config", help="Configuration commands")
app.add_typer(config_app)


@config_app.command("validate")
def config_validate(config_path: Path | None = ConfigOption) -> None:
    """Validate the configuration file."""
    from urllib.parse import urlparse

    config = _load(config_path)
    console.print("[green]✓[/green] Configuration parses and validates")

    # URIs are not rejected at startup, only reported here
    warnings: list[str] = []
    for entry in config.services:
        parsed = urlparse(entry.uri)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            warnings.append(f"Service '{entry.name}': URI '{entry.uri}' will always fail to probe")
        else:
            console.print(f"[green]✓[/green] Service '{entry.name}' URI is valid")

    for w in warnings:
        console.print(f"[yellow]! {w}[/yellow]")
    console.print("\n[green bold]Configuration is valid.[/green bold]")


@config_app.command("show")
def config_show(config_path: Path | None = ConfigOption) -> None:
    """Print the resolved configuration and label schema."""
    from health_exporter.registry.registry import ServiceRegistry

    config = _load(config_path)
    registry = ServiceRegistry.from_config(config)

    console.print(f"[bold]Identity:[/bold] {config.identity.value}")
    console.print(f"[bold]Timeout:[/bold] {config.timeout}s")
    console.print(f"[bold]Telemetry:[/bold] {config.telemetry.address}{config.telemetry.endpoint}")
    console.print(f"[bold]Labels:[/bold] {', '.join(registry.label_schema.names)}\n")

    console.print("[bold]Services:[/bold]")
    for entry in config.services:
        console.print(f"  {entry.name} @ {entry.uri}")
        if entry.labels:
            pairs = ", ".join(f"{k}={v}" for k, v in sorted(entry.labels.items()))
            console.print(f"    Labels: {pairs}")


def main() -> None:
    app()
