"""Prometheus exporter that republishes HTTP service health as gauges."""

__version__ = "0.1.0"
