"""Prometheus exporter for the Nomad agent health endpoint."""

__version__ = "0.2.0"
