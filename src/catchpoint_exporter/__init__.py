"""Prometheus exporter for Catchpoint node, test and alert data."""

__version__ = "0.1.0"
