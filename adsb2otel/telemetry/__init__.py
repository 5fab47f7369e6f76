"""Telemetry export for adsb2otel."""

from .sink import DiscardingSink, LogSink, OTelLogSink

__all__ = ["DiscardingSink", "LogSink", "OTelLogSink"]
