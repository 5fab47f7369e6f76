"""OpenTelemetry log and trace export bootstrap."""

from __future__ import annotations

import logging
import os
import platform
import sys
from typing import Callable

from opentelemetry import trace
from opentelemetry.propagate import set_global_textmap
from opentelemetry.sdk._logs import LoggerProvider
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.trace.propagation.tracecontext import TraceContextTextMapPropagator

from adsb2otel.config import (
    SERVICE_NAME,
    SERVICE_VERSION,
    ExporterSettings,
    load_exporter_settings,
    settings,
)
from adsb2otel.telemetry.sink import DiscardingSink, LogSink, OTelLogSink

logger = logging.getLogger("adsb2otel.telemetry")

Shutdown = Callable[[], None]


def _noop() -> None:
    return None


def build_resource() -> Resource:
    return Resource.create(
        {
            "service.name": SERVICE_NAME,
            "service.version": SERVICE_VERSION,
            "process.runtime.name": platform.python_implementation().lower(),
            "process.runtime.version": platform.python_version(),
            "process.runtime.description": sys.version,
            "process.pid": os.getpid(),
        }
    )


def _log_exporter(options: ExporterSettings):
    if options.protocol == "grpc":
        from opentelemetry.exporter.otlp.proto.grpc._log_exporter import OTLPLogExporter

        return OTLPLogExporter(
            endpoint=options.endpoint,
            insecure=options.insecure,
            headers=options.headers or None,
        )

    from opentelemetry.exporter.otlp.proto.http._log_exporter import OTLPLogExporter

    return OTLPLogExporter(
        endpoint=f"{options.url}/v1/logs", headers=options.headers or None
    )


def _span_exporter(options: ExporterSettings):
    if options.protocol == "grpc":
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter

        return OTLPSpanExporter(
            endpoint=options.endpoint,
            insecure=options.insecure,
            headers=options.headers or None,
        )

    from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter

    return OTLPSpanExporter(
        endpoint=f"{options.url}/v1/traces", headers=options.headers or None
    )


def init_logs() -> tuple[LogSink, Shutdown]:
    """Build the OTLP log pipeline and return a sink plus its shutdown hook.

    When log export is disabled, or the exporter cannot be created, a sink
    that drops events is returned instead so the poll loop still runs.
    """

    if not settings.otel_logs_enabled:
        logger.info("OpenTelemetry logging is disabled")
        return DiscardingSink(), _noop

    options = load_exporter_settings("logs")
    try:
        exporter = _log_exporter(options)
    except Exception as exc:  # pragma: no cover - exporter construction is library code
        logger.error("Failed to create OTLP log exporter, discarding events: %s", exc)
        return DiscardingSink(), _noop

    provider = LoggerProvider(resource=build_resource())
    provider.add_log_record_processor(BatchLogRecordProcessor(exporter))

    logger.info(
        "OpenTelemetry logging initialized (protocol: %s, endpoint: %s)",
        options.protocol,
        options.endpoint,
    )

    def shutdown() -> None:
        try:
            provider.shutdown()
        except Exception as exc:  # pragma: no cover - best effort flush
            logger.error("Error shutting down logger provider: %s", exc)

    return OTelLogSink(provider), shutdown


def init_tracing() -> Shutdown:
    """Install a global tracer provider exporting spans over OTLP."""

    if not settings.otel_tracing_enabled:
        logger.info("OpenTelemetry tracing is disabled")
        return _noop

    options = load_exporter_settings("traces")
    try:
        exporter = _span_exporter(options)
    except Exception as exc:  # pragma: no cover - exporter construction is library code
        logger.error("Failed to create OTLP span exporter, tracing disabled: %s", exc)
        return _noop

    provider = TracerProvider(resource=build_resource())
    provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)
    set_global_textmap(TraceContextTextMapPropagator())

    logger.info(
        "OpenTelemetry tracing initialized (protocol: %s, endpoint: %s)",
        options.protocol,
        options.endpoint,
    )

    def shutdown() -> None:
        try:
            provider.shutdown()
        except Exception as exc:  # pragma: no cover - best effort flush
            logger.error("Error shutting down tracer provider: %s", exc)

    return shutdown


__all__ = ["build_resource", "init_logs", "init_tracing"]
