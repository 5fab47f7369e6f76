"""Log sinks that receive the events produced by each poll."""

from __future__ import annotations

import logging
import time
from typing import Protocol

from opentelemetry import trace
from opentelemetry._logs import LoggerProvider, LogRecord, SeverityNumber

from adsb2otel.models.log_event import LogEvent, Severity

logger = logging.getLogger("adsb2otel.telemetry.sink")

_SEVERITY_NUMBERS = {
    Severity.INFO: SeverityNumber.INFO,
}


class LogSink(Protocol):
    """Accepts finished events. Buffering and export are the sink's concern."""

    def emit(self, event: LogEvent) -> None: ...


def _to_unix_nanos(event: LogEvent) -> int:
    whole_seconds = int(event.timestamp.timestamp())
    return whole_seconds * 1_000_000_000 + event.timestamp.microsecond * 1_000


class OTelLogSink:
    """Hand events to an OpenTelemetry logger provider.

    Each record is stamped with the trace and span ids of the span active at
    emit time, which links the aircraft lines to the poll that produced them.
    """

    def __init__(self, logger_provider: LoggerProvider, name: str = "flightdata") -> None:
        self._logger = logger_provider.get_logger(name)

    def emit(self, event: LogEvent) -> None:
        span_context = trace.get_current_span().get_span_context()
        trace_kwargs = {}
        if span_context.is_valid:
            trace_kwargs = {
                "trace_id": span_context.trace_id,
                "span_id": span_context.span_id,
                "trace_flags": span_context.trace_flags,
            }

        record = LogRecord(
            timestamp=_to_unix_nanos(event),
            observed_timestamp=time.time_ns(),
            severity_text=event.severity.value,
            severity_number=_SEVERITY_NUMBERS[event.severity],
            body=event.body,
            attributes=dict(event.attributes),
            **trace_kwargs,
        )
        self._logger.emit(record)


class DiscardingSink:
    """Drop every event. Used when log export is disabled or failed to start."""

    def __init__(self) -> None:
        self._warned = False

    def emit(self, event: LogEvent) -> None:
        if not self._warned:
            logger.warning("OpenTelemetry logger not initialized, skipping log emission")
            self._warned = True


__all__ = ["DiscardingSink", "LogSink", "OTelLogSink"]
