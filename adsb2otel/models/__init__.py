"""Data models for adsb2otel."""

from .dump1090 import (
    AircraftEntry,
    FlexibleScalar,
    LastPosition,
    SourceDocument,
    decode_flexible_scalar,
    decode_source_document,
    parse_flexible_scalar,
)
from .log_event import AttributeValue, LogEvent, Severity

__all__ = [
    "AircraftEntry",
    "AttributeValue",
    "FlexibleScalar",
    "LastPosition",
    "LogEvent",
    "Severity",
    "SourceDocument",
    "decode_flexible_scalar",
    "decode_source_document",
    "parse_flexible_scalar",
]
