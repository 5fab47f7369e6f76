"""Convert decoded aircraft entries into log events."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic_core import PydanticSerializationError

from adsb2otel.errors import SerializationError
from adsb2otel.models.dump1090 import AircraftEntry
from adsb2otel.models.log_event import AttributeValue, LogEvent, Severity

SERVICE_TAG = "adsb"


def tick_timestamp(observed_at: float) -> datetime:
    """Timestamp shared by every event of one poll, truncated to whole seconds."""

    return datetime.fromtimestamp(int(observed_at), tz=timezone.utc)


def build_attributes(entry: AircraftEntry) -> dict[str, AttributeValue]:
    """Return the indexed attributes for an aircraft.

    ``service``, ``aircraft.hex`` and ``aircraft.type`` are always present.
    The remaining keys are only added when the value is non-empty and
    non-zero, so a position of exactly 0.0 is treated as unknown.
    """

    attributes: dict[str, AttributeValue] = {
        "service": SERVICE_TAG,
        "aircraft.hex": entry.hex,
        "aircraft.type": entry.type or "",
    }
    if entry.flight:
        attributes["aircraft.flight"] = entry.flight
    if entry.lat:
        attributes["aircraft.lat"] = entry.lat
    if entry.lon:
        attributes["aircraft.lon"] = entry.lon
    if entry.alt_baro:
        attributes["aircraft.alt_baro"] = entry.alt_baro
    if entry.squawk:
        attributes["aircraft.squawk"] = entry.squawk
    return attributes


def serialize_entry(entry: AircraftEntry) -> str:
    """Render an entry as compact JSON, leaving out fields the receiver omitted."""

    try:
        return entry.model_dump_json(by_alias=True, exclude_defaults=True)
    except PydanticSerializationError as exc:
        raise SerializationError(
            f"failed to marshal aircraft data for {entry.hex or '<unknown>'}: {exc}"
        ) from exc


def to_log_event(entry: AircraftEntry, timestamp: datetime) -> LogEvent:
    return LogEvent(
        timestamp=timestamp,
        severity=Severity.INFO,
        body=serialize_entry(entry),
        attributes=build_attributes(entry),
    )


__all__ = [
    "SERVICE_TAG",
    "build_attributes",
    "serialize_entry",
    "tick_timestamp",
    "to_log_event",
]
