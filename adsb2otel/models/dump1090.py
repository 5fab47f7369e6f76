"""Models for the dump1090-fa ``aircraft.json`` status document."""

from __future__ import annotations

import json
import math
from typing import Annotated, Any, Optional

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
)

from adsb2otel.errors import DecodeError


def decode_flexible_scalar(value: Any) -> str:
    """Render a JSON string, number or null as its canonical string form.

    Strings pass through unchanged, integers are rendered in base 10 and
    floats with zero decimal places, so ``25000.7`` becomes ``"25001"``.
    ``None`` maps to the empty string. Objects, arrays and booleans raise
    :class:`DecodeError`.
    """

    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        raise DecodeError(f"cannot decode boolean {value!r} into a flexible scalar")
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            raise DecodeError(f"cannot decode non-finite number {value!r}")
        return f"{value:.0f}"
    raise DecodeError(f"cannot decode {type(value).__name__} into a flexible scalar")


def parse_flexible_scalar(raw: str | bytes) -> str:
    """Decode a single raw JSON token into its canonical string form."""

    try:
        value = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise DecodeError(f"malformed JSON token: {exc}") from exc
    return decode_flexible_scalar(value)


FlexibleScalar = Annotated[str, BeforeValidator(decode_flexible_scalar)]

# 9999-12-31T23:59:59Z, the last second a datetime can hold.
MAX_OBSERVED_AT = 253402300799


class LastPosition(BaseModel):
    """Most recent known position, reported once the live position goes stale."""

    lat: Optional[float] = None
    lon: Optional[float] = None
    nic: Optional[int] = None
    rc: Optional[int] = None
    seen_pos: Optional[float] = None

    model_config = ConfigDict(extra="ignore", frozen=True, strict=True)


class AircraftEntry(BaseModel):
    """Current state of one aircraft tracked by the receiver.

    The receiver only includes the fields it has decoded messages for, so
    every field except ``hex`` is optional and defaults to ``None``.
    """

    hex: str = Field(default="", description="ICAO24 address, lowercase hex")
    type: Optional[str] = Field(default=None, description="Source of the best data")
    flight: Optional[str] = Field(default=None, description="Callsign")
    r: Optional[str] = Field(default=None, description="Registration")
    t: Optional[str] = Field(default=None, description="ICAO aircraft type")
    desc: Optional[str] = None
    alt_baro: FlexibleScalar = Field(
        default="", description="Barometric altitude in feet, or 'ground'"
    )
    alt_geom: Optional[int] = None
    gs: Optional[float] = None
    ias: Optional[int] = None
    tas: Optional[int] = None
    mach: Optional[float] = None
    wd: Optional[int] = None
    ws: Optional[int] = None
    oat: Optional[int] = None
    tat: Optional[int] = None
    track: Optional[float] = None
    track_rate: Optional[float] = None
    roll: Optional[float] = None
    mag_heading: Optional[float] = None
    true_heading: Optional[float] = None
    baro_rate: Optional[int] = None
    geom_rate: Optional[int] = None
    squawk: Optional[str] = None
    emergency: Optional[str] = None
    category: Optional[str] = None
    nav_qnh: Optional[float] = None
    nav_altitude_mcp: Optional[int] = None
    nav_altitude_fms: Optional[int] = None
    nav_heading: Optional[float] = None
    nav_modes: Optional[list[str]] = None
    lat: Optional[float] = None
    lon: Optional[float] = None
    nic: Optional[int] = None
    rc: Optional[int] = None
    seen_pos: Optional[float] = None
    r_dst: Optional[float] = None
    r_dir: Optional[float] = None
    version: Optional[int] = None
    nic_baro: Optional[int] = None
    nac_p: Optional[int] = None
    nac_v: Optional[int] = None
    sil: Optional[int] = None
    sil_type: Optional[str] = None
    gva: Optional[int] = None
    sda: Optional[int] = None
    alert: Optional[int] = None
    spi: Optional[int] = None
    mlat: Optional[list[Any]] = None
    tisb: Optional[list[Any]] = None
    messages: Optional[int] = None
    seen: Optional[float] = None
    rssi: Optional[float] = None
    own_op: Optional[str] = Field(default=None, alias="ownOp")
    year: Optional[str] = None
    db_flags: Optional[int] = Field(default=None, alias="dbFlags")
    last_position: Optional[LastPosition] = Field(default=None, alias="lastPosition")

    model_config = ConfigDict(
        extra="ignore", frozen=True, populate_by_name=True, strict=True
    )

    @field_validator("hex", mode="before")
    @classmethod
    def _null_hex(cls, value: Any) -> Any:
        return "" if value is None else value


class SourceDocument(BaseModel):
    """Snapshot of receiver state returned by one poll."""

    observed_at: float = Field(
        default=0.0, alias="now", description="Receiver clock, epoch seconds"
    )
    message_count: int = Field(
        default=0, alias="messages", description="Messages decoded since start"
    )
    aircraft: list[AircraftEntry] = Field(default_factory=list)

    model_config = ConfigDict(
        extra="ignore", frozen=True, populate_by_name=True, strict=True
    )

    @field_validator("observed_at", "message_count", "aircraft", mode="before")
    @classmethod
    def _null_as_default(cls, value: Any, info: ValidationInfo) -> Any:
        if value is not None:
            return value
        if info.field_name == "aircraft":
            return []
        return 0.0 if info.field_name == "observed_at" else 0

    @field_validator("observed_at")
    @classmethod
    def _representable_timestamp(cls, value: float) -> float:
        if not math.isfinite(value) or not 0 <= value <= MAX_OBSERVED_AT:
            raise ValueError(f"receiver timestamp {value!r} is out of range")
        return value


def decode_source_document(body: str | bytes) -> SourceDocument:
    """Decode a raw ``aircraft.json`` payload.

    Unknown fields are ignored and missing ones take their defaults. Malformed
    JSON or a value of the wrong type raises :class:`DecodeError`.
    """

    try:
        return SourceDocument.model_validate_json(body)
    except ValidationError as exc:
        first = exc.errors()[0] if exc.error_count() else {}
        location = ".".join(str(part) for part in first.get("loc", ()))
        detail = first.get("msg", str(exc))
        raise DecodeError(
            f"failed to decode dump1090-fa data at {location or '<root>'}: {detail}"
        ) from exc


__all__ = [
    "AircraftEntry",
    "FlexibleScalar",
    "LastPosition",
    "SourceDocument",
    "decode_flexible_scalar",
    "decode_source_document",
    "parse_flexible_scalar",
]
