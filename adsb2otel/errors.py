"""Errors raised while fetching and forwarding receiver data."""

from __future__ import annotations


class FlightDataError(Exception):
    """Base class for failures local to a single poll tick."""

    kind = "flightdata"


class TransportError(FlightDataError):
    """Network or HTTP failure, including a non-200 status."""

    kind = "transport"

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class DecodeError(FlightDataError, ValueError):
    """The receiver payload is not valid JSON or has unexpected types."""

    kind = "decode"


class SerializationError(FlightDataError):
    """A decoded aircraft record could not be rendered as a log body."""

    kind = "serialization"


__all__ = ["DecodeError", "FlightDataError", "SerializationError", "TransportError"]
