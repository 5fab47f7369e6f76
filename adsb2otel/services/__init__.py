"""Service-layer helpers for adsb2otel."""

from .log_records import SERVICE_TAG, build_attributes, serialize_entry, tick_timestamp, to_log_event
from .poller import LoopState, Pipeline, PollLoop

__all__ = [
    "LoopState",
    "Pipeline",
    "PollLoop",
    "SERVICE_TAG",
    "build_attributes",
    "serialize_entry",
    "tick_timestamp",
    "to_log_event",
]
