"""Log events handed to the export sink."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Union

AttributeValue = Union[str, float, int, bool]


class Severity(str, Enum):
    """Severity of an emitted event. Aircraft records are always INFO."""

    INFO = "INFO"


@dataclass(frozen=True)
class LogEvent:
    """One structured log line describing a single aircraft."""

    timestamp: datetime
    body: str
    severity: Severity = Severity.INFO
    attributes: dict[str, AttributeValue] = field(default_factory=dict)


__all__ = ["AttributeValue", "LogEvent", "Severity"]
