"""Configuration settings for the adsb2otel forwarder."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

logger = logging.getLogger("adsb2otel.config")

# A missing .env file is the normal case in containers.
load_dotenv()

USER_AGENT = "adsb2otel/1.0.0"
SERVICE_NAME = "adsb2otel"
SERVICE_VERSION = "1.0.0"

# Receiver poll cadence. Fixed on purpose; not read from the environment.
POLL_INTERVAL_SECONDS = 5.0

DEFAULT_OTLP_ENDPOINT = "localhost:4318"
_TRUE_VALUES = {"1", "true", "yes", "on"}
_PROTOCOLS = {"http", "grpc"}


def _get_bool(env_var: str, default: bool = False) -> bool:
    """Parse an environment variable into a boolean with a default."""

    value = os.getenv(env_var)
    if value is None or not value.strip():
        return default

    return is_true(value)


def is_true(value: str) -> bool:
    return value.strip().lower() in _TRUE_VALUES


def _get_env_with_fallback(primary: str, secondary: str, default: str = "") -> str:
    """Return ``primary`` if set, otherwise ``secondary``, otherwise ``default``."""

    value = os.getenv(primary)
    if value:
        return value
    return os.getenv(secondary) or default


def parse_headers(raw: str | None) -> dict[str, str]:
    """Parse a ``key1=value1,key2=value2`` header string.

    Pairs without an ``=`` are skipped. Whitespace around keys and values is
    dropped.
    """

    headers: dict[str, str] = {}
    if not raw:
        return headers

    for pair in raw.split(","):
        key, sep, value = pair.strip().partition("=")
        if not sep:
            continue
        headers[key.strip()] = value.strip()
    return headers


def clean_endpoint(endpoint: str, signal_path: str) -> str:
    """Strip scheme, the per-signal path and trailing slashes from an endpoint."""

    for prefix in ("http://", "https://", "grpc://"):
        if endpoint.startswith(prefix):
            endpoint = endpoint[len(prefix):]
            break

    if endpoint.endswith(signal_path):
        endpoint = endpoint[: -len(signal_path)]

    return endpoint.rstrip("/")


@dataclass(frozen=True)
class ExporterSettings:
    """OTLP exporter options for one telemetry signal."""

    endpoint: str
    protocol: str
    insecure: bool
    headers: dict[str, str]

    @property
    def url(self) -> str:
        scheme = "http" if self.insecure else "https"
        return f"{scheme}://{self.endpoint}"


def load_exporter_settings(signal: str) -> ExporterSettings:
    """Resolve exporter settings for ``signal`` (``logs`` or ``traces``).

    The shared ``OTEL_EXPORTER_OTLP_*`` variables win over the
    signal-specific ones.
    """

    suffix = signal.upper()
    signal_path = f"/v1/{signal.lower()}"

    raw_endpoint = _get_env_with_fallback(
        "OTEL_EXPORTER_OTLP_ENDPOINT", f"OTEL_EXPORTER_OTLP_{suffix}_ENDPOINT"
    )
    endpoint = (
        clean_endpoint(raw_endpoint, signal_path) if raw_endpoint else DEFAULT_OTLP_ENDPOINT
    )

    protocol = _get_env_with_fallback(
        "OTEL_EXPORTER_OTLP_PROTOCOL", f"OTEL_EXPORTER_OTLP_{suffix}_PROTOCOL", "http"
    ).lower()
    if protocol not in _PROTOCOLS:
        logger.warning("Invalid OTLP protocol %s, defaulting to http", protocol)
        protocol = "http"

    insecure_raw = _get_env_with_fallback(
        "OTEL_EXPORTER_OTLP_INSECURE", f"OTEL_EXPORTER_OTLP_{suffix}_INSECURE"
    )
    insecure = is_true(insecure_raw) if insecure_raw else True

    headers = parse_headers(
        _get_env_with_fallback(
            "OTEL_EXPORTER_OTLP_HEADERS", f"OTEL_EXPORTER_OTLP_{suffix}_HEADERS"
        )
    )

    return ExporterSettings(
        endpoint=endpoint, protocol=protocol, insecure=insecure, headers=headers
    )


@dataclass
class Settings:
    """Application configuration loaded from environment variables."""

    flight_data_url: str = os.getenv("FLIGHT_DATA_URL", "")
    flight_data_timeout: float = float(os.getenv("FLIGHT_DATA_TIMEOUT", "30.0"))
    log_level: str = _get_env_with_fallback("ADSB2OTEL_LOG_LEVEL", "LOG_LEVEL", "INFO")

    otel_logs_enabled: bool = _get_bool("OTEL_LOGS_ENABLED", default=True)
    otel_tracing_enabled: bool = _get_bool("OTEL_TRACING_ENABLED", default=False)


settings = Settings()

__all__ = [
    "DEFAULT_OTLP_ENDPOINT",
    "ExporterSettings",
    "POLL_INTERVAL_SECONDS",
    "SERVICE_NAME",
    "SERVICE_VERSION",
    "Settings",
    "USER_AGENT",
    "clean_endpoint",
    "is_true",
    "load_exporter_settings",
    "parse_headers",
    "settings",
]
