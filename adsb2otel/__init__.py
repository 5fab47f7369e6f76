"""Forward ADS-B receiver aircraft state to OpenTelemetry logs."""

__version__ = "1.0.0"
