"""Receiver ingestors for adsb2otel."""

from .flightdata import FlightDataIngestor

__all__ = ["FlightDataIngestor"]
