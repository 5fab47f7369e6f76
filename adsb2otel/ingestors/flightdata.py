"""Fetch receiver state and forward each aircraft as a log event."""

from __future__ import annotations

import logging
import time

import httpx
from opentelemetry import trace

from adsb2otel.config import USER_AGENT, settings
from adsb2otel.errors import DecodeError, SerializationError, TransportError
from adsb2otel.models.dump1090 import SourceDocument, decode_source_document
from adsb2otel.services.log_records import SERVICE_TAG, tick_timestamp, to_log_event
from adsb2otel.telemetry.sink import LogSink

logger = logging.getLogger("adsb2otel.ingestors.flightdata")
tracer = trace.get_tracer("flightdata-client")


class FlightDataIngestor:
    """Run one fetch, decode, transform and emit cycle per call.

    The ingestor keeps no state between calls apart from the HTTP client,
    whose connection pool is reused across polls.
    """

    def __init__(
        self,
        *,
        sink: LogSink,
        url: str | None = None,
        http_client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.sink = sink
        self.url = url or settings.flight_data_url
        self._owns_client = http_client is None
        self.http_client = http_client or httpx.AsyncClient(
            timeout=timeout or settings.flight_data_timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self.http_client.aclose()

    async def __aenter__(self) -> "FlightDataIngestor":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def _fetch_body(self, span: trace.Span) -> bytes:
        logger.debug("Fetching flight data from %s", self.url)
        start = time.perf_counter()
        try:
            async with self.http_client.stream(
                "GET", self.url, headers={"User-Agent": USER_AGENT}
            ) as response:
                duration_ms = (time.perf_counter() - start) * 1000
                span.set_attribute("http.status_code", response.status_code)
                logger.debug(
                    "HTTP GET %s -> %s (%.2f ms)",
                    self.url,
                    response.status_code,
                    duration_ms,
                )

                if response.status_code != httpx.codes.OK:
                    logger.error(
                        "HTTP request returned non-200 status: status=%s",
                        response.status_code,
                    )
                    raise TransportError(
                        f"HTTP request failed with status: {response.status_code} "
                        f"{response.reason_phrase}",
                        status_code=response.status_code,
                    )
                return await response.aread()
        except httpx.TimeoutException as exc:
            logger.error("Flight data request timed out: %s", exc)
            raise TransportError(f"request to {self.url} timed out") from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.error("Failed to fetch dump1090-fa data from %s: %s", self.url, exc)
            raise TransportError(f"failed to fetch dump1090-fa data: {exc}") from exc

    async def fetch_document(self) -> SourceDocument:
        """GET and decode the receiver document without emitting anything."""

        span = trace.get_current_span()
        body = await self._fetch_body(span)
        try:
            document = decode_source_document(body)
        except DecodeError as exc:
            logger.error("Failed to decode dump1090-fa data: %s", exc)
            raise

        span.set_attributes(
            {
                "aircraft.count": len(document.aircraft),
                "data.timestamp": int(document.observed_at),
                "data.messages": document.message_count,
            }
        )
        logger.debug(
            "Parsed flight data: aircraft_count=%s timestamp=%s messages=%s",
            len(document.aircraft),
            document.observed_at,
            document.message_count,
        )
        return document

    async def fetch_and_push(self) -> int:
        """Forward the current receiver state to the sink.

        Events are emitted in document order. A serialization failure stops
        the remaining records; events already handed to the sink stay there.
        Returns the number of events emitted.
        """

        with tracer.start_as_current_span(
            "flightdata.fetch_and_push",
            attributes={
                "service": SERVICE_TAG,
                "http.url": self.url,
                "http.method": "GET",
            },
        ) as span:
            document = await self.fetch_document()

            timestamp = tick_timestamp(document.observed_at)
            emitted = 0
            for index, entry in enumerate(document.aircraft):
                logger.debug(
                    "Processing aircraft index=%s hex=%s flight=%s lat=%s lon=%s alt_baro=%s",
                    index,
                    entry.hex,
                    entry.flight,
                    entry.lat,
                    entry.lon,
                    entry.alt_baro,
                )
                try:
                    event = to_log_event(entry, timestamp)
                except SerializationError as exc:
                    logger.error(
                        "Failed to marshal aircraft data: hex=%s emitted=%s error=%s",
                        entry.hex,
                        emitted,
                        exc,
                    )
                    span.set_attribute("otel.logs_emitted", emitted)
                    raise
                self.sink.emit(event)
                emitted += 1

            span.set_attribute("otel.logs_emitted", emitted)
            logger.info(
                "Successfully fetched and pushed aircraft data: aircraft_count=%s logs_emitted=%s",
                len(document.aircraft),
                emitted,
            )
            return emitted


__all__ = ["FlightDataIngestor"]
