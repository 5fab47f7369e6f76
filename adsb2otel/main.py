"""Process entry point: configure logging and telemetry, then poll until stopped."""

from __future__ import annotations

import asyncio
import logging
import signal
import sys

import httpx
from opentelemetry import trace

from adsb2otel.config import settings
from adsb2otel.ingestors import FlightDataIngestor
from adsb2otel.services.poller import PollLoop
from adsb2otel.telemetry.setup import init_logs, init_tracing

LOG_FORMAT = (
    "%(asctime)s %(levelname)s %(name)s - %(message)s "
    "[trace_id=%(trace_id)s span_id=%(span_id)s]"
)

logger = logging.getLogger("adsb2otel")


class TraceContextFilter(logging.Filter):
    """Attach the active trace and span ids to every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        span_context = trace.get_current_span().get_span_context()
        if span_context.is_valid:
            record.trace_id = trace.format_trace_id(span_context.trace_id)
            record.span_id = trace.format_span_id(span_context.span_id)
        else:
            record.trace_id = "-"
            record.span_id = "-"
        return True


def configure_logging(level: str) -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    for handler in logging.getLogger().handlers:
        handler.addFilter(TraceContextFilter())


def install_signal_handlers(poller: PollLoop) -> None:
    """Route SIGINT and SIGTERM to a graceful stop of the poll loop."""

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, poller.stop, sig.name)
        except NotImplementedError:  # pragma: no cover - Windows event loops
            signal.signal(
                sig,
                lambda signum, frame: loop.call_soon_threadsafe(
                    poller.stop, signal.Signals(signum).name
                ),
            )


async def run() -> None:
    shutdown_tracing = init_tracing()
    sink, shutdown_logs = init_logs()
    try:
        async with httpx.AsyncClient(timeout=settings.flight_data_timeout) as client:
            ingestor = FlightDataIngestor(
                sink=sink, url=settings.flight_data_url, http_client=client
            )
            poller = PollLoop(ingestor)
            install_signal_handlers(poller)
            logger.info("Application started successfully")
            await poller.run()
    finally:
        logger.debug("Graceful shutdown initiated")
        shutdown_logs()
        shutdown_tracing()


def main() -> None:
    configure_logging(settings.log_level)

    if not settings.flight_data_url:
        logger.error("FLIGHT_DATA_URL is not set; nothing to poll")
        sys.exit(2)

    logger.info("Polling %s", settings.flight_data_url)
    asyncio.run(run())
    logger.info("Shutdown complete")


if __name__ == "__main__":
    main()
