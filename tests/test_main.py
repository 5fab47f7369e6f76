import asyncio
import logging
import os
import signal
import sys

import anyio
import pytest
from opentelemetry.sdk.trace import TracerProvider

from adsb2otel import main as entrypoint
from adsb2otel.services.poller import LoopState, PollLoop


class IdlePipeline:
    async def fetch_and_push(self) -> int:
        return 0


def _record() -> logging.LogRecord:
    return logging.LogRecord("adsb2otel.test", logging.INFO, __file__, 1, "hello", None, None)


def test_trace_filter_without_active_span():
    record = _record()

    assert entrypoint.TraceContextFilter().filter(record) is True
    assert record.trace_id == "-"
    assert record.span_id == "-"


def test_trace_filter_with_active_span():
    tracer = TracerProvider().get_tracer("tests")

    with tracer.start_as_current_span("tick") as span:
        record = _record()
        entrypoint.TraceContextFilter().filter(record)
        context = span.get_span_context()

    assert record.trace_id == f"{context.trace_id:032x}"
    assert record.span_id == f"{context.span_id:016x}"


def test_main_requires_flight_data_url(monkeypatch):
    monkeypatch.setattr(entrypoint.settings, "flight_data_url", "")
    monkeypatch.setattr(entrypoint, "configure_logging", lambda level: None)

    with pytest.raises(SystemExit) as excinfo:
        entrypoint.main()

    assert excinfo.value.code == 2


@pytest.mark.anyio
@pytest.mark.skipif(sys.platform == "win32", reason="POSIX signals only")
async def test_sigterm_stops_poll_loop():
    poller = PollLoop(IdlePipeline(), interval=10)
    entrypoint.install_signal_handlers(poller)
    try:
        task = asyncio.create_task(poller.run())
        await asyncio.sleep(0.01)
        os.kill(os.getpid(), signal.SIGTERM)
        with anyio.fail_after(5):
            await task
    finally:
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.remove_signal_handler(sig)

    assert poller.state is LoopState.STOPPED
