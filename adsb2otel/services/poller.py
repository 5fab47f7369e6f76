"""Fixed-interval poll loop driving the fetch and forward pipeline."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Protocol

from adsb2otel.config import POLL_INTERVAL_SECONDS
from adsb2otel.errors import FlightDataError

logger = logging.getLogger("adsb2otel.services.poller")


class LoopState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


class Pipeline(Protocol):
    async def fetch_and_push(self) -> int: ...


class PollLoop:
    """Run the pipeline every ``interval`` seconds until stopped.

    Ticks never overlap: the next one is only scheduled once the previous
    call has returned. A tick that runs past its slot is followed by one
    immediate tick, then the loop resumes its regular cadence. Failures are
    logged and the loop keeps going; only :meth:`stop` or task cancellation
    ends it.
    """

    def __init__(self, pipeline: Pipeline, *, interval: float = POLL_INTERVAL_SECONDS) -> None:
        self.pipeline = pipeline
        self.interval = interval
        self.state = LoopState.IDLE
        self.tick_count = 0
        self.error_count = 0
        self._stop_requested = asyncio.Event()

    def stop(self, reason: str | None = None) -> None:
        """Request shutdown. An in-flight tick is allowed to finish first."""

        if not self._stop_requested.is_set():
            logger.info("Received shutdown signal: %s", reason or "stop requested")
        self._stop_requested.set()

    @property
    def stop_requested(self) -> bool:
        return self._stop_requested.is_set()

    async def _wait_for_tick(self, delay: float) -> bool:
        """Sleep until the next tick. Returns True if a stop arrived first."""

        try:
            await asyncio.wait_for(self._stop_requested.wait(), timeout=max(delay, 0.0))
        except asyncio.TimeoutError:
            return False
        return True

    async def run_once(self) -> int | None:
        """Execute a single tick. Returns the emitted count, or None on failure."""

        self.state = LoopState.RUNNING
        self.tick_count += 1
        logger.debug("Ticker fired - fetching data")
        try:
            emitted = await self.pipeline.fetch_and_push()
        except FlightDataError as exc:
            self.error_count += 1
            logger.error(
                "Error fetching and pushing data: kind=%s error=%s", exc.kind, exc
            )
            return None
        except asyncio.CancelledError:
            raise
        except Exception:  # pragma: no cover - defensive logging
            self.error_count += 1
            logger.exception("Unexpected error fetching and pushing data")
            return None
        finally:
            if self.state is LoopState.RUNNING:
                self.state = LoopState.IDLE

        logger.debug("Data fetch and push completed: emitted=%s", emitted)
        return emitted

    async def run(self) -> None:
        """Poll until :meth:`stop` is called or the task is cancelled.

        After :meth:`stop` the loop returns normally once the in-flight tick
        has finished. Cancelling the task aborts the tick at once and
        re-raises :class:`asyncio.CancelledError` to the caller; the state is
        ``STOPPED`` in both cases.
        """

        loop = asyncio.get_running_loop()
        next_fire = loop.time() + self.interval
        self.state = LoopState.IDLE
        logger.info("Starting data fetch loop (interval=%ss)", self.interval)

        try:
            while not self._stop_requested.is_set():
                if await self._wait_for_tick(next_fire - loop.time()):
                    break

                await self.run_once()

                next_fire += self.interval
                now = loop.time()
                if next_fire < now:
                    next_fire = now
        except asyncio.CancelledError:
            logger.info("Poll loop cancelled")
            raise
        finally:
            self.state = LoopState.STOPPED
            logger.info(
                "Poll loop stopped after %s ticks (%s failed)",
                self.tick_count,
                self.error_count,
            )


__all__ = ["LoopState", "Pipeline", "PollLoop"]
