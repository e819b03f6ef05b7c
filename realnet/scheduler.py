"""Periodic measurement loop with a single in-flight cycle."""
from __future__ import annotations

import asyncio
import logging
import threading
from typing import Awaitable, Callable, Optional

from .aggregator import NetworkSnapshot
from .constants import DEFAULT_INTERVAL

logger = logging.getLogger(__name__)

Measure = Callable[[], Awaitable[NetworkSnapshot]]
SnapshotSink = Callable[[NetworkSnapshot], None]


class PollingScheduler:
    """Runs *measure* repeatedly and hands each result to *sink*.

    Key properties:
    - The first cycle starts immediately.
    - A cycle is measured, emitted, and only then does the loop wait the full
      *interval* before the next cycle.  Emissions are therefore
      ``interval + cycle duration`` apart and cycles never overlap.
    - A cycle whose measurement raises is logged and skipped; the loop keeps
      its cadence.
    - ``start()`` while running retires the previous loop first.
    - ``stop()`` is idempotent and may be called from any thread.  Once it
      returns, no further snapshot reaches the sink: each loop carries the
      generation it was started under and emission is refused when that
      generation is no longer current.

    *sleep* defaults to ``asyncio.sleep``; tests substitute a virtual one.
    """

    def __init__(
        self,
        measure: Measure,
        sink: SnapshotSink,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._measure = measure
        self._sink = sink
        self._sleep = sleep

        # Guards _generation/_task/_loop and the emission boundary.
        self._lock = threading.RLock()
        self._generation = 0
        self._task: Optional[asyncio.Task] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self.interval: float = DEFAULT_INTERVAL

    # -- State --------------------------------------------------------------

    @property
    def running(self) -> bool:
        with self._lock:
            return self._task is not None and not self._task.done()

    # -- Control ------------------------------------------------------------

    def start(self, interval_seconds: float = DEFAULT_INTERVAL) -> None:
        """Start polling on the running event loop, replacing any prior loop."""
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")

        loop = asyncio.get_running_loop()
        self.stop()
        with self._lock:
            self._generation += 1
            generation = self._generation
            self.interval = interval_seconds
            self._loop = loop
            self._task = loop.create_task(self._run(interval_seconds, generation))
        logger.info("Polling started: interval=%ss (generation=%d)", interval_seconds, generation)

    def stop(self) -> None:
        """Cancel the loop; safe from any thread and when already stopped."""
        with self._lock:
            task, loop = self._task, self._loop
            self._task = None
            self._loop = None
            if task is None:
                return
            self._generation += 1
            generation = self._generation

        if _on_loop_thread(loop):
            task.cancel()
        elif not loop.is_closed():
            loop.call_soon_threadsafe(task.cancel)
        logger.info("Polling stopped (generation=%d)", generation)

    async def aclose(self) -> None:
        """Stop and wait for the retired task to unwind."""
        with self._lock:
            task = self._task
        self.stop()
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)

    # -- Loop ---------------------------------------------------------------

    async def _run(self, interval: float, generation: int) -> None:
        cycle = 0
        while True:
            cycle += 1
            try:
                snapshot = await self._measure()
            except Exception:
                logger.exception("Measurement cycle %d failed; retrying in %ss", cycle, interval)
            else:
                if not self._emit(snapshot, generation):
                    logger.debug("Discarded snapshot from retired loop (generation=%d)", generation)
                    return
                logger.debug("Cycle %d done; next in %ss", cycle, interval)
            await self._sleep(interval)

    def _emit(self, snapshot: NetworkSnapshot, generation: int) -> bool:
        with self._lock:
            if generation != self._generation:
                return False
            try:
                self._sink(snapshot)
            except Exception:
                logger.exception("Snapshot sink raised; polling continues")
            return True


def _on_loop_thread(loop: asyncio.AbstractEventLoop) -> bool:
    try:
        return asyncio.get_running_loop() is loop
    except RuntimeError:
        return False
