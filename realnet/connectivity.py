"""
Connectivity change detection.

The host platform delivers raw "available" / "lost" signals for the default
network path.  Those arrive redundantly and sometimes flap, so
``ConnectivityMonitor`` keeps the last value it reported and emits only when
the connected state actually changes.

``ReachabilitySource`` is the desktop stand-in for a platform path monitor:
it probes a target through the transport on a fixed period and publishes a
raw signal after every probe.
"""
from __future__ import annotations

import asyncio
import enum
import logging
import threading
from dataclasses import dataclass
from typing import Callable, List, Optional, Protocol

from .constants import LATENCY_URL, REACHABILITY_INTERVAL, REACHABILITY_TIMEOUT
from .transport import TimedTransport, Timing

logger = logging.getLogger(__name__)


class NetworkSignal(enum.Enum):
    AVAILABLE = "available"
    LOST = "lost"

    @property
    def connected(self) -> bool:
        return self is NetworkSignal.AVAILABLE


SignalCallback = Callable[[NetworkSignal], None]
Unsubscribe = Callable[[], None]
ConnectivitySink = Callable[[bool], None]


class SignalSource(Protocol):
    """Raw connectivity signal stream supplied by the host platform."""

    def subscribe(self, callback: SignalCallback) -> Unsubscribe:
        ...


@dataclass
class ConnectivityState:
    is_connected: bool = False
    last_reported: Optional[bool] = None


# ---------------------------------------------------------------------------
# Monitor
# ---------------------------------------------------------------------------

class ConnectivityMonitor:
    """Debounces raw signals into ``onConnectivityChanged(bool)`` events."""

    def __init__(self, source: SignalSource, sink: ConnectivitySink) -> None:
        self._source = source
        self._sink = sink
        self._lock = threading.RLock()
        self._unsubscribe: Optional[Unsubscribe] = None
        self._session = 0
        self.state = ConnectivityState()

    @property
    def running(self) -> bool:
        with self._lock:
            return self._unsubscribe is not None

    def start(self) -> None:
        """Subscribe to the source; a no-op when already started."""
        with self._lock:
            if self._unsubscribe is not None:
                return
            self._session += 1
            session = self._session
            self.state = ConnectivityState()
            self._unsubscribe = self._source.subscribe(
                lambda signal: self._on_signal(signal, session)
            )
        logger.info("Connectivity monitoring started")

    def stop(self) -> None:
        """Unsubscribe and forget the last reported value.  Idempotent."""
        with self._lock:
            unsubscribe = self._unsubscribe
            if unsubscribe is None:
                return
            self._unsubscribe = None
            self._session += 1
            self.state = ConnectivityState()
        unsubscribe()
        logger.info("Connectivity monitoring stopped")

    def _on_signal(self, signal: NetworkSignal, session: int) -> None:
        connected = signal.connected
        with self._lock:
            if session != self._session:
                return  # delivered after stop()
            self.state.is_connected = connected
            if self.state.last_reported == connected:
                return
            self.state.last_reported = connected
            logger.info("Connectivity changed: %s", "connected" if connected else "disconnected")
            try:
                self._sink(connected)
            except Exception:
                logger.exception("Connectivity sink raised")


# ---------------------------------------------------------------------------
# Signal sources
# ---------------------------------------------------------------------------

class ManualSignalSource:
    """In-process source; ``publish`` fans a signal out to every subscriber."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._callbacks: List[SignalCallback] = []

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._callbacks)

    def subscribe(self, callback: SignalCallback) -> Unsubscribe:
        with self._lock:
            self._callbacks.append(callback)

        def _unsubscribe() -> None:
            with self._lock:
                if callback in self._callbacks:
                    self._callbacks.remove(callback)

        return _unsubscribe

    def publish(self, signal: NetworkSignal) -> None:
        with self._lock:
            callbacks = list(self._callbacks)
        for cb in callbacks:
            cb(signal)


class ReachabilitySource(ManualSignalSource):
    """Publishes AVAILABLE / LOST after each periodic HEAD probe.

    Probing runs only while someone is subscribed; the probe task is created
    on the event loop that is running when the first subscriber arrives.
    """

    def __init__(
        self,
        transport: TimedTransport,
        url: str = LATENCY_URL,
        period: float = REACHABILITY_INTERVAL,
        timeout: float = REACHABILITY_TIMEOUT,
    ) -> None:
        super().__init__()
        self.transport = transport
        self.url = url
        self.period = period
        self.timeout = timeout
        self._task: Optional[asyncio.Task] = None

    def subscribe(self, callback: SignalCallback) -> Unsubscribe:
        inner = super().subscribe(callback)
        if self._task is None or self._task.done():
            self._task = asyncio.get_running_loop().create_task(self._probe_loop())

        def _unsubscribe() -> None:
            inner()
            if self.subscriber_count == 0 and self._task is not None:
                task, self._task = self._task, None
                loop = task.get_loop()
                if not loop.is_closed():
                    loop.call_soon_threadsafe(task.cancel)

        return _unsubscribe

    async def probe(self) -> NetworkSignal:
        outcome = await self.transport.request(
            "HEAD",
            self.url,
            timeout=self.timeout,
            timing=Timing.FIRST_BYTE,
        )
        return NetworkSignal.AVAILABLE if outcome.succeeded else NetworkSignal.LOST

    async def _probe_loop(self) -> None:
        while True:
            self.publish(await self.probe())
            await asyncio.sleep(self.period)
