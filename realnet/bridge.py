"""
Host bridge.

Commands arrive from the host as ``(method, arguments)`` pairs and events
leave through an ``EventSink``.  The string-keyed wire form is parsed once
into a closed set of command types; ``dispatch`` is the only place that maps
a command onto the engine.

Wire contract::

    startListening {interval: int = 10}     -> null
    stopListening                           -> null
    runTest                                 -> {downloadSpeed, uploadSpeed, ping, jitter, ip, isp}
    startConnectivityListening              -> null
    stopConnectivityListening               -> null
    anything else                           -> not implemented

    event onNetworkStats(snapshot dict)     once per polling cycle
    event onConnectivityChanged(bool)       once per connectivity transition
"""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Union

from .aggregator import NetworkSnapshot, StatsAggregator
from .connectivity import ConnectivityMonitor, SignalSource
from .constants import (
    DEFAULT_INTERVAL,
    EVENT_CONNECTIVITY_CHANGED,
    EVENT_NETWORK_STATS,
    MAX_INTERVAL,
    MIN_INTERVAL,
)
from .scheduler import PollingScheduler

logger = logging.getLogger(__name__)

EventSink = Callable[[str, Any], None]


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StartListening:
    interval: int = DEFAULT_INTERVAL


@dataclass(frozen=True)
class StopListening:
    pass


@dataclass(frozen=True)
class RunTest:
    pass


@dataclass(frozen=True)
class StartConnectivityListening:
    pass


@dataclass(frozen=True)
class StopConnectivityListening:
    pass


@dataclass(frozen=True)
class Unknown:
    method: str


Command = Union[
    StartListening,
    StopListening,
    RunTest,
    StartConnectivityListening,
    StopConnectivityListening,
    Unknown,
]


def _interval_argument(arguments: Optional[Dict[str, Any]]) -> int:
    raw = (arguments or {}).get("interval")
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        return DEFAULT_INTERVAL
    return int(max(MIN_INTERVAL, min(raw, MAX_INTERVAL)))


def parse_command(method: str, arguments: Optional[Dict[str, Any]] = None) -> Command:
    """Map a wire method name (and its arguments) to a command."""
    if method == "startListening":
        return StartListening(interval=_interval_argument(arguments))
    simple = {
        "stopListening": StopListening,
        "runTest": RunTest,
        "startConnectivityListening": StartConnectivityListening,
        "stopConnectivityListening": StopConnectivityListening,
    }
    if method in simple:
        return simple[method]()
    return Unknown(method=method)


# ---------------------------------------------------------------------------
# Replies
# ---------------------------------------------------------------------------

class ReplyStatus(enum.Enum):
    OK = "ok"
    NOT_IMPLEMENTED = "not_implemented"


@dataclass(frozen=True)
class Reply:
    status: ReplyStatus = ReplyStatus.OK
    value: Any = None

    @property
    def ok(self) -> bool:
        return self.status is ReplyStatus.OK


NOT_IMPLEMENTED = Reply(status=ReplyStatus.NOT_IMPLEMENTED)


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

class NetworkEngine:
    """Owns the aggregator, polling scheduler and connectivity monitor."""

    def __init__(
        self,
        aggregator: StatsAggregator,
        signal_source: SignalSource,
        sink: EventSink,
    ) -> None:
        self.aggregator = aggregator
        self.sink = sink
        self.scheduler = PollingScheduler(aggregator.collect, self._emit_stats)
        self.monitor = ConnectivityMonitor(signal_source, self._emit_connectivity)

    def _emit_stats(self, snapshot: NetworkSnapshot) -> None:
        self.sink(EVENT_NETWORK_STATS, snapshot.to_dict())

    def _emit_connectivity(self, connected: bool) -> None:
        self.sink(EVENT_CONNECTIVITY_CHANGED, connected)

    async def run_test(self) -> NetworkSnapshot:
        return await self.aggregator.collect()

    async def handle(self, method: str, arguments: Optional[Dict[str, Any]] = None) -> Reply:
        """Parse and dispatch one wire command."""
        return await dispatch(self, parse_command(method, arguments))

    async def aclose(self) -> None:
        """Tear everything down (host detached)."""
        await self.scheduler.aclose()
        self.monitor.stop()


async def dispatch(engine: NetworkEngine, command: Command) -> Reply:
    if isinstance(command, StartListening):
        engine.scheduler.start(command.interval)
        return Reply()
    if isinstance(command, StopListening):
        engine.scheduler.stop()
        return Reply()
    if isinstance(command, RunTest):
        snapshot = await engine.run_test()
        return Reply(value=snapshot.to_dict())
    if isinstance(command, StartConnectivityListening):
        engine.monitor.start()
        return Reply()
    if isinstance(command, StopConnectivityListening):
        engine.monitor.stop()
        return Reply()

    logger.warning("Unrecognised command: %s", getattr(command, "method", command))
    return NOT_IMPLEMENTED
