"""realnet -- periodic network quality measurement and connectivity events."""

from .aggregator import NetworkSnapshot, StatsAggregator
from .bridge import (
    NOT_IMPLEMENTED,
    Command,
    NetworkEngine,
    Reply,
    ReplyStatus,
    dispatch,
    parse_command,
)
from .config import ConfigurationError, Settings
from .connectivity import (
    ConnectivityMonitor,
    ManualSignalSource,
    NetworkSignal,
    ReachabilitySource,
)
from .download import DownloadTester
from .identity import IdentityLookup, SpeedtestIspLookup
from .latency import LatencyResult, LatencyTester
from .scheduler import PollingScheduler
from .stats import ThroughputResult, calculate_jitter, calculate_mbps
from .throughput import ThroughputProbe
from .transport import HttpTransport, Outcome, Sample, TimedResult, Timing
from .upload import UploadTester

__all__ = [
    "NOT_IMPLEMENTED",
    "Command",
    "ConfigurationError",
    "ConnectivityMonitor",
    "DownloadTester",
    "HttpTransport",
    "IdentityLookup",
    "LatencyResult",
    "LatencyTester",
    "ManualSignalSource",
    "NetworkEngine",
    "NetworkSignal",
    "NetworkSnapshot",
    "Outcome",
    "PollingScheduler",
    "ReachabilitySource",
    "Reply",
    "ReplyStatus",
    "Sample",
    "Settings",
    "SpeedtestIspLookup",
    "StatsAggregator",
    "ThroughputProbe",
    "ThroughputResult",
    "TimedResult",
    "Timing",
    "UploadTester",
    "calculate_jitter",
    "calculate_mbps",
    "dispatch",
    "parse_command",
]
