"""
Network measurement statistics.

Pure functions and lightweight dataclasses -- no I/O, no side effects.
Everything here is deterministic and easy to unit-test.
"""
from __future__ import annotations

import statistics
from dataclasses import dataclass
from typing import Sequence


# ---------------------------------------------------------------------------
# Dataclasses
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ThroughputResult:
    """One download or upload measurement; ``mbps == 0.0`` means it failed."""

    mbps: float = 0.0
    bytes_transferred: int = 0
    elapsed: float = 0.0          # seconds

    @classmethod
    def from_transfer(cls, bytes_transferred: int, elapsed: float) -> ThroughputResult:
        return cls(
            mbps=calculate_mbps(bytes_transferred, elapsed),
            bytes_transferred=bytes_transferred,
            elapsed=elapsed,
        )

    @property
    def succeeded(self) -> bool:
        return self.mbps > 0


# ---------------------------------------------------------------------------
# Latency
# ---------------------------------------------------------------------------

def calculate_average(samples: Sequence[int]) -> int:
    """Arithmetic mean truncated to whole milliseconds."""
    if not samples:
        return 0
    return int(statistics.mean(samples))


def calculate_jitter(samples: Sequence[float]) -> float:
    """Mean absolute difference between consecutive samples.

    Order matters: the differences are taken in the order the samples were
    collected, not after sorting.
    """
    if len(samples) < 2:
        return 0.0
    diffs = [abs(samples[i] - samples[i - 1]) for i in range(1, len(samples))]
    return statistics.mean(diffs)


# ---------------------------------------------------------------------------
# Throughput
# ---------------------------------------------------------------------------

def calculate_mbps(bytes_transferred: int, elapsed_seconds: float) -> float:
    """Bitrate in Mbps rounded to 2 decimals; ``0.0`` when nothing was timed."""
    if elapsed_seconds <= 0 or bytes_transferred <= 0:
        return 0.0
    return round((bytes_transferred * 8) / elapsed_seconds / 1_000_000, 2)


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------

def format_speed(speed_mbps: float) -> str:
    """Human-readable speed string."""
    if speed_mbps >= 1000:
        return f"{speed_mbps / 1000:.2f} Gbps"
    return f"{speed_mbps:.2f} Mbps"


def format_latency(latency_ms: float) -> str:
    """Human-readable latency string."""
    if latency_ms >= 1000:
        return f"{latency_ms / 1000:.2f} s"
    return f"{latency_ms:.0f} ms"
