"""
HTTP round-trip latency measurement.

Probe flow::

    1. GET {target}, stop the clock at the first response byte
    2. Wait PING_DELAY
    3. Repeat until PING_COUNT samples have been taken

A failed probe is not dropped: it contributes ``PING_PENALTY_MS`` to both
the average and the jitter.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Tuple

from .constants import LATENCY_TIMEOUT, LATENCY_URL, PING_COUNT, PING_DELAY, PING_PENALTY_MS
from .stats import calculate_average, calculate_jitter
from .transport import Sample, TimedTransport, Timing

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LatencyResult:
    """Average round-trip and jitter, both in whole milliseconds."""

    average_ms: int = 0
    jitter_ms: int = 0
    samples: Tuple[int, ...] = field(default_factory=tuple)
    failures: int = 0

    @classmethod
    def from_samples(cls, samples: List[Sample], penalty_ms: int = PING_PENALTY_MS) -> LatencyResult:
        """Apply the penalty policy and derive average and jitter."""
        values = [s.duration_ms if s.succeeded else penalty_ms for s in samples]
        return cls(
            average_ms=calculate_average(values),
            jitter_ms=int(calculate_jitter(values)),
            samples=tuple(values),
            failures=sum(1 for s in samples if not s.succeeded),
        )


# ---------------------------------------------------------------------------
# Tester
# ---------------------------------------------------------------------------

class LatencyTester:
    """Sequential first-byte probes against a single low-latency target."""

    def __init__(
        self,
        transport: TimedTransport,
        url: str = LATENCY_URL,
        count: int = PING_COUNT,
        delay: float = PING_DELAY,
        timeout: float = LATENCY_TIMEOUT,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.transport = transport
        self.url = url
        self.count = count
        self.delay = delay
        self.timeout = timeout
        self._sleep = sleep

    async def test(self) -> LatencyResult:
        samples: List[Sample] = []

        for i in range(self.count):
            if i and self.delay > 0:
                await self._sleep(self.delay)
            outcome = await self.transport.request(
                "GET",
                self.url,
                timeout=self.timeout,
                timing=Timing.FIRST_BYTE,
            )
            sample = outcome.to_sample()
            if not sample.succeeded:
                logger.debug("Ping %d/%d to %s failed: %s", i + 1, self.count, self.url, outcome.error)
            samples.append(sample)

        result = LatencyResult.from_samples(samples)
        logger.debug(
            "Latency %s: avg=%dms jitter=%dms samples=%s",
            self.url, result.average_ms, result.jitter_ms, list(result.samples),
        )
        return result
