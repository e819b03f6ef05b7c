"""
Download speed test module.

One GET of a fixed-size payload; the body is read to EOF and discarded, and
the wall-clock time of the whole transfer becomes the bitrate denominator.
"""
from __future__ import annotations

import logging

from .constants import DOWNLOAD_SIZE, DOWNLOAD_URL, THROUGHPUT_TIMEOUT
from .stats import ThroughputResult
from .transport import TimedTransport, Timing

logger = logging.getLogger(__name__)


class DownloadTester:
    """Single-stream download tester."""

    def __init__(
        self,
        transport: TimedTransport,
        url: str = DOWNLOAD_URL,
        size: int = DOWNLOAD_SIZE,
        timeout: float = THROUGHPUT_TIMEOUT,
    ) -> None:
        self.transport = transport
        self.url = url
        self.size = size
        self.timeout = timeout

    async def test(self) -> ThroughputResult:
        outcome = await self.transport.request(
            "GET",
            self.url,
            timeout=self.timeout,
            timing=Timing.RESPONSE_BODY,
        )
        if not outcome.succeeded:
            logger.debug("Download from %s failed: %s", self.url, outcome.error)
            return ThroughputResult()

        received = outcome.bytes_transferred or self.size
        result = ThroughputResult.from_transfer(received, outcome.elapsed)
        logger.debug(
            "Download %s: %d bytes in %.3fs = %.2f Mbps",
            self.url, received, outcome.elapsed, result.mbps,
        )
        return result
