"""
Upload speed test module.
Uses a single HTTP POST of a synthetic payload; only the body write is timed.
"""
import logging

from .constants import THROUGHPUT_TIMEOUT, UPLOAD_SIZE, UPLOAD_URL
from .stats import ThroughputResult
from .transport import TimedTransport, Timing

logger = logging.getLogger(__name__)


class UploadTester:
    """
    Upload speed tester.
    The payload is generated once per tester and reused for every run.
    """

    def __init__(
        self,
        transport: TimedTransport,
        url: str = UPLOAD_URL,
        size: int = UPLOAD_SIZE,
        timeout: float = THROUGHPUT_TIMEOUT,
    ):
        self.transport = transport
        self.url = url
        self.timeout = timeout
        self._payload = b"\x01" * size

    @property
    def size(self) -> int:
        return len(self._payload)

    async def test(self) -> ThroughputResult:
        """Perform upload speed test."""
        outcome = await self.transport.request(
            "POST",
            self.url,
            timeout=self.timeout,
            data=self._payload,
            timing=Timing.REQUEST_BODY,
        )
        if not outcome.succeeded:
            logger.debug("Upload to %s failed: %s", self.url, outcome.error)
            return ThroughputResult()

        sent = outcome.bytes_transferred or self.size
        result = ThroughputResult.from_transfer(sent, outcome.elapsed)
        logger.debug("Upload %s: %d bytes in %.3fs = %.2f Mbps", self.url, sent, outcome.elapsed, result.mbps)
        return result
