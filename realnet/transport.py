"""
Timed HTTP operations.

Every measurement in realnet reduces to one primitive: perform a single
HEAD / GET / POST against a URL with a bounded timeout and report how long it
took and whether it worked.  ``HttpTransport`` implements that primitive on a
shared ``aiohttp.ClientSession`` managed via the async-context-manager
protocol (``async with HttpTransport() as transport: ...``).

Failures are values, not exceptions: DNS errors, refused connections, timeouts
and error statuses all come back as a ``TimedResult`` with a non-success
``outcome`` so callers can apply their own fallback policy.
"""
from __future__ import annotations

import asyncio
import codecs
import enum
import logging
import time
from dataclasses import dataclass
from typing import Dict, List, Optional, Protocol, Tuple

import aiohttp

from .constants import CHUNK_SIZE, COMMON_HEADERS

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

class Outcome(enum.Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    TIMEOUT = "timeout"


class Timing(enum.Enum):
    """Which part of the exchange the clock covers."""

    FIRST_BYTE = "first_byte"        # request sent -> first response byte
    RESPONSE_BODY = "response_body"  # request sent -> response fully read
    REQUEST_BODY = "request_body"    # request body write + flush only


@dataclass(frozen=True)
class Sample:
    """A single timed operation's outcome, in whole milliseconds."""

    duration_ms: int
    succeeded: bool


@dataclass(frozen=True)
class TimedResult:
    """Outcome of one timed request."""

    outcome: Outcome
    elapsed: float = 0.0          # seconds
    bytes_transferred: int = 0
    status: int = 0
    body: str = ""
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.outcome is Outcome.SUCCESS

    @property
    def duration_ms(self) -> int:
        return max(0, round(self.elapsed * 1000))

    def to_sample(self) -> Sample:
        return Sample(duration_ms=self.duration_ms, succeeded=self.succeeded)


class TimedTransport(Protocol):
    """The injected capability every probe is written against."""

    async def request(
        self,
        method: str,
        url: str,
        *,
        timeout: float,
        data: Optional[bytes] = None,
        timing: Timing = Timing.RESPONSE_BODY,
        keep_body: bool = False,
    ) -> TimedResult:
        ...


# ---------------------------------------------------------------------------
# aiohttp implementation
# ---------------------------------------------------------------------------

_NETWORK_ERRORS = (aiohttp.ClientError, OSError, ValueError)


async def _drain(resp: aiohttp.ClientResponse, keep: bool = False) -> Tuple[int, bytes]:
    """Read the response body to EOF, discarding it unless *keep* is set."""
    total = 0
    parts: List[bytes] = []
    async for chunk in resp.content.iter_chunked(CHUNK_SIZE):
        total += len(chunk)
        if keep:
            parts.append(chunk)
    return total, b"".join(parts)


def _decode(raw: bytes, charset: Optional[str]) -> str:
    """Decode with the declared charset, falling back to UTF-8 if it is unknown."""
    encoding = charset or "utf-8"
    try:
        codecs.lookup(encoding)
    except LookupError:
        logger.debug("Unknown response charset %r; decoding as utf-8", charset)
        encoding = "utf-8"
    return raw.decode(encoding, errors="replace")


class HttpTransport:
    """``TimedTransport`` backed by a single ``aiohttp.ClientSession``."""

    def __init__(self, headers: Optional[Dict[str, str]] = None) -> None:
        self._headers = {**COMMON_HEADERS, **(headers or {})}
        self._session: Optional[aiohttp.ClientSession] = None

    # -- Context manager ----------------------------------------------------

    async def __aenter__(self) -> HttpTransport:
        self._session = aiohttp.ClientSession(headers=self._headers)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        if self._session:
            await self._session.close()
            self._session = None

    def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            raise RuntimeError(
                "HttpTransport must be used as an async context manager "
                "(async with HttpTransport() as transport: ...)"
            )
        return self._session

    # -- Public -------------------------------------------------------------

    async def request(
        self,
        method: str,
        url: str,
        *,
        timeout: float,
        data: Optional[bytes] = None,
        timing: Timing = Timing.RESPONSE_BODY,
        keep_body: bool = False,
    ) -> TimedResult:
        session = self._ensure_session()
        if timing is Timing.REQUEST_BODY:
            return await self._timed_upload(session, method, url, data or b"", timeout)

        client_timeout = aiohttp.ClientTimeout(total=timeout)
        start = time.perf_counter()

        try:
            async with session.request(method, url, data=data, timeout=client_timeout) as resp:
                if resp.status >= 400:
                    return TimedResult(
                        outcome=Outcome.FAILURE,
                        elapsed=time.perf_counter() - start,
                        status=resp.status,
                        error=f"HTTP {resp.status}",
                    )

                if timing is Timing.FIRST_BYTE:
                    first = await resp.content.read(1)
                    elapsed = time.perf_counter() - start
                    received = len(first)
                    try:
                        rest, _ = await _drain(resp)
                        received += rest
                    except (asyncio.TimeoutError, *_NETWORK_ERRORS) as exc:
                        logger.debug("Drain after first byte failed for %s: %s", url, exc)
                    return TimedResult(
                        outcome=Outcome.SUCCESS,
                        elapsed=elapsed,
                        bytes_transferred=received,
                        status=resp.status,
                    )

                received, raw = await _drain(resp, keep=keep_body)
                elapsed = time.perf_counter() - start
                body = _decode(raw, resp.charset) if keep_body else ""
                return TimedResult(
                    outcome=Outcome.SUCCESS,
                    elapsed=elapsed,
                    bytes_transferred=received,
                    status=resp.status,
                    body=body,
                )

        except asyncio.TimeoutError:
            logger.debug("%s %s timed out after %.1fs", method, url, timeout)
            return TimedResult(
                outcome=Outcome.TIMEOUT,
                elapsed=time.perf_counter() - start,
                error="timeout",
            )
        except _NETWORK_ERRORS as exc:
            logger.debug("%s %s failed: %s", method, url, exc)
            return TimedResult(
                outcome=Outcome.FAILURE,
                elapsed=time.perf_counter() - start,
                error=str(exc) or type(exc).__name__,
            )

    # -- Internals ----------------------------------------------------------

    async def _timed_upload(
        self,
        session: aiohttp.ClientSession,
        method: str,
        url: str,
        payload: bytes,
        timeout: float,
    ) -> TimedResult:
        """Time the body write only; the response is drained best-effort."""
        marks: Dict[str, float] = {}

        async def _body():
            marks["start"] = time.perf_counter()
            view = memoryview(payload)
            for offset in range(0, len(view), CHUNK_SIZE):
                yield bytes(view[offset:offset + CHUNK_SIZE])
            # Reached only once the writer asks for more after the last chunk.
            marks["end"] = time.perf_counter()

        def _written() -> Optional[TimedResult]:
            if "end" not in marks:
                return None
            return TimedResult(
                outcome=Outcome.SUCCESS,
                elapsed=marks["end"] - marks["start"],
                bytes_transferred=len(payload),
                status=status,
            )

        status = 0
        client_timeout = aiohttp.ClientTimeout(total=timeout)
        start = time.perf_counter()

        try:
            async with session.request(method, url, data=_body(), timeout=client_timeout) as resp:
                status = resp.status
                try:
                    await _drain(resp)
                except (asyncio.TimeoutError, *_NETWORK_ERRORS) as exc:
                    logger.debug("Upload response drain failed for %s: %s", url, exc)
        except asyncio.TimeoutError:
            written = _written()
            if written is not None:
                return written
            logger.debug("%s %s timed out during body write", method, url)
            return TimedResult(
                outcome=Outcome.TIMEOUT,
                elapsed=time.perf_counter() - start,
                error="timeout",
            )
        except _NETWORK_ERRORS as exc:
            written = _written()
            if written is not None:
                return written
            logger.debug("%s %s failed during body write: %s", method, url, exc)
            return TimedResult(
                outcome=Outcome.FAILURE,
                elapsed=time.perf_counter() - start,
                error=str(exc) or type(exc).__name__,
            )

        written = _written()
        if written is not None:
            return written
        return TimedResult(
            outcome=Outcome.FAILURE,
            elapsed=time.perf_counter() - start,
            status=status,
            error="request body was not fully written",
        )
