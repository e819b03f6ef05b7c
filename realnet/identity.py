"""
Public IP and access-network identity.

The public IP comes from a plain-text echo service.  The carrier / ISP name
is supplied by the host platform through a ``CarrierLookup`` hook; on the
desktop ``SpeedtestIspLookup`` scrapes it from the speedtest.net landing page.
"""
from __future__ import annotations

import inspect
import ipaddress
import logging
import re
from typing import Awaitable, Callable, Optional, Union

from .constants import IDENTITY_TIMEOUT, IP_URL, ISP_URL, UNKNOWN_ISP
from .transport import TimedTransport, Timing

logger = logging.getLogger(__name__)

CarrierLookup = Callable[[], Union[str, Awaitable[str]]]


# ---------------------------------------------------------------------------
# Public IP
# ---------------------------------------------------------------------------

def parse_ip(body: str) -> str:
    """Return the first line of *body* if it is an IP address, else ``""``."""
    lines = body.strip().splitlines()
    if not lines:
        return ""
    candidate = lines[0].strip()
    try:
        ipaddress.ip_address(candidate)
    except ValueError:
        return ""
    return candidate


class IdentityLookup:
    """Fetches the caller's public IP and asks the carrier hook for the ISP."""

    def __init__(
        self,
        transport: TimedTransport,
        url: str = IP_URL,
        timeout: float = IDENTITY_TIMEOUT,
        carrier: Optional[CarrierLookup] = None,
    ) -> None:
        self.transport = transport
        self.url = url
        self.timeout = timeout
        self.carrier = carrier

    async def public_ip(self) -> str:
        """Single attempt, no retry; any failure yields ``""``."""
        outcome = await self.transport.request(
            "GET",
            self.url,
            timeout=self.timeout,
            timing=Timing.RESPONSE_BODY,
            keep_body=True,
        )
        if not outcome.succeeded:
            logger.debug("Public IP lookup via %s failed: %s", self.url, outcome.error)
            return ""

        ip = parse_ip(outcome.body)
        if not ip:
            logger.debug("Public IP lookup returned malformed body: %r", outcome.body[:50])
        return ip

    async def isp_name(self) -> str:
        """Ask the carrier hook; missing hook, blank answer or error -> ``"Unknown"``."""
        if self.carrier is None:
            return UNKNOWN_ISP
        try:
            name = self.carrier()
            if inspect.isawaitable(name):
                name = await name
        except Exception:  # platform hook
            logger.warning("Carrier lookup failed", exc_info=True)
            return UNKNOWN_ISP
        if not isinstance(name, str) or not name.strip():
            return UNKNOWN_ISP
        return name.strip()


# ---------------------------------------------------------------------------
# Desktop carrier hook
# ---------------------------------------------------------------------------

_ISP_PATTERN = re.compile(r'"ispName"\s*:\s*"([^"]+)"')


class SpeedtestIspLookup:
    """Carrier hook that reads ``ispName`` from the speedtest.net home page."""

    def __init__(
        self,
        transport: TimedTransport,
        url: str = ISP_URL,
        timeout: float = IDENTITY_TIMEOUT,
    ) -> None:
        self.transport = transport
        self.url = url
        self.timeout = timeout

    async def __call__(self) -> str:
        outcome = await self.transport.request(
            "GET",
            self.url,
            timeout=self.timeout,
            timing=Timing.RESPONSE_BODY,
            keep_body=True,
        )
        if not outcome.succeeded:
            return UNKNOWN_ISP
        m = _ISP_PATTERN.search(outcome.body)
        return m.group(1) if m else UNKNOWN_ISP
