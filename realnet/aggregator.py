"""
Snapshot assembly.

``StatsAggregator`` runs every probe once and folds the results into a
``NetworkSnapshot``.  Probes report failure through sentinels rather than
exceptions, so one broken sub-measurement only degrades its own field.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .config import Settings
from .download import DownloadTester
from .identity import CarrierLookup, IdentityLookup
from .latency import LatencyTester
from .throughput import ThroughputProbe
from .transport import TimedTransport
from .upload import UploadTester

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NetworkSnapshot:
    """One polling cycle's measurements."""

    download_speed_mbps: float = 0.0
    upload_speed_mbps: float = 0.0
    ping_ms: int = 0
    jitter_ms: int = 0
    public_ip: str = ""
    isp_name: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Wire form handed to the host bridge; key names are fixed."""
        return {
            "downloadSpeed": self.download_speed_mbps,
            "uploadSpeed": self.upload_speed_mbps,
            "ping": self.ping_ms,
            "jitter": self.jitter_ms,
            "ip": self.public_ip,
            "isp": self.isp_name,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> NetworkSnapshot:
        return cls(
            download_speed_mbps=float(data.get("downloadSpeed", 0.0)),
            upload_speed_mbps=float(data.get("uploadSpeed", 0.0)),
            ping_ms=int(data.get("ping", 0)),
            jitter_ms=int(data.get("jitter", 0)),
            public_ip=str(data.get("ip", "")),
            isp_name=str(data.get("isp", "")),
        )


class StatsAggregator:
    """Runs latency, throughput and identity probes and builds a snapshot."""

    def __init__(
        self,
        latency: LatencyTester,
        throughput: ThroughputProbe,
        identity: IdentityLookup,
    ) -> None:
        self.latency = latency
        self.throughput = throughput
        self.identity = identity

    @classmethod
    def for_transport(
        cls,
        transport: TimedTransport,
        settings: Optional[Settings] = None,
        carrier: Optional[CarrierLookup] = None,
    ) -> StatsAggregator:
        """Wire every probe to *transport* using *settings* (defaults if omitted)."""
        s = settings or Settings()
        return cls(
            latency=LatencyTester(
                transport,
                url=s.latency_url,
                count=s.ping_count,
                delay=s.ping_delay,
                timeout=s.latency_timeout,
            ),
            throughput=ThroughputProbe(
                DownloadTester(
                    transport,
                    url=s.download_url,
                    size=s.download_size,
                    timeout=s.throughput_timeout,
                ),
                UploadTester(
                    transport,
                    url=s.upload_url,
                    size=s.upload_size,
                    timeout=s.throughput_timeout,
                ),
            ),
            identity=IdentityLookup(transport, url=s.ip_url, carrier=carrier),
        )

    async def collect(self) -> NetworkSnapshot:
        # Probes run one at a time; throughput tests must not share the link.
        started = time.perf_counter()
        latency = await self.latency.test()
        download = await self.throughput.download()
        upload = await self.throughput.upload()
        ip = await self.identity.public_ip()
        isp = await self.identity.isp_name()

        snapshot = NetworkSnapshot(
            download_speed_mbps=download.mbps,
            upload_speed_mbps=upload.mbps,
            ping_ms=latency.average_ms,
            jitter_ms=latency.jitter_ms,
            public_ip=ip,
            isp_name=isp,
        )
        logger.info(
            "Snapshot in %.1fs: down=%.2f up=%.2f ping=%d jitter=%d ip=%s isp=%s",
            time.perf_counter() - started,
            snapshot.download_speed_mbps,
            snapshot.upload_speed_mbps,
            snapshot.ping_ms,
            snapshot.jitter_ms,
            snapshot.public_ip or "-",
            snapshot.isp_name,
        )
        return snapshot
