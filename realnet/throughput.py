"""Download and upload probes behind one object."""
from __future__ import annotations

from .download import DownloadTester
from .stats import ThroughputResult
from .upload import UploadTester


class ThroughputProbe:
    """Pairs a ``DownloadTester`` and an ``UploadTester``."""

    def __init__(self, download: DownloadTester, upload: UploadTester) -> None:
        self.download_tester = download
        self.upload_tester = upload

    async def download(self) -> ThroughputResult:
        return await self.download_tester.test()

    async def upload(self) -> ThroughputResult:
        return await self.upload_tester.test()
