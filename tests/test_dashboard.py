"""Smoke tests for ui.dashboard and logging setup -- output must not crash."""

import logging
import os
import unittest
from unittest import mock

from rich.console import Console
from rich.logging import RichHandler

from realnet.aggregator import NetworkSnapshot
from realnet.logging_config import configure_logging


class TestDashboard(unittest.TestCase):
    def setUp(self):
        self.console = Console(record=True, width=120)
        patcher = mock.patch("ui.dashboard.console", self.console)
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_failed_speeds_shown_as_failed(self):
        from ui.dashboard import print_snapshot
        print_snapshot(NetworkSnapshot(ping_ms=1000, isp_name="Unknown"))
        text = self.console.export_text()
        self.assertIn("failed", text)
        self.assertIn("unavailable", text)

    def test_snapshot_values(self):
        from ui.dashboard import print_snapshot
        print_snapshot(NetworkSnapshot(download_speed_mbps=80.0, upload_speed_mbps=16.0,
                                       ping_ms=20, public_ip="203.0.113.7", isp_name="Telia"))
        text = self.console.export_text()
        self.assertIn("80.00 Mbps", text)
        self.assertIn("Telia", text)

    def test_connectivity_change(self):
        from ui.dashboard import print_connectivity_change
        print_connectivity_change(True)
        print_connectivity_change(False)
        text = self.console.export_text()
        self.assertIn("Connected", text)
        self.assertIn("Disconnected", text)

    def test_empty_history(self):
        from ui.dashboard import print_history
        print_history([])
        self.assertIn("No history yet", self.console.export_text())

    def test_history_with_trend(self):
        from ui.dashboard import print_history
        print_history([
            {"timestamp": "2024-05-01T12:00:00", "ping": 20, "downloadSpeed": 80.0, "uploadSpeed": 10.0},
            {"timestamp": "2024-05-01T12:00:10", "ping": 30, "downloadSpeed": 60.0, "uploadSpeed": 12.0},
        ])
        text = self.console.export_text()
        self.assertIn("History", text)
        self.assertIn("Trend", text)


class TestConfigureLogging(unittest.TestCase):
    def setUp(self):
        root = logging.getLogger()
        saved = (root.level, list(root.handlers))

        def restore():
            root.handlers[:] = saved[1]
            root.setLevel(saved[0])

        self.addCleanup(restore)

    def test_default_level(self):
        with mock.patch.dict(os.environ, {}, clear=True):
            configure_logging()
        root = logging.getLogger()
        self.assertEqual(root.level, logging.WARNING)
        self.assertIsInstance(root.handlers[0], RichHandler)

    def test_env_level(self):
        with mock.patch.dict(os.environ, {"REALNET_LOG_LEVEL": "info"}):
            configure_logging()
        self.assertEqual(logging.getLogger().level, logging.INFO)

    def test_bad_env_level_falls_back(self):
        with mock.patch.dict(os.environ, {"REALNET_LOG_LEVEL": "chatty"}):
            configure_logging()
        self.assertEqual(logging.getLogger().level, logging.WARNING)

    def test_verbose_forces_debug(self):
        with mock.patch.dict(os.environ, {"REALNET_LOG_LEVEL": "ERROR"}):
            configure_logging(verbose=True)
        self.assertEqual(logging.getLogger().level, logging.DEBUG)
        self.assertEqual(logging.getLogger("aiohttp").level, logging.INFO)


if __name__ == "__main__":
    unittest.main()
