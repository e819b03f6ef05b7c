"""Unit tests for ui.output -- JSON creation, text and CSV formatting."""

import json
import os
import tempfile
import unittest

from realnet.aggregator import NetworkSnapshot
from ui.output import (
    _csv_escape,
    append_csv,
    create_result_json,
    format_csv_header,
    format_csv_row,
    format_text_result,
    save_json,
)

SNAPSHOT = NetworkSnapshot(
    download_speed_mbps=95.5,
    upload_speed_mbps=12.25,
    ping_ms=18,
    jitter_ms=4,
    public_ip="203.0.113.7",
    isp_name="Example Telecom",
)


class TestCreateResultJson(unittest.TestCase):
    def test_wire_keys_and_timestamp(self):
        r = create_result_json(SNAPSHOT)
        self.assertIn("timestamp", r)
        for key in ("downloadSpeed", "uploadSpeed", "ping", "jitter", "ip", "isp"):
            self.assertIn(key, r)
        self.assertEqual(r["downloadSpeed"], 95.5)
        self.assertEqual(r["ping"], 18)

    def test_serialisable(self):
        json.dumps(create_result_json(SNAPSHOT))


class TestSaveJson(unittest.TestCase):
    def test_writes_file(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "result.json")
            save_json({"ping": 1}, path)
            with open(path) as f:
                self.assertEqual(json.load(f), {"ping": 1})
            self.assertEqual(os.listdir(tmpdir), ["result.json"])

    def test_missing_directory_raises_ioerror(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "nope", "result.json")
            with self.assertRaises(IOError):
                save_json({"ping": 1}, path)


class TestFormatText(unittest.TestCase):
    def test_contains_fields(self):
        text = format_text_result(SNAPSHOT)
        self.assertIn("Example Telecom", text)
        self.assertIn("203.0.113.7", text)
        self.assertIn("18 ms", text)
        self.assertIn("95.50 Mbps", text)
        self.assertIn("12.25 Mbps", text)

    def test_missing_ip(self):
        text = format_text_result(NetworkSnapshot(isp_name="Unknown"))
        self.assertIn("IP: unavailable", text)


class TestCsv(unittest.TestCase):
    def test_header_columns(self):
        self.assertEqual(len(format_csv_header().split(",")), 7)

    def test_row_columns(self):
        row = format_csv_row(SNAPSHOT)
        parts = row.split(",")
        self.assertEqual(len(parts), 7)
        self.assertEqual(parts[1], "Example Telecom")
        self.assertEqual(parts[-2:], ["95.50", "12.25"])

    def test_escape(self):
        self.assertEqual(_csv_escape("plain"), "plain")
        self.assertEqual(_csv_escape("a,b"), '"a,b"')
        self.assertEqual(_csv_escape('say "hi"'), '"say ""hi"""')
        self.assertEqual(_csv_escape("a\nb"), '"a\nb"')

    def test_isp_with_comma_is_quoted(self):
        row = format_csv_row(NetworkSnapshot(isp_name="Acme, Inc."))
        self.assertIn('"Acme, Inc."', row)

    def test_append_writes_header_once(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "log.csv")
            append_csv(path, SNAPSHOT)
            append_csv(path, SNAPSHOT)
            with open(path) as f:
                lines = f.read().splitlines()
            self.assertEqual(len(lines), 3)
            self.assertEqual(lines[0], format_csv_header())


if __name__ == "__main__":
    unittest.main()
