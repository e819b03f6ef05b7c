"""
Output formatting -- JSON export, plain text, and CSV.
"""
from __future__ import annotations

import json
import os
from datetime import datetime, timezone
from typing import Any, Dict

from realnet.aggregator import NetworkSnapshot


def create_result_json(snapshot: NetworkSnapshot) -> Dict[str, Any]:
    """Wire-format snapshot plus a UTC timestamp."""
    return {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        **snapshot.to_dict(),
    }


def save_json(result: Dict[str, Any], filepath: str) -> None:
    """Write *result* to *filepath* atomically (write-tmp then rename)."""
    dir_path = os.path.dirname(filepath) or "."
    tmp = os.path.join(dir_path, f".tmp_{os.path.basename(filepath)}")

    try:
        with open(tmp, "w", encoding="utf-8") as fh:
            json.dump(result, fh, indent=2, ensure_ascii=False)
        os.replace(tmp, filepath)
    except (IOError, OSError) as exc:
        # Clean up partial temp file
        try:
            os.unlink(tmp)
        except OSError:
            pass
        raise IOError(f"Failed to save JSON to {filepath}: {exc}") from exc


# ---------------------------------------------------------------------------
# Plain-text / CSV helpers
# ---------------------------------------------------------------------------

def format_text_result(snapshot: NetworkSnapshot) -> str:
    sep = "=" * 50
    mid = "-" * 50
    return (
        f"{sep}\n"
        f"Network Stats\n"
        f"{sep}\n"
        f"ISP: {snapshot.isp_name}\n"
        f"IP: {snapshot.public_ip or 'unavailable'}\n"
        f"{mid}\n"
        f"Ping: {snapshot.ping_ms} ms (jitter: {snapshot.jitter_ms} ms)\n"
        f"Download: {snapshot.download_speed_mbps:.2f} Mbps\n"
        f"Upload: {snapshot.upload_speed_mbps:.2f} Mbps\n"
        f"{sep}"
    )


def _csv_escape(value: str) -> str:
    """Quote a CSV field when it contains a delimiter, quote or newline."""
    if any(c in value for c in (",", '"', "\n", "\r")):
        return '"' + value.replace('"', '""') + '"'
    return value


def format_csv_header() -> str:
    return "timestamp,isp,ip,ping_ms,jitter_ms,download_mbps,upload_mbps"


def format_csv_row(snapshot: NetworkSnapshot) -> str:
    ts = datetime.now(timezone.utc).isoformat()
    return (
        f"{ts},{_csv_escape(snapshot.isp_name)},{_csv_escape(snapshot.public_ip)},"
        f"{snapshot.ping_ms},{snapshot.jitter_ms},"
        f"{snapshot.download_speed_mbps:.2f},{snapshot.upload_speed_mbps:.2f}"
    )


def append_csv(path: str, snapshot: NetworkSnapshot) -> None:
    """Append a single CSV row, writing the header if the file is new."""
    write_header = not os.path.isfile(path) or os.path.getsize(path) == 0
    with open(path, "a", encoding="utf-8") as fh:
        if write_header:
            fh.write(format_csv_header() + "\n")
        fh.write(format_csv_row(snapshot) + "\n")
