"""
Snapshot history persistence.

Snapshots are stored as JSON-lines in ``~/.realtime-network/history.jsonl``.
Each line is a self-contained JSON object with a timestamp, so the file can
be appended to safely (no need to parse the whole file to add a record).
"""
from __future__ import annotations

import json
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

_DEFAULT_DIR = os.path.join(Path.home(), ".realtime-network")
_DEFAULT_FILE = "history.jsonl"
_MAX_DISPLAY = 20  # show last N entries in --history


def _history_path() -> str:
    return os.path.join(_DEFAULT_DIR, _DEFAULT_FILE)


# ---------------------------------------------------------------------------
# Write
# ---------------------------------------------------------------------------

def save_result(result: Dict[str, Any]) -> str:
    """Append *result* as a single JSON line.  Returns the file path.

    The caller's dict is left untouched; a timestamp is added to the stored
    copy when missing.
    """
    path = _history_path()
    os.makedirs(os.path.dirname(path), exist_ok=True)

    record = dict(result)
    record.setdefault("timestamp", datetime.now(timezone.utc).isoformat())

    with open(path, "a", encoding="utf-8") as fh:
        fh.write(json.dumps(record, ensure_ascii=False) + "\n")

    return path


# ---------------------------------------------------------------------------
# Read
# ---------------------------------------------------------------------------

def load_history(limit: int = _MAX_DISPLAY) -> List[Dict[str, Any]]:
    """Return the most recent *limit* results, newest last."""
    path = _history_path()
    if not os.path.isfile(path):
        return []

    entries: List[Dict[str, Any]] = []
    with open(path, encoding="utf-8") as fh:
        for line in fh:
            line = line.strip()
            if not line:
                continue
            try:
                entry = json.loads(line)
            except json.JSONDecodeError:
                continue  # skip corrupt lines
            if isinstance(entry, dict):
                entries.append(entry)

    return entries[-limit:] if limit > 0 else []


# ---------------------------------------------------------------------------
# Display helpers
# ---------------------------------------------------------------------------

def format_history_table(entries: List[Dict[str, Any]]) -> List[dict]:
    """
    Flatten raw history entries for tabular display.  Each row has:
    timestamp, ping, jitter, download, upload, ip, isp.
    """
    rows = []
    for e in entries:
        ts_raw = e.get("timestamp", "")
        try:
            ts = datetime.fromisoformat(ts_raw).strftime("%Y-%m-%d %H:%M:%S")
        except (ValueError, TypeError):
            ts = ts_raw[:19] if ts_raw else "?"

        rows.append({
            "timestamp": ts,
            "ping": e.get("ping", 0),
            "jitter": e.get("jitter", 0),
            "download": e.get("downloadSpeed", 0.0),
            "upload": e.get("uploadSpeed", 0.0),
            "ip": e.get("ip", ""),
            "isp": e.get("isp", ""),
        })
    return rows


def sparkline(values: List[float]) -> str:
    """Single-line Unicode sparkline chart."""
    if not values:
        return ""
    bars = "▁▂▃▄▅▆▇█"
    lo, hi = min(values), max(values)
    span = hi - lo if hi > lo else 1.0
    return "".join(
        bars[min(int((v - lo) / span * (len(bars) - 1)), len(bars) - 1)]
        for v in values
    )
