"""
User configuration file support.

Reads/writes ``~/.realtime-network/config.json``.

Supported keys::

    interval = 10                # seconds between polling cycles
    latency_url = "..."          # low-latency first-byte target
    download_url = "..."         # fixed-size download payload
    upload_url = "..."           # POST sink for the upload payload
    ip_url = "..."               # plain-text public IP echo service
    isp_url = "..."              # page carrying "ispName" (desktop ISP lookup)
    ping_count = 4
    ping_delay = 0.2
    latency_timeout = 5.0
    throughput_timeout = 8.0
    download_size = 10000000
    upload_size = 1000000
    csv_file = ""                # auto-append CSV path
"""
from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict

from yarl import URL

from .constants import (
    DEFAULT_INTERVAL,
    DOWNLOAD_SIZE,
    DOWNLOAD_URL,
    IP_URL,
    ISP_URL,
    LATENCY_TIMEOUT,
    LATENCY_URL,
    MAX_INTERVAL,
    MIN_INTERVAL,
    PING_COUNT,
    PING_DELAY,
    THROUGHPUT_TIMEOUT,
    UPLOAD_SIZE,
    UPLOAD_URL,
)

_CONFIG_DIR = os.path.join(Path.home(), ".realtime-network")
_CONFIG_FILE = "config.json"


class ConfigurationError(ValueError):
    """A setting is malformed (bad URL, out-of-range number)."""


def _config_path() -> str:
    return os.path.join(_CONFIG_DIR, _CONFIG_FILE)


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

DEFAULTS: Dict[str, Any] = {
    "interval": DEFAULT_INTERVAL,
    "latency_url": LATENCY_URL,
    "download_url": DOWNLOAD_URL,
    "upload_url": UPLOAD_URL,
    "ip_url": IP_URL,
    "isp_url": ISP_URL,
    "ping_count": PING_COUNT,
    "ping_delay": PING_DELAY,
    "latency_timeout": LATENCY_TIMEOUT,
    "throughput_timeout": THROUGHPUT_TIMEOUT,
    "download_size": DOWNLOAD_SIZE,
    "upload_size": UPLOAD_SIZE,
    "csv_file": "",
}


# ---------------------------------------------------------------------------
# Read / Write
# ---------------------------------------------------------------------------

def load_config() -> Dict[str, Any]:
    """Load config from disk, returning defaults for missing keys."""
    path = _config_path()
    config = dict(DEFAULTS)

    if not os.path.isfile(path):
        return config

    try:
        with open(path, encoding="utf-8") as fh:
            user = json.load(fh)
        if isinstance(user, dict):
            config.update(user)
    except (json.JSONDecodeError, IOError):
        pass  # corrupt file; use defaults

    return config


def save_config(config: Dict[str, Any]) -> str:
    """Write *config* to disk.  Returns the file path."""
    path = _config_path()
    os.makedirs(os.path.dirname(path), exist_ok=True)

    with open(path, "w", encoding="utf-8") as fh:
        json.dump(config, fh, indent=2, ensure_ascii=False)

    return path


def get_config_value(key: str) -> Any:
    """Get a single config value."""
    return load_config().get(key, DEFAULTS.get(key))


def set_config_value(key: str, value: Any) -> str:
    """Set a single config value and persist.  Returns file path."""
    config = load_config()
    config[key] = value
    return save_config(config)


# ---------------------------------------------------------------------------
# Validated engine settings
# ---------------------------------------------------------------------------

def _check_url(name: str, value: Any) -> str:
    if not isinstance(value, str) or not value:
        raise ConfigurationError(f"{name} must be a non-empty URL")
    try:
        url = URL(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"{name} is not a valid URL: {value!r}") from exc
    if url.scheme not in ("http", "https") or not url.host:
        raise ConfigurationError(f"{name} must be an absolute http(s) URL: {value!r}")
    return value


def _check_number(name: str, value: Any, minimum: float, maximum: float = float("inf")) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(f"{name} must be a number")
    if not minimum <= value <= maximum:
        raise ConfigurationError(f"{name} must be between {minimum} and {maximum}")
    return value


@dataclass(frozen=True)
class Settings:
    """Engine tunables, validated once at start-up."""

    interval: int = DEFAULT_INTERVAL
    latency_url: str = LATENCY_URL
    download_url: str = DOWNLOAD_URL
    upload_url: str = UPLOAD_URL
    ip_url: str = IP_URL
    isp_url: str = ISP_URL
    ping_count: int = PING_COUNT
    ping_delay: float = PING_DELAY
    latency_timeout: float = LATENCY_TIMEOUT
    throughput_timeout: float = THROUGHPUT_TIMEOUT
    download_size: int = DOWNLOAD_SIZE
    upload_size: int = UPLOAD_SIZE

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Settings:
        """Build from a config dict; unknown keys are ignored.

        Raises ``ConfigurationError`` for malformed values.
        """
        known = {f.name for f in fields(cls)}
        merged = {k: v for k, v in {**DEFAULTS, **data}.items() if k in known}

        for key in ("latency_url", "download_url", "upload_url", "ip_url", "isp_url"):
            _check_url(key, merged[key])
        _check_number("interval", merged["interval"], MIN_INTERVAL, MAX_INTERVAL)
        _check_number("ping_count", merged["ping_count"], 1, 100)
        _check_number("ping_delay", merged["ping_delay"], 0, 60)
        _check_number("latency_timeout", merged["latency_timeout"], 0.1, 300)
        _check_number("throughput_timeout", merged["throughput_timeout"], 0.1, 300)
        _check_number("download_size", merged["download_size"], 1)
        _check_number("upload_size", merged["upload_size"], 1)

        merged["interval"] = int(merged["interval"])
        merged["ping_count"] = int(merged["ping_count"])
        merged["download_size"] = int(merged["download_size"])
        merged["upload_size"] = int(merged["upload_size"])
        return cls(**merged)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
