"""
Shared constants used across all realnet modules.

Centralises endpoints, payload sizes, timeouts, and the failure sentinels so
they live in exactly one place.
"""

# ---------------------------------------------------------------------------
# HTTP headers
# ---------------------------------------------------------------------------

USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/144.0.0.0 Safari/537.36"
)

COMMON_HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept": "*/*",
    "Accept-Encoding": "identity",
}

# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

LATENCY_URL = "http://speedtest.tele2.net/1KB.zip"
DOWNLOAD_URL = "http://speedtest.tele2.net/10MB.zip"
UPLOAD_URL = "https://nbg1-speed.hetzner.com/upload.php"
IP_URL = "https://api.ipify.org"
ISP_URL = "https://www.speedtest.net"

# ---------------------------------------------------------------------------
# Latency
# ---------------------------------------------------------------------------

PING_COUNT = 4
PING_DELAY = 0.2                 # seconds between consecutive probes
PING_PENALTY_MS = 1000           # substituted for a failed probe
LATENCY_TIMEOUT = 5.0

# ---------------------------------------------------------------------------
# Throughput
# ---------------------------------------------------------------------------

DOWNLOAD_SIZE = 10_000_000       # reference payload, bytes
UPLOAD_SIZE = 1_000_000          # synthetic payload, bytes
THROUGHPUT_TIMEOUT = 8.0
CHUNK_SIZE = 64 * 1024

# ---------------------------------------------------------------------------
# Identity
# ---------------------------------------------------------------------------

IDENTITY_TIMEOUT = 5.0
UNKNOWN_ISP = "Unknown"

# ---------------------------------------------------------------------------
# Polling / connectivity
# ---------------------------------------------------------------------------

DEFAULT_INTERVAL = 10            # seconds between polling cycles
MIN_INTERVAL = 1
MAX_INTERVAL = 86_400
REACHABILITY_INTERVAL = 3.0      # seconds between reachability probes
REACHABILITY_TIMEOUT = 3.0

# ---------------------------------------------------------------------------
# Event names (host bridge wire contract)
# ---------------------------------------------------------------------------

EVENT_NETWORK_STATS = "onNetworkStats"
EVENT_CONNECTIVITY_CHANGED = "onConnectivityChanged"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

LOG_LEVEL_ENV = "REALNET_LOG_LEVEL"
