"""Central configuration for the route ETA monitor.

All values are constants imported by the rest of the package. Adjust as needed
for your environment. Secrets are read from environment variables (optionally
via a local `.env`).
"""

from __future__ import annotations

import os

from dotenv import load_dotenv


def _env_float(key: str, default: float) -> float:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _env_int(key: str, default: int) -> int:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_bool(key: str, default: bool) -> bool:
    value = os.getenv(key)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return default


def _env_list(key: str, default: str) -> list[str]:
    raw = os.getenv(key, default)
    return [item.strip().lower() for item in raw.split(",") if item.strip()]


# Load .env from the current directory or any parent folder.
load_dotenv()


# ---------------------------------------------------------------------------
# Input/Output
# ---------------------------------------------------------------------------
# Paths can be absolute or relative.
ROUTES_FILE = os.getenv("ROUTES_FILE", "routes.json")

# One <route_id>.json file per route is written here.
DATA_DIR = os.getenv("DATA_DIR", "data")

# Default destination for HTML maps produced by the divergence map tool.
MAP_OUTPUT_DIR = os.getenv("MAP_OUTPUT_DIR", "maps")


# ---------------------------------------------------------------------------
# Polling
# ---------------------------------------------------------------------------
# Interval between poll cycles. One cycle also runs immediately at startup.
POLL_INTERVAL_MS = _env_int("POLL_INTERVAL_MS", 900_000)

# Providers queried on every cycle, in record order.
PROVIDER_ORDER = _env_list("PROVIDER_ORDER", "google,tomtom,ola")

# Provider whose geometry the others are compared against. Empty selects the
# first entry of PROVIDER_ORDER.
REFERENCE_PROVIDER = os.getenv("REFERENCE_PROVIDER", "").strip().lower() or None


# ---------------------------------------------------------------------------
# Provider settings
# ---------------------------------------------------------------------------
GOOGLE_MAPS_API_KEY = os.getenv("GOOGLE_MAPS_API_KEY", "")
TOMTOM_API_KEY = os.getenv("TOMTOM_API_KEY", "")
OLA_MAPS_API_KEY = os.getenv("OLA_MAPS_API_KEY", "")

GOOGLE_DIRECTIONS_URL = os.getenv(
    "GOOGLE_DIRECTIONS_URL", "https://maps.googleapis.com/maps/api/directions/json"
)
TOMTOM_ROUTING_URL = os.getenv(
    "TOMTOM_ROUTING_URL", "https://api.tomtom.com/routing/1/calculateRoute"
)
OLA_DIRECTIONS_URL = os.getenv(
    "OLA_DIRECTIONS_URL", "https://api.olamaps.io/routing/v1/directions"
)

# Request timeout in seconds, applied to every provider call.
REQUEST_TIMEOUT = _env_float("REQUEST_TIMEOUT", 10.0)

# HTTP session pool sizes for concurrent requests.
HTTP_POOL_CONNECTIONS = 10
HTTP_POOL_MAXSIZE = 10

# Transport-level retries for 5xx responses. Kept small so a retried call
# still finishes well inside one poll interval.
HTTP_MAX_RETRIES = _env_int("HTTP_MAX_RETRIES", 2)
HTTP_BACKOFF_FACTOR = _env_float("HTTP_BACKOFF_FACTOR", 0.5)

# Sent on every provider call; the adapter appends its provider id.
HTTP_USER_AGENT = os.getenv("HTTP_USER_AGENT", "route-eta-monitor/0.1")


# ---------------------------------------------------------------------------
# Route divergence
# ---------------------------------------------------------------------------
# Points sampled from the candidate path.
DIVERGENCE_SAMPLE_COUNT = _env_int("DIVERGENCE_SAMPLE_COUNT", 12)

# A candidate counts as a different route when the average sampled deviation
# exceeds the first threshold or the largest one exceeds the second.
DIVERGENCE_AVG_THRESHOLD_M = _env_float("DIVERGENCE_AVG_THRESHOLD_M", 500.0)
DIVERGENCE_MAX_THRESHOLD_M = _env_float("DIVERGENCE_MAX_THRESHOLD_M", 1000.0)

# Log a warning for every candidate flagged as a different route.
DIVERGENCE_WARN_ENABLED = _env_bool("DIVERGENCE_WARN_ENABLED", True)


# ---------------------------------------------------------------------------
# HTTP API
# ---------------------------------------------------------------------------
SERVER_HOST = os.getenv("SERVER_HOST", "127.0.0.1")
PORT = _env_int("PORT", 3000)

# Records returned by /latest when ?n= is missing or invalid.
LATEST_DEFAULT_N = _env_int("LATEST_DEFAULT_N", 100)
