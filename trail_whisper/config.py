"""Central configuration for Trail Whisper.

All values are constants imported by the rest of the package. Adjust as needed
for your environment. Secrets are read from environment variables (optionally
via a local `.env`).
"""

from __future__ import annotations

import importlib
import os


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


# Load .env variables when python-dotenv is available.
_load_dotenv = None
try:
    _dotenv_mod = importlib.import_module("dotenv")
    _load_dotenv = getattr(_dotenv_mod, "load_dotenv", None)
except ImportError:
    _load_dotenv = None

if callable(_load_dotenv):
    # Load .env from the current directory or any parent folder.
    _load_dotenv()


# ---------------------------------------------------------------------------
# Activity store (Supabase / PostgREST)
# ---------------------------------------------------------------------------
# Project URL, e.g. https://abc123.supabase.co. Leave empty to run offline.
SUPABASE_URL = os.getenv("SUPABASE_URL", "").rstrip("/")

# Public anon key sent as the ``apikey`` header. Do not hardcode secrets.
SUPABASE_ANON_KEY = os.getenv("SUPABASE_ANON_KEY", "")

# User access token (JWT) used for row level security. Falls back to the anon
# key when unset.
SUPABASE_ACCESS_TOKEN = os.getenv("SUPABASE_ACCESS_TOKEN", "")

# Owner recorded on uploaded activities.
SUPABASE_USER_ID = os.getenv("SUPABASE_USER_ID", "")

# Table and RPC names.
ACTIVITIES_TABLE = os.getenv("ACTIVITIES_TABLE", "activities")
VISITS_NEAR_RPC = os.getenv("VISITS_NEAR_RPC", "find_visits_near")

# HTTP session pool sizes for concurrent requests.
HTTP_POOL_CONNECTIONS = 10
HTTP_POOL_MAXSIZE = 10

# Request timeout in seconds.
REQUEST_TIMEOUT = _env_int("REQUEST_TIMEOUT", 15)


# ---------------------------------------------------------------------------
# Proximity settings
# ---------------------------------------------------------------------------
# Radius (metres) used when asking "have I been here before?".
VISITS_DEFAULT_RADIUS_M = _env_float("VISITS_DEFAULT_RADIUS_M", 400.0)

# Radius (metres) of the "near me" filter on the activity history.
HISTORY_NEARBY_RADIUS_M = _env_float("HISTORY_NEARBY_RADIUS_M", 2000.0)

# Number of visits kept in a summary's recent list.
RECENT_VISITS_LIMIT = _env_int("RECENT_VISITS_LIMIT", 5)


# ---------------------------------------------------------------------------
# Performance tuning
# ---------------------------------------------------------------------------
# Threads used when decoding a batch of FIT files.
DECODE_MAX_WORKERS = _env_int("DECODE_MAX_WORKERS", 4)

# Decoded track cache used by the history filter.
TRACK_CACHE_SIZE = _env_int("TRACK_CACHE_SIZE", 256)
TRACK_CACHE_TTL_SECONDS = _env_int("TRACK_CACHE_TTL_SECONDS", 600)

# Keep parsing FIT files with bad CRCs or unknown fields. fitdecode reports
# these through the warnings module; the CLI captures them into logging.
FIT_LENIENT_PARSING = _env_bool("FIT_LENIENT_PARSING", True)


# ---------------------------------------------------------------------------
# Location
# ---------------------------------------------------------------------------
# JSON file holding the manually entered location override.
MANUAL_LOCATION_FILE = os.getenv(
    "MANUAL_LOCATION_FILE",
    os.path.join(os.path.expanduser("~"), ".trail-whisper", "manual-location.json"),
)
