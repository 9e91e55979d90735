"""
Configuration — loads settings from environment / .env file.
"""

from __future__ import annotations

import logging
import os

from dotenv import load_dotenv

load_dotenv()

log = logging.getLogger(__name__)


def _env_int(name: str, default: int, minimum: int = 1) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        log.warning("Invalid %s=%r, using default %d", name, raw, default)
        return default
    if value < minimum:
        log.warning("%s=%d below minimum %d, using default %d", name, value, minimum, default)
        return default
    return value


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return max(0.0, float(raw))
    except ValueError:
        log.warning("Invalid %s=%r, using default %s", name, raw, default)
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


# Monitor
MONITOR_MAX_RECORDS = _env_int("MONITOR_MAX_RECORDS", 100)
MONITOR_DEFAULT_AGENT = os.getenv("MONITOR_DEFAULT_AGENT", "System") or "System"
MONITOR_SEED_AGENTS = _env_bool("MONITOR_SEED_AGENTS", True)

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
LOG_DATEFMT = "%H:%M:%S"

# Replay
REPLAY_DELAY_SEC = _env_float("REPLAY_DELAY_SEC", 0.0)
