"""Configuration and environment helpers for the project.

Provides small helpers to read typed environment variables and exposes
project-level configuration constants used across the codebase (OpenAQ
access, the settings endpoint, cache TTLs and sizes, the durable cache file
and the sweep interval).
"""

from __future__ import annotations

import os


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return float(raw.strip())
    except ValueError:
        return default


def _env_str(name: str, default: str = "") -> str:
    return os.environ.get(name, default).strip()


# Network / HTTP
HTTP_VERIFY = _env_bool("HTTP_VERIFY", True)

# OpenAQ
OPENAQ_BASE_URL = _env_str("OPENAQ_BASE_URL", "https://api.openaq.org/v2")
OPENAQ_API_KEY = _env_str("OPENAQ_API_KEY")
OPENAQ_TIMEOUT = _env_float("OPENAQ_TIMEOUT", 10.0)

# Remote settings endpoint (blank -> in-process backend)
SETTINGS_API_URL = _env_str("SETTINGS_API_URL")
SETTINGS_API_TOKEN = _env_str("SETTINGS_API_TOKEN")
SETTINGS_TIMEOUT = _env_float("SETTINGS_TIMEOUT", 10.0)

# Memory cache roles
AIR_QUALITY_TTL = _env_float("AIR_QUALITY_TTL", 10 * 60.0)
AIR_QUALITY_MAX_SIZE = _env_int("AIR_QUALITY_MAX_SIZE", 50)
MEASUREMENTS_TTL = _env_float("MEASUREMENTS_TTL", 5 * 60.0)
MEASUREMENTS_MAX_SIZE = _env_int("MEASUREMENTS_MAX_SIZE", 100)
USER_SETTINGS_TTL = _env_float("USER_SETTINGS_TTL", 30 * 60.0)
USER_SETTINGS_MAX_SIZE = _env_int("USER_SETTINGS_MAX_SIZE", 20)

# Durable cache (blank path disables persistence)
DURABLE_CACHE_PATH = _env_str("DURABLE_CACHE_PATH", ".cache/eco-tracker-cache.json")
DURABLE_CACHE_PREFIX = _env_str("DURABLE_CACHE_PREFIX", "eco-tracker-cache")
DURABLE_CACHE_MAX_BYTES = _env_int("DURABLE_CACHE_MAX_BYTES", 5 * 1024 * 1024)

# Background sweep of expired memory entries
CACHE_SWEEP_INTERVAL = _env_float("CACHE_SWEEP_INTERVAL", 5 * 60.0)

# Logging
LOG_LEVEL = _env_str("LOG_LEVEL", "INFO").upper()
