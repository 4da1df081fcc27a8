#!/usr/bin/env python3
"""Utility helpers for reading environment-driven configuration values."""

from __future__ import annotations

import logging
import os
from typing import Optional

logger = logging.getLogger(__name__)

_DEFAULT_API_BASE_URL = "https://consultant.dev/api"
_DEFAULT_LOCATION_DATA_URL = "https://consultant.dev/data/location-coordinates.json"
_DEFAULT_SITE_URL = "https://consultant.dev"
_DEFAULT_KEEPALIVE_SECONDS = 30.0
_DEFAULT_LOG_LEVEL = "INFO"
_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


def _parse_positive_float(
    raw_value: str | None, default: Optional[float], env_name: str
) -> Optional[float]:
    """Return a positive float from an environment variable or the provided default."""
    if raw_value is None or not raw_value.strip():
        return default

    try:
        parsed = float(raw_value)
    except (TypeError, ValueError):
        logger.warning("Invalid %s value %r; using default %s", env_name, raw_value, default)
        return default

    if parsed <= 0:
        logger.warning("%s must be greater than zero; using default %s", env_name, default)
        return default

    return parsed


def _read_url(env_name: str, default: str) -> str:
    value = os.environ.get(env_name, "").strip()
    return value.rstrip("/") if value else default


def get_api_base_url() -> str:
    """Return the base URL of the job-search API (no trailing slash)."""
    return _read_url("JOBS_API_BASE_URL", _DEFAULT_API_BASE_URL)


def get_location_data_url() -> str:
    """Return the URL of the location coordinate reference file."""
    return _read_url("LOCATION_DATA_URL", _DEFAULT_LOCATION_DATA_URL)


def get_site_url() -> str:
    """Return the public site used to build fallback posting links."""
    return _read_url("PUBLIC_SITE_URL", _DEFAULT_SITE_URL)


def get_request_timeout() -> Optional[float]:
    """Return the upstream HTTP timeout in seconds, or ``None`` to wait indefinitely."""
    return _parse_positive_float(os.environ.get("REQUEST_TIMEOUT"), None, "REQUEST_TIMEOUT")


def get_keepalive_interval() -> float:
    """Return the number of seconds between SSE keep-alive comments."""
    return _parse_positive_float(
        os.environ.get("SSE_KEEPALIVE_SECONDS"),
        _DEFAULT_KEEPALIVE_SECONDS,
        "SSE_KEEPALIVE_SECONDS",
    )


def get_log_level() -> str:
    """Return the upper-cased ``LOG_LEVEL`` name, falling back to ``INFO``."""
    raw_value = os.environ.get("LOG_LEVEL", "").strip()
    if not raw_value:
        return _DEFAULT_LOG_LEVEL

    level = raw_value.upper()
    if level not in _LOG_LEVELS:
        logger.warning("Invalid LOG_LEVEL value %r; using default %s", raw_value, _DEFAULT_LOG_LEVEL)
        return _DEFAULT_LOG_LEVEL
    return level
