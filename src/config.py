"""Configuration and environment helpers for the project.

Provides small helpers to read typed environment variables and exposes
project-level configuration constants used across the codebase (e.g.
AMP_CACHE_DIR, HTTP_VERIFY, HTTP_TIMEOUT, AMP_RUNTIME_MAX_AGE).
"""

from __future__ import annotations

import logging
import os
from pathlib import Path


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


PROJECT_ROOT = Path(__file__).resolve().parents[1]

# Cache
AMP_CACHE_DIR = Path(os.environ.get("AMP_CACHE_DIR", str(PROJECT_ROOT / ".cache"))).resolve()
AMP_CACHE_MAX_ITEMS = _env_int("AMP_CACHE_MAX_ITEMS", 256)

# Runtime version max-age window (seconds)
AMP_RUNTIME_MAX_AGE = _env_int("AMP_RUNTIME_MAX_AGE", 10 * 60)

# Network / HTTP
HTTP_VERIFY = _env_bool("HTTP_VERIFY", True)
HTTP_TIMEOUT = _env_float("HTTP_TIMEOUT", 20.0)

# Runtime defaults
AMP_LTS = _env_bool("AMP_LTS", False)
AMP_VERBOSE = _env_bool("AMP_VERBOSE", False)

# Logging
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").strip().upper() or "INFO"


def configure_logging(*, verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else getattr(logging, LOG_LEVEL, logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    )
