"""URL helpers for AMP runtime resources.

Builds version-qualified runtime URLs on the canonical CDN host (or a
custom ampUrlPrefix) and checks whether a prefix is an absolute URL.
"""

from __future__ import annotations

from typing import Optional

import httpx

AMP_CACHE_HOST = "https://cdn.ampproject.org"
AMP_RUNTIME_CSS_PATH = "/v0.css"
AMP_RUNTIME_METADATA_PATH = "/rtv/metadata"
AMP_VALIDATOR_RULES_URL = f"{AMP_CACHE_HOST}/v0/validator.json"


def is_absolute_url(url: str) -> bool:
    """Return True when `url` parses as an absolute URL (scheme + host)."""
    try:
        parsed = httpx.URL((url or "").strip())
    except (httpx.InvalidURL, TypeError):
        return False
    return parsed.is_absolute_url and bool(parsed.host)


def append_runtime_version(prefix: str, version: Optional[str]) -> str:
    # https://cdn.ampproject.org + 012004030010070 -> https://cdn.ampproject.org/rtv/012004030010070
    base = (prefix or "").rstrip("/")
    if not version:
        return base
    return f"{base}/rtv/{version}"


def runtime_css_url(prefix: Optional[str], version: Optional[str]) -> str:
    return append_runtime_version(prefix or AMP_CACHE_HOST, version) + AMP_RUNTIME_CSS_PATH


def runtime_metadata_url(prefix: Optional[str]) -> str:
    return (prefix or AMP_CACHE_HOST).rstrip("/") + AMP_RUNTIME_METADATA_PATH
