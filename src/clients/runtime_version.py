"""AMP runtime version lookup.

Reads the runtime metadata document (`/rtv/metadata`) served by the AMP
CDN, or by a self-hosted ampUrlPrefix, and returns the current runtime
version (or the current long-term-stable version when `lts` is set).
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

import httpx

from core.amp_urls import AMP_CACHE_HOST, is_absolute_url, runtime_metadata_url
from core.errors import ExternalServiceError, ValidationError

logger = logging.getLogger(__name__)

USER_AGENT = "amp-runtime-parameters"


class RuntimeVersionClient:
    def __init__(self, *, timeout: float = 20.0, verify: bool = True) -> None:
        self._timeout = float(timeout)
        self._verify = bool(verify)

    async def current_version(
        self,
        *,
        amp_url_prefix: Optional[str] = None,
        lts: bool = False,
    ) -> str:
        """Return the current runtime version for `amp_url_prefix`.

        A self-hosted prefix is asked first; if it cannot answer, the
        canonical CDN is used. LTS metadata only exists on the canonical CDN.
        """
        prefix = (amp_url_prefix or "").strip()
        use_custom_host = bool(prefix) and not lts and prefix.rstrip("/") != AMP_CACHE_HOST

        if use_custom_host and is_absolute_url(prefix):
            try:
                return await self._fetch_version(runtime_metadata_url(prefix), lts=False)
            except (ExternalServiceError, ValidationError) as e:
                logger.debug("No runtime metadata at %s, using %s: %s", prefix, AMP_CACHE_HOST, e)

        return await self._fetch_version(runtime_metadata_url(AMP_CACHE_HOST), lts=lts)

    async def _fetch_version(self, url: str, *, lts: bool) -> str:
        try:
            async with self._create_client() as client:
                resp = await client.get(url)
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPStatusError as e:
            raise ExternalServiceError(f"Runtime metadata returned an error: {e}") from e
        except httpx.HTTPError as e:
            raise ExternalServiceError(f"Failed to fetch runtime metadata: {e}") from e
        except ValueError as e:
            raise ValidationError(f"Runtime metadata at {url} is not JSON") from e

        return _pick_version(data, lts=lts, url=url)

    def _create_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
            timeout=self._timeout,
            verify=self._verify,
            follow_redirects=True,
        )


def _pick_version(data: Any, *, lts: bool, url: str) -> str:
    field = "ltsRuntimeVersion" if lts else "ampRuntimeVersion"
    if not isinstance(data, Mapping):
        raise ValidationError(f"Runtime metadata at {url} is not an object")
    version = data.get(field)
    if not isinstance(version, str) or not version.strip():
        raise ValidationError(f"Runtime metadata at {url} has no {field}")
    return version.strip()
