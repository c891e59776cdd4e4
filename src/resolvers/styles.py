"""Runtime CSS resolution.

Builds the version-qualified `v0.css` URL, serves it from the cache when
possible (CSS for a given URL never changes) and falls back once to the
canonical CDN with the current runtime version when a custom prefix or
version cannot be downloaded.
"""

from __future__ import annotations

import logging
from typing import Optional

from core.amp_urls import AMP_CACHE_HOST, is_absolute_url, runtime_css_url
from core.interfaces import Cache, Fetcher, RuntimeVersionSource

logger = logging.getLogger(__name__)


class StyleResolver:
    def __init__(
        self,
        *,
        cache: Cache,
        fetcher: Fetcher,
        runtime_version: RuntimeVersionSource,
        log: Optional[logging.Logger] = None,
    ) -> None:
        self._cache = cache
        self._fetcher = fetcher
        self._runtime_version = runtime_version
        self._log = log or logger

    async def resolve_styles(
        self,
        amp_url_prefix: Optional[str],
        amp_runtime_version: Optional[str],
        *,
        allow_fallback: bool = True,
    ) -> str:
        """Return the runtime CSS, or "" when nothing could be downloaded."""
        if amp_url_prefix and not is_absolute_url(amp_url_prefix):
            self._log.warning(
                "AMP runtime styles cannot be fetched from relative ampUrlPrefix, "
                "please use the 'ampRuntimeStyles' parameter to provide the correct runtime style."
            )
            # Gracefully fall back to the latest runtime version
            amp_url_prefix = AMP_CACHE_HOST
            amp_runtime_version = amp_runtime_version or await self._runtime_version.current_version()

        url = runtime_css_url(amp_url_prefix, amp_runtime_version)
        styles = await self.download(url)
        if styles is not None:
            return styles

        self._log.error("Could not download %s", url)
        if allow_fallback and (amp_url_prefix or amp_runtime_version):
            # Try the latest runtime CSS from the canonical CDN instead, once
            latest = await self._runtime_version.current_version()
            return await self.resolve_styles(AMP_CACHE_HOST, latest, allow_fallback=False)
        return ""

    async def download(self, url: str) -> Optional[str]:
        """Return cached or freshly downloaded CSS; None on a non-success status."""
        styles = await self._cache.get(url)
        if isinstance(styles, str):
            return styles

        resp = await self._fetcher.fetch(url)
        if not resp.is_success:
            return None
        styles = resp.text
        await self._cache.set(url, styles)
        return styles
