"""Runtime version resolution with stale-while-revalidate caching.

Versions are cached per (ampUrlPrefix, lts) partition with a max-age stamp.
A fresh record is returned as is. A stale record is still returned, and a
background task refreshes it for later callers. Only a cold cache waits on
the network.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Set

from config import AMP_RUNTIME_MAX_AGE
from core.errors import ValidationError
from core.interfaces import Cache, RuntimeVersionSource
from core.max_age import MaxAge
from core.models import VersionCacheRecord, version_cache_key

logger = logging.getLogger(__name__)


class VersionResolver:
    def __init__(
        self,
        *,
        cache: Cache,
        runtime_version: RuntimeVersionSource,
        max_age_seconds: float = AMP_RUNTIME_MAX_AGE,
        log: Optional[logging.Logger] = None,
        background_tasks: Optional[Set[asyncio.Task]] = None,
    ) -> None:
        self._cache = cache
        self._runtime_version = runtime_version
        self._max_age_seconds = float(max_age_seconds)
        self._log = log or logger
        # Strong references keep fire-and-forget tasks alive until they finish
        self._refreshes: Set[asyncio.Task] = set() if background_tasks is None else background_tasks

    async def resolve_version(self, amp_url_prefix: Optional[str], lts: bool) -> str:
        key = version_cache_key(amp_url_prefix, lts)
        record = await self._load(key)

        if record is None:
            record = await self._fetch_and_store(key, amp_url_prefix, lts)
        elif record.is_stale():
            # Return the cached version, but update the cache in the background
            self._spawn_refresh(key, amp_url_prefix, lts)

        return record.version

    async def drain(self) -> None:
        """Wait for in-flight background refreshes (shutdown and tests)."""
        while self._refreshes:
            await asyncio.gather(*list(self._refreshes), return_exceptions=True)

    @property
    def pending_refreshes(self) -> int:
        return len(self._refreshes)

    async def _load(self, key: str) -> Optional[VersionCacheRecord]:
        data = await self._cache.get(key)
        if data is None:
            return None
        try:
            return VersionCacheRecord.from_json(data)
        except ValidationError as e:
            self._log.debug("Discarding unreadable version record %s: %s", key, e)
            return None

    async def _fetch_and_store(
        self, key: str, amp_url_prefix: Optional[str], lts: bool
    ) -> VersionCacheRecord:
        version = await self._runtime_version.current_version(amp_url_prefix=amp_url_prefix, lts=lts)
        record = VersionCacheRecord(version=version, max_age=MaxAge.create(self._max_age_seconds))
        self._log.debug("set version %s %s", key, record.version)
        await self._cache.set(key, record.to_json())
        return record

    def _spawn_refresh(self, key: str, amp_url_prefix: Optional[str], lts: bool) -> None:
        task = asyncio.create_task(self._refresh(key, amp_url_prefix, lts))
        self._refreshes.add(task)
        task.add_done_callback(self._refreshes.discard)

    async def _refresh(self, key: str, amp_url_prefix: Optional[str], lts: bool) -> None:
        try:
            await self._fetch_and_store(key, amp_url_prefix, lts)
        except Exception as e:  # the caller already has the stale version
            self._log.warning("Background refresh of AMP runtime version failed (%s): %s", key, e)
