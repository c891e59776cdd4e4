"""Key/value caches for fetched runtime data.

FileSystemCache persists JSON-serialisable values under a base directory
(one file per key, named by the key's SHA-256) and keeps a small in-memory
LRU layer in front of the disk. InMemoryCache offers the same contract
without persistence.

Entries never expire at this layer; records that need expiry carry their
own MaxAge stamp.
"""

from __future__ import annotations

import asyncio
import hashlib
import json
import logging
import tempfile
from collections import OrderedDict
from pathlib import Path
from typing import Any, Optional, Union

logger = logging.getLogger(__name__)


class InMemoryCache:
    # Process-local cache with simple LRU eviction using OrderedDict
    def __init__(self, *, max_items: int = 256) -> None:
        self._maxsize = max(1, int(max_items))
        self._store: "OrderedDict[str, Any]" = OrderedDict()

    async def get(self, key: str) -> Optional[Any]:
        return self._get_local(key)

    async def set(self, key: str, value: Any) -> None:
        self._set_local(key, value)

    async def delete(self, key: str) -> None:
        self._store.pop(key, None)

    async def clear(self) -> None:
        self._store.clear()

    def __len__(self) -> int:
        return len(self._store)

    def _get_local(self, key: str) -> Optional[Any]:
        if key not in self._store:
            return None
        # Move to end to mark as recently used
        self._store.move_to_end(key, last=True)
        return self._store[key]

    def _set_local(self, key: str, value: Any) -> None:
        self._store[key] = value
        self._store.move_to_end(key, last=True)

        # Evict oldest entries while over maxsize
        while len(self._store) > self._maxsize:
            self._store.popitem(last=False)


class FileSystemCache(InMemoryCache):
    """Persistent JSON cache rooted at `base_dir`.

    Read failures (missing file, unreadable file, invalid JSON) count as a
    miss. Write failures are logged and otherwise ignored so a read-only or
    full disk never breaks resolution.
    """

    def __init__(self, *, base_dir: Union[str, Path], max_items: int = 256) -> None:
        super().__init__(max_items=max_items)
        self._base_dir = Path(base_dir)
        self._base_dir.mkdir(parents=True, exist_ok=True)

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    async def get(self, key: str) -> Optional[Any]:
        value = self._get_local(key)
        if value is not None:
            return value

        value = await asyncio.to_thread(self._read, key)
        if value is not None:
            self._set_local(key, value)
        return value

    async def set(self, key: str, value: Any) -> None:
        self._set_local(key, value)
        await asyncio.to_thread(self._write, key, value)

    async def delete(self, key: str) -> None:
        await super().delete(key)
        self._path_for(key).unlink(missing_ok=True)

    async def clear(self) -> None:
        await super().clear()
        for path in self._base_dir.glob("*.json"):
            path.unlink(missing_ok=True)

    def _path_for(self, key: str) -> Path:
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
        return self._base_dir / f"{digest}.json"

    def _read(self, key: str) -> Optional[Any]:
        path = self._path_for(key)
        try:
            raw = path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.debug("Cache read failed for %s: %s", key, e)
            return None

        # UnicodeDecodeError and JSONDecodeError are both ValueError
        try:
            return json.loads(raw.decode("utf-8"))
        except ValueError as e:
            logger.debug("Ignoring corrupt cache file %s: %s", path, e)
            return None

    def _write(self, key: str, value: Any) -> None:
        path = self._path_for(key)
        try:
            payload = json.dumps(value)
        except (TypeError, ValueError) as e:
            logger.warning("Could not serialise cache entry %s: %s", key, e)
            return

        # Each writer gets its own temp file, then renames it over the entry
        tmp: Optional[Path] = None
        try:
            with tempfile.NamedTemporaryFile(
                "w", encoding="utf-8", dir=self._base_dir, suffix=".tmp", delete=False
            ) as fh:
                tmp = Path(fh.name)
                fh.write(payload)
            tmp.replace(path)
        except OSError as e:
            logger.warning("Could not write cache entry %s: %s", key, e)
            if tmp is not None:
                tmp.unlink(missing_ok=True)
