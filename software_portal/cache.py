"""
Key-value caches with time-to-live semantics.

Callers use ``fetch(key, ttl, compute)`` (or ``afetch`` with a coroutine
function): the cached value is returned while it is fresh, otherwise
``compute`` runs, its result is stored and returned. Recomputation runs
outside any lock, so a slow miss never blocks readers of other keys and two
racing misses on one key both compute (last write wins).

Values must be JSON-compatible so that every backend can hold them.
"""

import asyncio
import json
import logging
import os
import re
import tempfile
import threading
import time
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple, Union

from software_portal import config

logger = logging.getLogger(__name__)

MISSING = object()

TTL = Union[timedelta, float, int]


def _seconds(ttl: TTL) -> float:
    if isinstance(ttl, timedelta):
        return ttl.total_seconds()
    return float(ttl)


class BaseCache:

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock

    # backends implement these two
    def _load(self, key: str) -> Optional[Tuple[float, Any]]:
        raise NotImplementedError

    def _store(self, key: str, expires_at: float, value: Any) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError

    def clear(self) -> None:
        raise NotImplementedError

    def read(self, key: str, default: Any = MISSING) -> Any:
        """Fresh value for ``key`` or ``default`` (MISSING unless given)."""
        entry = self._load(key)
        if entry is None:
            return default
        expires_at, value = entry
        if self._clock() >= expires_at:
            return default
        return value

    def write(self, key: str, value: Any, ttl: TTL) -> None:
        self._store(key, self._clock() + _seconds(ttl), value)

    def fetch(self, key: str, ttl: TTL, compute: Callable[[], Any]) -> Any:
        value = self.read(key)
        if value is not MISSING:
            return value
        value = compute()
        self.write(key, value, ttl)
        return value

    async def afetch(self, key: str, ttl: TTL, compute: Callable[[], Awaitable[Any]]) -> Any:
        # backend I/O stays off the event loop
        value = await asyncio.to_thread(self.read, key)
        if value is not MISSING:
            return value
        value = await compute()
        await asyncio.to_thread(self.write, key, value, ttl)
        return value


class MemoryCache(BaseCache):
    """Process-local cache; one instance per process, shared by all components."""

    def __init__(self, clock: Callable[[], float] = time.time):
        super().__init__(clock)
        self._entries: Dict[str, Tuple[float, Any]] = {}
        self._lock = threading.Lock()

    def __len__(self):
        with self._lock:
            return len(self._entries)

    def _load(self, key):
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and self._clock() >= entry[0]:
                del self._entries[key]
                return None
            return entry

    def _store(self, key, expires_at, value):
        with self._lock:
            self._entries[key] = (expires_at, value)

    def delete(self, key):
        with self._lock:
            self._entries.pop(key, None)

    def clear(self):
        with self._lock:
            self._entries.clear()


class FileCache(BaseCache):
    """
    One JSON document per key under ``cache_dir``, e.g.
    ``appdata/leap:15.1`` -> ``<cache_dir>/appdata/leap_15.1.json``.

    Entries are replaced atomically so concurrent readers never see a
    half-written file. Unreadable entries count as misses.
    """

    _UNSAFE = re.compile(r"[^A-Za-z0-9._-]+")

    def __init__(self, cache_dir: str = config.CACHE_DIR, clock: Callable[[], float] = time.time):
        super().__init__(clock)
        self.cache_dir = cache_dir

    def path_for(self, key: str) -> str:
        parts = []
        for part in key.split("/"):
            part = self._UNSAFE.sub("_", part)
            # "." and ".." must never act as path segments
            if part.strip("."):
                parts.append(part)
            elif part:
                parts.append(part.replace(".", "_"))
        if not parts:
            raise ValueError(f"Invalid cache key: {key!r}")
        parts[-1] += ".json"
        return os.path.join(self.cache_dir, *parts)

    def _load(self, key):
        path = self.path_for(key)
        if not os.path.exists(path):
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return float(data["expiresAt"]), data["value"]
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning("Ignoring unreadable cache entry %s: %s", path, e)
            return None

    def _store(self, key, expires_at, value):
        path = self.path_for(key)
        directory = os.path.dirname(path)
        os.makedirs(directory, exist_ok=True)
        out = {
            "key": key,
            "lastUpdated": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "expiresAt": expires_at,
            "value": value,
        }
        fd, tmp_path = tempfile.mkstemp(dir=directory, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(out, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def delete(self, key):
        path = self.path_for(key)
        if os.path.exists(path):
            os.unlink(path)

    def clear(self):
        if not os.path.isdir(self.cache_dir):
            return
        for root, _dirs, files in os.walk(self.cache_dir):
            for name in files:
                if name.endswith(".json"):
                    os.unlink(os.path.join(root, name))
