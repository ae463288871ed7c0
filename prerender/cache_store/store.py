import asyncio
import logging
import time
from abc import ABC, abstractmethod
from collections import OrderedDict
from typing import Optional, Tuple

from prerender.pipeline.models import CachedResponse
from prerender.vars import PRERENDER_CACHE_MAX_ENTRIES, PRERENDER_CACHE_STORE

logger = logging.getLogger("uvicorn.error")


class CacheStoreBase(ABC):
    @abstractmethod
    async def get(self, key: str) -> Optional[CachedResponse]:
        pass

    @abstractmethod
    async def set(self, key: str, value: CachedResponse, ttl: int) -> None:
        pass

    async def close(self) -> None:
        return None


def cache_store(name: str = PRERENDER_CACHE_STORE, **kwargs) -> CacheStoreBase:
    if name == "InMemoryCacheStore":
        return InMemoryCacheStore(**kwargs)
    if name == "RedisCacheStore":
        from prerender.cache_store.redis_store import RedisCacheStore

        return RedisCacheStore(**kwargs)
    raise ValueError(f"Unknown cache store type: {name}")


class InMemoryCacheStore(CacheStoreBase):
    """
    Process-local store with per-entry expiry.

    Expired entries are dropped lazily on read; once max_entries is reached
    the entry written longest ago is evicted.
    """

    def __init__(self, max_entries: int = PRERENDER_CACHE_MAX_ENTRIES, clock=time.monotonic):
        self.max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[str, Tuple[float, CachedResponse]]" = OrderedDict()
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> Optional[CachedResponse]:
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if expires_at <= self._clock():
                del self._entries[key]
                return None
            return value

    async def set(self, key: str, value: CachedResponse, ttl: int) -> None:
        if ttl <= 0:
            logger.debug(f"[Cache] Not storing {key}, ttl={ttl}")
            return
        async with self._lock:
            self._entries.pop(key, None)
            self._entries[key] = (self._clock() + ttl, value)
            while len(self._entries) > self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug(f"[Cache] Evicted {evicted}")

    def __len__(self) -> int:
        return len(self._entries)
