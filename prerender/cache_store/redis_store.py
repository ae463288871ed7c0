"""
Redis-backed cache store, shared between proxy processes.

Entries are stored as a JSON envelope (status, header pairs, base64 body)
under "{namespace}:{key}" with a Redis expiry equal to the entry TTL.
"""

import asyncio
import base64
import json
import logging
from typing import Optional

from redis.asyncio import ConnectionPool, Redis

from prerender.cache_store.store import CacheStoreBase
from prerender.pipeline.models import CachedResponse
from prerender.vars import PRERENDER_CACHE_MAX_TTL, PRERENDER_CACHE_NAMESPACE, REDIS_URL

logger = logging.getLogger("uvicorn.error")


def serialize_response(value: CachedResponse) -> bytes:
    return json.dumps(
        {
            "status": value.status_code,
            "headers": [list(pair) for pair in value.headers],
            "body": base64.b64encode(value.body).decode("ascii"),
        },
        separators=(",", ":"),
    ).encode("utf-8")


def deserialize_response(data: bytes) -> CachedResponse:
    payload = json.loads(data)
    return CachedResponse(
        status_code=payload["status"],
        headers=tuple((name, value) for name, value in payload["headers"]),
        body=base64.b64decode(payload["body"]),
    )


class RedisCacheStore(CacheStoreBase):
    def __init__(
        self,
        redis_url: str = REDIS_URL,
        namespace: str = PRERENDER_CACHE_NAMESPACE,
        redis: Optional[Redis] = None,
        max_ttl: int = PRERENDER_CACHE_MAX_TTL,
    ):
        self.redis_url = redis_url
        self.namespace = namespace
        self.max_ttl = max_ttl
        self._pool: Optional[ConnectionPool] = None
        self._redis = redis
        self._lock = asyncio.Lock()

    async def _client(self) -> Redis:
        if self._redis is not None:
            return self._redis
        async with self._lock:
            if self._redis is None:
                self._pool = ConnectionPool.from_url(
                    self.redis_url, decode_responses=False
                )
                self._redis = Redis(connection_pool=self._pool)
                logger.info(f"[Cache] Redis cache store connected: {self.redis_url}")
        return self._redis

    def _key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    async def get(self, key: str) -> Optional[CachedResponse]:
        redis = await self._client()
        data = await redis.get(self._key(key))
        if data is None:
            return None
        return deserialize_response(data)

    async def set(self, key: str, value: CachedResponse, ttl: int) -> None:
        # Redis rejects a non-positive expiry
        if ttl <= 0:
            logger.debug(f"[Cache] Not storing {key}, ttl={ttl}")
            return
        if ttl > self.max_ttl:
            logger.debug(f"[Cache] Clamping ttl={ttl} for {key} to {self.max_ttl}")
            ttl = self.max_ttl
        redis = await self._client()
        await redis.set(self._key(key), serialize_response(value), ex=ttl)

    async def close(self) -> None:
        if self._redis is not None:
            await self._redis.aclose()
        if self._pool is not None:
            await self._pool.disconnect()
        self._redis = None
        self._pool = None
        logger.info("[Cache] Redis cache store closed")
