from unittest.mock import AsyncMock

import pytest

from prerender.cache_store.redis_store import (
    RedisCacheStore,
    deserialize_response,
    serialize_response,
)
from prerender.cache_store.store import cache_store
from prerender.pipeline.models import CachedResponse


@pytest.fixture
def redis():
    client = AsyncMock()
    client.get = AsyncMock(return_value=None)
    client.set = AsyncMock()
    client.aclose = AsyncMock()
    return client


def test_serialization_preserves_headers_order_and_bytes():
    value = CachedResponse(
        200,
        (("X-Renderer", "prerender"), ("Content-Type", "text/html"), ("X-Dup", "1"), ("X-Dup", "2")),
        "<html>ü</html>".encode("utf-8") + b"\x00\xff",
    )
    assert deserialize_response(serialize_response(value)) == value


def test_factory_builds_redis_store():
    store = cache_store("RedisCacheStore", redis_url="redis://cache:6379/1", namespace="ns")
    assert isinstance(store, RedisCacheStore)
    assert store.redis_url == "redis://cache:6379/1"


@pytest.mark.asyncio
async def test_set_uses_namespaced_key_and_expiry(redis):
    store = RedisCacheStore(namespace="pr", redis=redis)
    value = CachedResponse(200, (("X-Renderer", "prerender"),), b"<html/>")

    await store.set("/foo?x=1", value, 60)

    redis.set.assert_awaited_once_with("pr:/foo?x=1", serialize_response(value), ex=60)


@pytest.mark.asyncio
async def test_get_round_trips_stored_value(redis):
    store = RedisCacheStore(namespace="pr", redis=redis)
    value = CachedResponse(200, (("X-Renderer", "prerender"),), b"<html/>")
    redis.get.return_value = serialize_response(value)

    assert await store.get("/foo") == value
    redis.get.assert_awaited_once_with("pr:/foo")


@pytest.mark.asyncio
async def test_get_missing_is_none(redis):
    assert await RedisCacheStore(redis=redis).get("/missing") is None


@pytest.mark.asyncio
async def test_non_positive_ttl_is_not_stored(redis):
    store = RedisCacheStore(redis=redis)
    await store.set("/a", CachedResponse(200), 0)
    redis.set.assert_not_awaited()


@pytest.mark.asyncio
async def test_errors_propagate(redis):
    redis.get.side_effect = ConnectionError("refused")
    with pytest.raises(ConnectionError):
        await RedisCacheStore(redis=redis).get("/a")


@pytest.mark.asyncio
async def test_close(redis):
    store = RedisCacheStore(redis=redis)
    await store.close()
    redis.aclose.assert_awaited_once()


@pytest.mark.asyncio
async def test_huge_ttl_is_clamped(redis):
    store = RedisCacheStore(namespace="pr", redis=redis, max_ttl=86400)
    value = CachedResponse(200, (("X-Renderer", "prerender"),), b"<html/>")

    await store.set("/big", value, 99999999999999999999)

    redis.set.assert_awaited_once_with("pr:/big", serialize_response(value), ex=86400)


@pytest.mark.asyncio
async def test_ttl_within_limit_is_unchanged(redis):
    store = RedisCacheStore(redis=redis, max_ttl=86400)
    await store.set("/a", CachedResponse(200), 86400)
    assert redis.set.await_args.kwargs["ex"] == 86400
