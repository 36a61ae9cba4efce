"""
Tests for the Redis cache store against an in-process Redis server.
"""

from datetime import timedelta

import fakeredis
import pytest

from catalog_cache.cache import TypedCache
from catalog_cache.entities import CacheEntryPolicy, ProductsByCategory
from catalog_cache.exceptions import DeserializationError
from catalog_cache.repositories import RedisCacheRepository
from catalog_cache.services import ProductsByCategoryCacheService

Snapshot = list[ProductsByCategory]

KEY = "test:products_by_category"
BOOKS = [ProductsByCategory(category_name="Books", product_count=3)]


@pytest.fixture
async def redis_client():
    """Create a client on a fresh, private fake server."""
    client = fakeredis.FakeAsyncRedis(server=fakeredis.FakeServer())
    yield client
    await client.aclose()


@pytest.fixture
def redis_store(redis_client, clock):
    """Create a Redis repository driven by the fake clock."""
    return RedisCacheRepository(redis_client=redis_client, clock=clock)


@pytest.fixture
def redis_cache(redis_store, policy):
    """Create a typed cache over the Redis repository."""
    return TypedCache(store=redis_store, default_policy=policy)


@pytest.fixture
def redis_service(redis_cache, source, policy):
    """Create a fail-fast statistics service backed by Redis."""
    return ProductsByCategoryCacheService(
        cache=redis_cache,
        source=source,
        policy=policy,
        rebuild_on_miss=False,
        key=KEY,
    )


async def test_round_trip_and_hash_layout(redis_cache, redis_client):
    """A written snapshot reads back and is stored as a data/absexp/sldexp hash."""
    await redis_cache.set(KEY, BOOKS, type_=Snapshot)

    assert await redis_cache.try_get(KEY, Snapshot) == (BOOKS, True)

    stored = await redis_client.hgetall(KEY)
    assert set(stored) == {b"data", b"absexp", b"sldexp"}
    assert stored[b"absexp"] == b"1060000"
    assert stored[b"sldexp"] == b"30000"
    assert 29_000 < await redis_client.pttl(KEY) <= 30_000


async def test_zero_absolute_expiration_is_absent(redis_cache, redis_client):
    """An entry with a zero absolute window is gone on the next read."""
    policy = CacheEntryPolicy(sliding_expiration=None, absolute_expiration=timedelta(0))
    await redis_cache.set(KEY, BOOKS, policy, type_=Snapshot)

    assert await redis_cache.try_get(KEY, Snapshot) == (None, False)
    assert await redis_client.exists(KEY) == 0


async def test_read_resets_sliding_window_up_to_absolute_deadline(
    redis_cache, redis_client, clock
):
    """Reads push the TTL forward, but never past the absolute deadline."""
    await redis_cache.set(KEY, BOOKS, type_=Snapshot)

    clock.advance(20)
    assert (await redis_cache.try_get(KEY, Snapshot))[1] is True
    assert 29_000 < await redis_client.pttl(KEY) <= 30_000

    clock.advance(25)  # 15s before the absolute deadline
    assert (await redis_cache.try_get(KEY, Snapshot))[1] is True
    assert 14_000 < await redis_client.pttl(KEY) <= 15_000

    clock.advance(16)
    assert await redis_cache.try_get(KEY, Snapshot) == (None, False)
    assert await redis_client.exists(KEY) == 0


async def test_entry_without_expiry_stays_persistent(redis_cache, redis_client):
    """A policy with no windows never sets or refreshes a TTL."""
    policy = CacheEntryPolicy(sliding_expiration=None, absolute_expiration=None)
    await redis_cache.set(KEY, BOOKS, policy, type_=Snapshot)

    assert await redis_cache.try_get(KEY, Snapshot) == (BOOKS, True)
    assert await redis_client.pttl(KEY) == -1


async def test_remove(redis_cache):
    """Removing reports whether the entry existed."""
    await redis_cache.set(KEY, BOOKS, type_=Snapshot)

    assert await redis_cache.remove(KEY) is True
    assert await redis_cache.remove(KEY) is False


async def test_corrupt_data_field(redis_service, redis_client):
    """Undecodable bytes in the payload field are a DeserializationError."""
    await redis_service.rebuild_cache()
    await redis_client.hset(KEY, "data", b"\xde\xad\xbe\xef")

    with pytest.raises(DeserializationError):
        await redis_service.get_snapshot()


async def test_key_overwritten_with_plain_string(redis_service, redis_client):
    """A key replaced by a plain string value is a DeserializationError."""
    await redis_service.rebuild_cache()
    await redis_client.set(KEY, b"\xde\xad\xbe\xef")

    with pytest.raises(DeserializationError):
        await redis_service.get_snapshot()
    with pytest.raises(DeserializationError):
        await redis_service.get_by_category("Books")


async def test_populate_on_startup_replaces_plain_string(redis_service, redis_client):
    """Startup population overwrites a key that does not hold a cache entry."""
    await redis_client.set(KEY, b"not a cache entry")

    assert await redis_service.populate_on_startup() is True

    assert await redis_client.type(KEY) == b"hash"
    assert (await redis_service.get_by_category("Books")).product_count == 3


async def test_rebuild_replaces_plain_string(redis_service, redis_client):
    """A rebuild writes a fresh entry over a foreign value."""
    await redis_client.set(KEY, b"\xde\xad\xbe\xef")

    await redis_service.rebuild_cache()

    assert (await redis_service.get_by_category("Toys")).product_count == 0


async def test_health_check(redis_service):
    """A reachable server is healthy."""
    assert await redis_service.is_healthy() is True
