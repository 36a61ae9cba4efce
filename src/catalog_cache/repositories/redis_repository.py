"""Redis implementation of CacheStore.

Redis only knows a single TTL per key, so sliding expiration is emulated:
each entry is a hash holding the payload together with its absolute
deadline and sliding window, and every successful read pushes the key's
TTL forward to ``min(now + sliding, absolute deadline)``.
"""

import logging
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import timedelta

import redis.asyncio as redis
from redis.exceptions import RedisError, ResponseError

from catalog_cache.config import get_redis_client
from catalog_cache.entities import CacheEntryPolicy
from catalog_cache.exceptions import DeserializationError, UpstreamUnavailableError

logger = logging.getLogger(__name__)

DATA_FIELD = "data"
ABSOLUTE_FIELD = "absexp"
SLIDING_FIELD = "sldexp"
NOT_PRESENT = -1

# Read the entry and push its TTL forward in one step, so a concurrent
# write cannot have its fresh TTL overwritten or be deleted as expired.
# KEYS[1] = key, ARGV[1] = now in Unix milliseconds
READ_AND_REFRESH_SCRIPT = """
local fields = redis.call('HMGET', KEYS[1], 'data', 'absexp', 'sldexp')
if not fields[1] then
    return nil
end
local now = tonumber(ARGV[1])
local absexp = tonumber(fields[2]) or -1
local sldexp = tonumber(fields[3]) or -1
if absexp ~= -1 and absexp <= now then
    redis.call('DEL', KEYS[1])
    return nil
end
if sldexp > 0 then
    local ttl = sldexp
    if absexp ~= -1 then
        ttl = math.min(ttl, absexp - now)
    end
    redis.call('PEXPIRE', KEYS[1], ttl)
end
return fields[1]
"""


def _to_ms(value: timedelta) -> int:
    return int(value.total_seconds() * 1000)


@contextmanager
def _translate_errors(operation: str, key: str) -> Iterator[None]:
    """Surface Redis failures as catalog cache errors.

    A key holding something other than a hash cannot be decoded and is
    reported as DeserializationError; anything else Redis refuses means
    the cache is unusable and becomes UpstreamUnavailableError.
    """
    try:
        yield
    except ResponseError as e:
        if "WRONGTYPE" in str(e):
            logger.warning("Redis key %s holds a foreign value: %s", key, e)
            raise DeserializationError(key, "key does not hold a cache entry") from e
        logger.error("Redis %s failed for key %s: %s", operation, key, e)
        raise UpstreamUnavailableError(f"Redis {operation} failed for '{key}': {e}") from e
    except RedisError as e:
        logger.error("Redis %s failed for key %s: %s", operation, key, e)
        raise UpstreamUnavailableError(f"Redis {operation} failed for '{key}': {e}") from e


class RedisCacheRepository:
    """Redis implementation of the CacheStore protocol.

    This class satisfies the CacheStore protocol through structural
    typing - no explicit inheritance needed.

    Entry layout (one hash per key):
    - data: the encoded payload
    - absexp: absolute deadline in Unix milliseconds, or -1
    - sldexp: sliding window in milliseconds, or -1
    """

    def __init__(
        self,
        redis_client: redis.Redis | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the Redis cache repository.

        Args:
            redis_client: asyncio Redis client instance. If None, creates default.
            clock: Wall clock returning Unix seconds, used for absolute deadlines.
        """
        self._client = redis_client or get_redis_client()
        self._clock = clock

    @classmethod
    def create(cls, redis_client: redis.Redis | None = None) -> "RedisCacheRepository":
        """Factory method to create RedisCacheRepository with defaults.

        Args:
            redis_client: Client to use. If None, one is built from settings.

        Returns:
            Configured RedisCacheRepository
        """
        return cls(redis_client=redis_client)

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    async def get(self, key: str) -> bytes | None:
        """Read a payload and refresh its sliding window.

        Args:
            key: The cache key

        Returns:
            The payload, or None if absent or expired

        Raises:
            DeserializationError: If the key holds a value that is not a cache entry
            UpstreamUnavailableError: If Redis cannot serve the read
        """
        with _translate_errors("get", key):
            data = await self._client.eval(READ_AND_REFRESH_SCRIPT, 1, key, self._now_ms())

        return data

    async def set(self, key: str, value: bytes, policy: CacheEntryPolicy) -> None:
        """Replace the entry under a key inside a MULTI/EXEC transaction.

        Args:
            key: The cache key
            value: The encoded payload
            policy: Expiry policy for the new entry
        """
        now = self._now_ms()
        absexp = (
            now + _to_ms(policy.absolute_expiration)
            if policy.absolute_expiration is not None
            else NOT_PRESENT
        )
        sldexp = (
            _to_ms(policy.sliding_expiration)
            if policy.sliding_expiration is not None
            else NOT_PRESENT
        )
        ttl = policy.initial_ttl()

        with _translate_errors("set", key):
            async with self._client.pipeline(transaction=True) as pipe:
                pipe.delete(key)
                pipe.hset(
                    key,
                    mapping={
                        DATA_FIELD: value,
                        ABSOLUTE_FIELD: absexp,
                        SLIDING_FIELD: sldexp,
                    },
                )
                if ttl is not None:
                    # A non-positive timeout makes Redis drop the key at once
                    pipe.pexpire(key, max(_to_ms(ttl), 0))
                await pipe.execute()

    async def delete(self, key: str) -> bool:
        """Delete a specific entry by key.

        Args:
            key: The storage key to delete

        Returns:
            True if deleted, False if it did not exist
        """
        with _translate_errors("delete", key):
            result: int = await self._client.delete(key)
        return result > 0

    async def health_check(self) -> bool:
        """Check if Redis is accessible.

        Returns:
            True if healthy, False otherwise
        """
        try:
            return bool(await self._client.ping())
        except RedisError as e:
            logger.warning("Redis health check failed: %s", e)
            return False

    async def close(self) -> None:
        """Close the underlying connection pool."""
        await self._client.aclose()

    @property
    def client(self) -> redis.Redis:
        """Get the Redis client."""
        return self._client
