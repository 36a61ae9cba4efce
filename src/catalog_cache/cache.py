"""Typed cache-aside primitives over a raw byte CacheStore.

Values are encoded as UTF-8 JSON with pydantic, keeping field names
exactly as declared and leaving out fields whose value is None.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from functools import lru_cache
from typing import Any, TypeVar
from weakref import WeakValueDictionary

from pydantic import TypeAdapter, ValidationError

from catalog_cache.entities import CacheEntryPolicy
from catalog_cache.exceptions import DeserializationError
from catalog_cache.protocols import CacheStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Stripped from both ends of a payload before decoding
STRUCTURAL_SLACK = "() ,\t\r\n"


@lru_cache(maxsize=64)
def _adapter_for(type_: Any) -> TypeAdapter:
    return TypeAdapter(type_)


def encode(value: Any, type_: Any = None) -> bytes:
    """Serialize a value to its canonical cache encoding.

    Args:
        value: The value to encode
        type_: Declared type of the value. Defaults to type(value).

    Returns:
        UTF-8 JSON bytes
    """
    adapter = _adapter_for(type_ if type_ is not None else type(value))
    return adapter.dump_json(value, exclude_none=True)


def decode(payload: bytes, type_: Any, key: str = "<payload>") -> Any:
    """Deserialize a cache payload.

    Args:
        payload: Raw bytes read from the store
        type_: Expected type of the decoded value
        key: Cache key, only used in error messages

    Returns:
        The decoded value

    Raises:
        DeserializationError: If the payload is not valid for type_
    """
    try:
        text = payload.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DeserializationError(key, f"payload is not UTF-8: {e}") from e

    try:
        return _adapter_for(type_).validate_json(text.strip(STRUCTURAL_SLACK))
    except ValidationError as e:
        raise DeserializationError(key, str(e)) from e


class TypedCache:
    """Cache-aside operations over a CacheStore.

    The cache has no domain knowledge: callers pass the expected type of
    each value and, optionally, the expiry policy of each write.

    ``get_or_compute`` is single-flight per key within this instance:
    concurrent callers that miss on the same key wait for the first
    caller's computation instead of starting their own.

    Example:
        ```python
        cache = TypedCache(store=RedisCacheRepository.create())

        stats = await cache.get_or_compute(
            "stats",
            list[ProductsByCategory],
            source.count_products_by_category,
        )
        ```
    """

    def __init__(
        self,
        store: CacheStore,
        default_policy: CacheEntryPolicy | None = None,
    ) -> None:
        """Initialize the typed cache.

        Args:
            store: Raw byte cache backend (required).
            default_policy: Policy used when a write does not pass one.
        """
        self._store = store
        self._default_policy = default_policy or CacheEntryPolicy()
        self._key_locks: WeakValueDictionary[str, asyncio.Lock] = WeakValueDictionary()

    def key_lock(self, key: str) -> asyncio.Lock:
        """Return the lock guarding recomputation of a key.

        The lock is shared by every caller for as long as someone holds a
        reference to it.
        """
        lock = self._key_locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._key_locks[key] = lock
        return lock

    async def set(
        self,
        key: str,
        value: Any,
        policy: CacheEntryPolicy | None = None,
        *,
        type_: Any = None,
    ) -> None:
        """Encode a value and write it under a key.

        Any prior value is replaced and its expiry clock restarts.

        Args:
            key: The cache key
            value: The value to store
            policy: Expiry policy. Defaults to the cache's default policy.
            type_: Declared type used for encoding. Defaults to type(value).

        Raises:
            UpstreamUnavailableError: If the store cannot be reached
        """
        payload = encode(value, type_)
        await self._store.set(key, payload, policy or self._default_policy)
        logger.debug("Cache set %s (%d bytes)", key, len(payload))

    async def try_get(self, key: str, type_: type[T] | Any) -> tuple[T | None, bool]:
        """Read and decode the value under a key.

        Args:
            key: The cache key
            type_: Expected type of the value

        Returns:
            (value, True) when present, (None, False) when absent or expired

        Raises:
            DeserializationError: If a payload exists but cannot be decoded
            UpstreamUnavailableError: If the store cannot be reached
        """
        payload = await self._store.get(key)
        if payload is None:
            logger.debug("Cache miss %s", key)
            return None, False

        logger.debug("Cache hit %s", key)
        return decode(payload, type_, key), True

    async def get_or_compute(
        self,
        key: str,
        type_: type[T] | Any,
        compute: Callable[[], Awaitable[T | None]],
        policy: CacheEntryPolicy | None = None,
    ) -> T | None:
        """Return the cached value, computing and storing it on a miss.

        A failure to write the fresh value back is logged and ignored; the
        computed value is still returned.

        Args:
            key: The cache key
            type_: Expected type of the value
            compute: Async producer of a fresh value
            policy: Expiry policy for the write-back

        Returns:
            The cached or freshly computed value (None if compute produced None)
        """
        value, found = await self.try_get(key, type_)
        if found and value is not None:
            return value

        async with self.key_lock(key):
            # Another caller may have filled the key while we waited
            value, found = await self.try_get(key, type_)
            if found and value is not None:
                return value

            value = await compute()
            if value is not None:
                try:
                    await self.set(key, value, policy, type_=type_)
                except Exception:
                    logger.warning(
                        "Write-back of %s failed, returning fresh value", key, exc_info=True
                    )

            return value

    async def remove(self, key: str) -> bool:
        """Delete a key. A key that is already absent is not an error.

        Args:
            key: The cache key

        Returns:
            True if an entry was removed, False if it was already absent
        """
        removed = await self._store.delete(key)
        logger.debug("Cache remove %s (existed=%s)", key, removed)
        return removed

    async def is_healthy(self) -> bool:
        """Check if the underlying store is reachable."""
        return await self._store.health_check()

    @property
    def store(self) -> CacheStore:
        """Get the underlying store (for testing)."""
        return self._store

    @property
    def default_policy(self) -> CacheEntryPolicy:
        """Get the policy applied when a write passes none."""
        return self._default_policy
