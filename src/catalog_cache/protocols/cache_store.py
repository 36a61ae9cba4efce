"""Cache storage protocol.

Defines the interface for any key-value cache backend that stores raw
bytes under string keys with an expiry policy.

Implementations can include:
- Redis (default)
- In-process memory store (tests, local development)
- Any other distributed key-value store
"""

from typing import Protocol, runtime_checkable

from catalog_cache.entities import CacheEntryPolicy


@runtime_checkable
class CacheStore(Protocol):
    """Protocol for raw byte cache backends.

    Any type that implements these methods satisfies the protocol,
    no explicit inheritance needed.

    Implementations must enforce both parts of the policy: an entry read
    inside its sliding window has the window reset, but never past the
    absolute deadline fixed at write time.

    Example:
        ```python
        from catalog_cache.protocols import CacheStore

        store: CacheStore = RedisCacheRepository.create()
        store: CacheStore = InMemoryCacheStore()
        ```
    """

    async def get(self, key: str) -> bytes | None:
        """Read the raw payload stored under a key.

        Args:
            key: The cache key

        Returns:
            The payload, or None if the key is absent or expired

        Raises:
            UpstreamUnavailableError: If the backend cannot be reached
        """
        ...

    async def set(self, key: str, value: bytes, policy: CacheEntryPolicy) -> None:
        """Write a payload, replacing any prior value and its expiry clock.

        The write is all-or-nothing.

        Args:
            key: The cache key
            value: The encoded payload
            policy: Expiry policy for the new entry

        Raises:
            UpstreamUnavailableError: If the backend cannot be reached
        """
        ...

    async def delete(self, key: str) -> bool:
        """Delete a key.

        Args:
            key: The cache key

        Returns:
            True if an entry was removed, False if it was already absent

        Raises:
            UpstreamUnavailableError: If the backend cannot be reached
        """
        ...

    async def health_check(self) -> bool:
        """Check if the backend is accessible.

        Returns:
            True if healthy, False otherwise
        """
        ...
