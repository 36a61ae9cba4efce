"""In-process implementation of CacheStore.

Useful for local development without Redis and for tests that need
deterministic expiry through an injected clock.
"""

import asyncio
import time
from collections.abc import Callable
from dataclasses import dataclass

from catalog_cache.entities import CacheEntryPolicy


@dataclass
class _StoredEntry:
    value: bytes
    expires_at: float | None  # current deadline, moved forward by sliding reads
    absolute_deadline: float | None
    sliding_seconds: float | None


class InMemoryCacheStore:
    """Dictionary-backed CacheStore with sliding and absolute expiry.

    Example:
        ```python
        now = [0.0]
        store = InMemoryCacheStore(clock=lambda: now[0])
        await store.set("k", b"v", CacheEntryPolicy(absolute_expiration=timedelta(seconds=5)))
        now[0] = 10.0
        assert await store.get("k") is None
        ```
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, _StoredEntry] = {}
        self._lock = asyncio.Lock()

    def _is_expired(self, entry: _StoredEntry, now: float) -> bool:
        return entry.expires_at is not None and now >= entry.expires_at

    async def get(self, key: str) -> bytes | None:
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None

            now = self._clock()
            if self._is_expired(entry, now):
                del self._entries[key]
                return None

            if entry.sliding_seconds is not None:
                deadline = now + entry.sliding_seconds
                if entry.absolute_deadline is not None:
                    deadline = min(deadline, entry.absolute_deadline)
                entry.expires_at = deadline

            return entry.value

    async def set(self, key: str, value: bytes, policy: CacheEntryPolicy) -> None:
        async with self._lock:
            now = self._clock()
            ttl = policy.initial_ttl()
            self._entries[key] = _StoredEntry(
                value=bytes(value),
                expires_at=now + ttl.total_seconds() if ttl is not None else None,
                absolute_deadline=(
                    now + policy.absolute_expiration.total_seconds()
                    if policy.absolute_expiration is not None
                    else None
                ),
                sliding_seconds=(
                    policy.sliding_expiration.total_seconds()
                    if policy.sliding_expiration is not None
                    else None
                ),
            )

    async def delete(self, key: str) -> bool:
        async with self._lock:
            entry = self._entries.pop(key, None)
            return entry is not None and not self._is_expired(entry, self._clock())

    async def health_check(self) -> bool:
        return True

    def __len__(self) -> int:
        now = self._clock()
        return sum(1 for e in self._entries.values() if not self._is_expired(e, now))
