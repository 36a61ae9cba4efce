"""Products-by-category statistics service.

This service owns the statistics snapshot stored under one well-known
cache key. It orchestrates the typed cache (read/write) and the
statistics source (recomputation).
"""

import logging

from catalog_cache.cache import TypedCache
from catalog_cache.config import settings
from catalog_cache.entities import CacheEntryPolicy, ProductsByCategory
from catalog_cache.exceptions import (
    CacheNotPopulatedError,
    CategoryNotFoundError,
    DeserializationError,
)
from catalog_cache.protocols import StatisticsSource

logger = logging.getLogger(__name__)

SNAPSHOT_KEY_NAME = "products_by_category"

Snapshot = list[ProductsByCategory]


class ProductsByCategoryCacheService:
    """Cached products-by-category statistics.

    The snapshot moves between two states: absent (never written, expired or
    deleted) and populated. Only this service writes the snapshot key.

    Reads never recompute by default: reading an absent snapshot raises
    CacheNotPopulatedError so callers can tell "not warmed yet" apart from
    "no categories". With ``rebuild_on_miss=True`` a read on an absent
    snapshot recomputes it instead.

    Example:
        ```python
        service = ProductsByCategoryCacheService.create(
            cache=TypedCache(store=RedisCacheRepository.create()),
            source=SqlStatisticsSource.create(),
        )

        await service.populate_on_startup()
        books = await service.get_by_category("Books")
        ```
    """

    def __init__(
        self,
        cache: TypedCache,
        source: StatisticsSource,
        policy: CacheEntryPolicy | None = None,
        rebuild_on_miss: bool | None = None,
        key: str | None = None,
    ) -> None:
        """Initialize the statistics service.

        Args:
            cache: Typed cache over the cache backend (required).
            source: Source of truth for the statistics (required).
            policy: Expiry policy for snapshot writes. Defaults to settings.
            rebuild_on_miss: Recompute instead of failing when a read misses.
                Defaults to settings.
            key: Cache key of the snapshot. Defaults to one derived from settings.
        """
        self._cache = cache
        self._source = source
        self._policy = policy or settings.cache_entry_policy
        self._rebuild_on_miss = (
            rebuild_on_miss if rebuild_on_miss is not None else settings.cache_rebuild_on_miss
        )
        self._key = key or f"{settings.cache_key_prefix}:{SNAPSHOT_KEY_NAME}"

    @classmethod
    def create(
        cls,
        cache: TypedCache,
        source: StatisticsSource,
        policy: CacheEntryPolicy | None = None,
        rebuild_on_miss: bool | None = None,
    ) -> "ProductsByCategoryCacheService":
        """Factory method to create the service with settings defaults.

        Args:
            cache: Typed cache (required).
            source: Statistics source (required).
            policy: Expiry policy. If None, uses settings.
            rebuild_on_miss: Read-miss behaviour. If None, uses settings.

        Returns:
            Configured ProductsByCategoryCacheService
        """
        return cls(cache=cache, source=source, policy=policy, rebuild_on_miss=rebuild_on_miss)

    async def _compute(self) -> Snapshot:
        statistics = await self._source.count_products_by_category()
        logger.info("Recomputed statistics for %d categories", len(statistics))
        return statistics

    async def populate_on_startup(self) -> bool:
        """Populate the snapshot unless it is already present.

        Intended to run once at process start. Calling it again while the
        snapshot is populated neither recomputes nor rewrites it. A corrupt
        payload found here is overwritten.

        Returns:
            True if the snapshot was computed and written, False if it was already present
        """
        async with self._cache.key_lock(self._key):
            try:
                snapshot, found = await self._cache.try_get(self._key, Snapshot)
            except DeserializationError as e:
                logger.warning("Discarding undecodable snapshot at startup: %s", e)
                snapshot, found = None, False

            if found and snapshot is not None:
                logger.info("Statistics snapshot already cached under %s", self._key)
                return False

            await self._cache.remove(self._key)
            statistics = await self._compute()
            await self._cache.set(self._key, statistics, self._policy, type_=Snapshot)
            logger.info("Statistics snapshot populated under %s", self._key)
            return True

    async def rebuild_cache(self) -> Snapshot:
        """Invalidate the snapshot and replace it with a fresh computation.

        The old snapshot is dropped and the new one written in one store
        operation once the recomputation has finished, so a failed or
        cancelled rebuild leaves the previous snapshot in place. Concurrent
        rebuilds run one after another.

        Returns:
            The freshly written snapshot
        """
        async with self._cache.key_lock(self._key):
            statistics = await self._compute()
            await self._cache.set(self._key, statistics, self._policy, type_=Snapshot)
            logger.info("Statistics snapshot rebuilt under %s", self._key)
            return statistics

    async def invalidate(self) -> bool:
        """Delete the snapshot. An already absent snapshot is not an error.

        Returns:
            True if a snapshot was deleted, False if none existed
        """
        async with self._cache.key_lock(self._key):
            return await self._cache.remove(self._key)

    async def get_snapshot(self) -> Snapshot:
        """Get every category's product count.

        Returns:
            The cached snapshot, in the order it was written

        Raises:
            CacheNotPopulatedError: If the snapshot is absent and rebuild_on_miss is off
            DeserializationError: If the cached payload cannot be decoded
        """
        if self._rebuild_on_miss:
            snapshot = await self._cache.get_or_compute(
                self._key, Snapshot, self._compute, self._policy
            )
        else:
            snapshot, _ = await self._cache.try_get(self._key, Snapshot)

        if snapshot is None:
            raise CacheNotPopulatedError(self._key)
        return snapshot

    async def get_by_category(self, category_name: str) -> ProductsByCategory:
        """Get the product count of one category.

        Args:
            category_name: Exact, case-sensitive category name

        Returns:
            The matching entry

        Raises:
            CategoryNotFoundError: If the snapshot has no such category
            CacheNotPopulatedError: If the snapshot is absent and rebuild_on_miss is off
            DeserializationError: If the cached payload cannot be decoded
        """
        snapshot = await self.get_snapshot()
        for entry in snapshot:
            if entry.category_name == category_name:
                return entry

        raise CategoryNotFoundError(category_name)

    async def is_healthy(self) -> bool:
        """Check if the cache backend is reachable."""
        return await self._cache.is_healthy()

    @property
    def key(self) -> str:
        """Get the cache key of the snapshot."""
        return self._key

    @property
    def policy(self) -> CacheEntryPolicy:
        """Get the expiry policy applied to snapshot writes."""
        return self._policy

    @property
    def rebuild_on_miss(self) -> bool:
        """Whether reads recompute an absent snapshot."""
        return self._rebuild_on_miss
