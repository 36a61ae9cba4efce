"""Catalog Cache - products-by-category statistics behind a Redis cache.

This package provides a layered architecture for cache-aside statistics:

Layers:
    - protocols: Interface contracts (CacheStore, StatisticsSource)
    - repositories: Data access implementations (Redis, in-memory, SQLAlchemy)
    - cache: Typed get/set/get-or-compute over a CacheStore
    - services: Business logic
    - handlers: HTTP endpoint handlers
    - dto: Data transfer objects (API contracts)
    - entities: Domain models (internal)

Usage:
    ```python
    from catalog_cache import (
        ProductsByCategoryCacheService,
        RedisCacheRepository,
        SqlStatisticsSource,
        TypedCache,
    )

    service = ProductsByCategoryCacheService.create(
        cache=TypedCache(store=RedisCacheRepository.create()),
        source=SqlStatisticsSource.create(),
    )
    await service.populate_on_startup()
    ```

For HTTP API:
    ```python
    from catalog_cache.api.app import app
    ```
"""

from catalog_cache.cache import TypedCache
from catalog_cache.config import get_redis_client, settings
from catalog_cache.entities import CacheEntryPolicy, ProductsByCategory
from catalog_cache.exceptions import (
    CacheNotPopulatedError,
    CatalogCacheError,
    CategoryNotFoundError,
    DeserializationError,
    UpstreamUnavailableError,
)
from catalog_cache.handlers import StatisticsHandler
from catalog_cache.protocols import CacheStore, StatisticsSource
from catalog_cache.repositories import (
    InMemoryCacheStore,
    RedisCacheRepository,
    SqlStatisticsSource,
)
from catalog_cache.services import ProductsByCategoryCacheService

__all__ = [
    # Configuration
    "settings",
    "get_redis_client",
    # Protocols (interfaces)
    "CacheStore",
    "StatisticsSource",
    # Codec
    "TypedCache",
    # Services (business logic)
    "ProductsByCategoryCacheService",
    # Handlers (HTTP)
    "StatisticsHandler",
    # Repositories (data access)
    "RedisCacheRepository",
    "InMemoryCacheStore",
    "SqlStatisticsSource",
    # Entities (domain models)
    "CacheEntryPolicy",
    "ProductsByCategory",
    # Errors
    "CatalogCacheError",
    "CacheNotPopulatedError",
    "CategoryNotFoundError",
    "DeserializationError",
    "UpstreamUnavailableError",
]
