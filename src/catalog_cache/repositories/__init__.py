"""Repository layer for data access.

This layer abstracts external dependencies (Redis, the catalog database)
behind protocol-based interfaces. This enables:
- Easy swapping of implementations (Redis → in-memory, SQLite → PostgreSQL, etc.)
- Unit testing with fake implementations
- Clear separation of concerns

The repositories are protocol-based (structural typing), not inheritance-based.
"""

from catalog_cache.protocols import CacheStore, StatisticsSource

from .memory_repository import InMemoryCacheStore
from .redis_repository import RedisCacheRepository
from .sql_statistics_source import SqlStatisticsSource, create_schema
from .tables import Base, Category, Product

__all__ = [
    "CacheStore",
    "StatisticsSource",
    "RedisCacheRepository",
    "InMemoryCacheStore",
    "SqlStatisticsSource",
    "create_schema",
    "Base",
    "Category",
    "Product",
]
