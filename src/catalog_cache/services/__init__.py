"""Service layer for business logic.

This layer contains the core business logic and orchestration.
Services depend on protocols (interfaces), not concrete implementations,
making them testable and flexible.

Architecture:
    Handler -> Service -> TypedCache -> CacheStore
    (HTTP)  -> (Business) -> (Codec) -> (Data Access)

Usage:
    ```python
    from catalog_cache.services import ProductsByCategoryCacheService

    service = ProductsByCategoryCacheService.create(cache=cache, source=source)
    ```
"""

from .products_by_category_service import ProductsByCategoryCacheService

__all__ = [
    "ProductsByCategoryCacheService",
]
