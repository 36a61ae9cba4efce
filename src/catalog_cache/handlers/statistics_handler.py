"""HTTP handlers for statistics operations.

Handlers convert between entities and DTOs and map service errors to
HTTP status codes.
"""

from fastapi import HTTPException, status

from catalog_cache.dto import HealthCheckResponse, ProductsByCategoryItem, RefreshResponse
from catalog_cache.entities import ProductsByCategory
from catalog_cache.exceptions import (
    CacheNotPopulatedError,
    CatalogCacheError,
    CategoryNotFoundError,
    DeserializationError,
    UpstreamUnavailableError,
)
from catalog_cache.services import ProductsByCategoryCacheService


def _to_item(entry: ProductsByCategory) -> ProductsByCategoryItem:
    return ProductsByCategoryItem(
        category_name=entry.category_name,
        product_count=entry.product_count,
    )


def _to_http_error(error: CatalogCacheError) -> HTTPException:
    if isinstance(error, CategoryNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))
    if isinstance(error, (CacheNotPopulatedError, UpstreamUnavailableError)):
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(error))
    if isinstance(error, DeserializationError):
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Cached statistics are corrupt: {error}",
        )
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(error))


class StatisticsHandler:
    """HTTP handlers for products-by-category statistics.

    Example:
        ```python
        handler = StatisticsHandler(statistics_service=service)

        @app.get("/api/statistic", response_model=list[ProductsByCategoryItem])
        async def list_statistics():
            return await handler.list_statistics()
        ```
    """

    def __init__(self, statistics_service: ProductsByCategoryCacheService) -> None:
        """Initialize the statistics handler.

        Args:
            statistics_service: The statistics service (required).
        """
        self._statistics = statistics_service

    async def list_statistics(self) -> list[ProductsByCategoryItem]:
        """Handle GET /api/statistic requests.

        Raises:
            HTTPException: 503 if the cache is not populated or unreachable
        """
        try:
            snapshot = await self._statistics.get_snapshot()
        except CatalogCacheError as e:
            raise _to_http_error(e) from e

        return [_to_item(entry) for entry in snapshot]

    async def get_statistic(self, category_name: str) -> ProductsByCategoryItem:
        """Handle GET /api/statistic/{category_name} requests.

        Raises:
            HTTPException: 404 if the category is unknown
        """
        try:
            entry = await self._statistics.get_by_category(category_name)
        except CatalogCacheError as e:
            raise _to_http_error(e) from e

        return _to_item(entry)

    async def refresh(self) -> RefreshResponse:
        """Handle POST /api/statistic/refresh requests."""
        try:
            snapshot = await self._statistics.rebuild_cache()
        except CatalogCacheError as e:
            raise _to_http_error(e) from e

        return RefreshResponse(
            success=True,
            category_count=len(snapshot),
            message="Statistics rebuilt successfully",
        )

    async def health_check(self) -> HealthCheckResponse:
        """Handle GET /health requests."""
        is_healthy = await self._statistics.is_healthy()

        return HealthCheckResponse(
            status="healthy" if is_healthy else "unhealthy",
            cache_healthy=is_healthy,
        )
