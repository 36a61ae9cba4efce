"""Statistics source protocol.

The source of truth for the aggregate. It is read-only from the
cache's point of view and exposes a single query.
"""

from typing import Protocol, runtime_checkable

from catalog_cache.entities import ProductsByCategory


@runtime_checkable
class StatisticsSource(Protocol):
    """Protocol for the backing store the statistics are computed from."""

    async def count_products_by_category(self) -> list[ProductsByCategory]:
        """Count products grouped by category.

        Every existing category is returned, including categories with no
        products. The order of the result is unspecified.

        Returns:
            One ProductsByCategory per category

        Raises:
            UpstreamUnavailableError: If the store cannot be reached
        """
        ...
