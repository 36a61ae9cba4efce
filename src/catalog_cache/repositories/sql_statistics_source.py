"""SQLAlchemy implementation of StatisticsSource."""

import logging

from sqlalchemy import func, select
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from catalog_cache.config import settings
from catalog_cache.entities import ProductsByCategory
from catalog_cache.exceptions import UpstreamUnavailableError

from .tables import Base, Category, Product

logger = logging.getLogger(__name__)


class SqlStatisticsSource:
    """Computes products-per-category counts with one aggregation query.

    This class satisfies the StatisticsSource protocol through structural
    typing. The session factory is only ever used for reads.
    """

    def __init__(
        self,
        engine: AsyncEngine,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
    ) -> None:
        """Initialize the source.

        Args:
            engine: Async engine connected to the catalog database.
            session_factory: Factory producing sessions. If None, one is bound to engine.
        """
        self._engine = engine
        self._session_factory = session_factory or async_sessionmaker(
            engine, expire_on_commit=False
        )

    @classmethod
    def create(cls, database_url: str | None = None) -> "SqlStatisticsSource":
        """Factory method building an engine from settings.

        Args:
            database_url: SQLAlchemy async URL. If None, uses settings.

        Returns:
            Configured SqlStatisticsSource
        """
        return cls(create_async_engine(database_url or settings.database_url))

    async def count_products_by_category(self) -> list[ProductsByCategory]:
        """Count products per category, including empty categories.

        Returns:
            One ProductsByCategory per category, in no particular order

        Raises:
            UpstreamUnavailableError: If the database cannot be queried
        """
        query = (
            select(Category.name, func.count(Product.id))
            .select_from(Category)
            .outerjoin(Product, Product.category_id == Category.id)
            .group_by(Category.id, Category.name)
        )

        try:
            async with self._session_factory() as session:
                rows = (await session.execute(query)).all()
        except DBAPIError as e:
            logger.error("Statistics query failed: %s", e)
            raise UpstreamUnavailableError(f"Statistics query failed: {e}") from e

        return [ProductsByCategory(category_name=name, product_count=count) for name, count in rows]

    @property
    def engine(self) -> AsyncEngine:
        """Get the underlying engine."""
        return self._engine

    async def dispose(self) -> None:
        """Dispose of the engine connection pool."""
        await self._engine.dispose()


async def create_schema(engine: AsyncEngine) -> None:
    """Create the catalog tables if they do not exist."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
