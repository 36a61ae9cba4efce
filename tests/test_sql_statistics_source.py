"""
Tests for the SQLAlchemy statistics source, on in-memory SQLite.
"""

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from catalog_cache.exceptions import UpstreamUnavailableError
from catalog_cache.protocols import StatisticsSource
from catalog_cache.repositories import Category, Product, SqlStatisticsSource, create_schema

SQLALCHEMY_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def engine():
    """Create a fresh in-memory database engine."""
    engine = create_async_engine(
        SQLALCHEMY_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield engine
    await engine.dispose()


@pytest.fixture
async def seeded_engine(engine):
    """Create the schema with three categories, one of them empty."""
    await create_schema(engine)
    session_factory = async_sessionmaker(engine, expire_on_commit=False)

    async with session_factory() as session:
        books = Category(id=1, name="Books", description="Printed matter")
        toys = Category(id=2, name="Toys")
        garden = Category(id=3, name="Garden")
        session.add_all([books, toys, garden])
        session.add_all(
            [
                Product(id=1, name="Novel", unit_price=12.5, category=books),
                Product(id=2, name="Atlas", unit_price=40.0, category=books),
                Product(id=3, name="Cookbook", unit_price=22.0, category=books),
                Product(id=4, name="Shovel", unit_price=18.0, category=garden),
            ]
        )
        await session.commit()

    return engine


def test_satisfies_protocol(engine):
    """The SQL source is a StatisticsSource."""
    assert isinstance(SqlStatisticsSource(engine), StatisticsSource)


async def test_counts_products_per_category(seeded_engine):
    """Every category is counted, including ones without products."""
    source = SqlStatisticsSource(seeded_engine)

    statistics = await source.count_products_by_category()

    counts = {s.category_name: s.product_count for s in statistics}
    assert counts == {"Books": 3, "Toys": 0, "Garden": 1}


async def test_duplicate_names_are_not_merged(engine):
    """Categories sharing a name are reported separately."""
    await create_schema(engine)
    async with async_sessionmaker(engine)() as session:
        session.add_all([Category(id=1, name="Misc"), Category(id=2, name="Misc")])
        session.add(Product(id=1, name="Widget", unit_price=1.0, category_id=2))
        await session.commit()

    statistics = await SqlStatisticsSource(engine).count_products_by_category()

    assert sorted(s.product_count for s in statistics) == [0, 1]


async def test_empty_catalog(engine):
    """No categories yields an empty list."""
    await create_schema(engine)

    assert await SqlStatisticsSource(engine).count_products_by_category() == []


async def test_query_failure_is_upstream_unavailable(engine):
    """A failing query surfaces as UpstreamUnavailableError."""
    source = SqlStatisticsSource(engine)  # schema never created

    with pytest.raises(UpstreamUnavailableError):
        await source.count_products_by_category()
