#!/usr/bin/env python3
"""
Demo script for the catalog statistics cache.

Runs the whole flow against an in-memory SQLite catalog. Pass --redis to
use the Redis server from REDIS_URL instead of the in-process store.
"""

import asyncio
import sys
from datetime import timedelta

from sqlalchemy.ext.asyncio import async_sessionmaker

from catalog_cache import (
    CacheEntryPolicy,
    CacheNotPopulatedError,
    CategoryNotFoundError,
    InMemoryCacheStore,
    ProductsByCategoryCacheService,
    RedisCacheRepository,
    SqlStatisticsSource,
    TypedCache,
)
from catalog_cache.repositories import Category, Product, create_schema


def print_section(title: str) -> None:
    """Print a section header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


async def build_source() -> SqlStatisticsSource:
    """Create an in-memory catalog with a few categories."""
    source = SqlStatisticsSource.create("sqlite+aiosqlite:///:memory:")
    await create_schema(source.engine)

    async with async_sessionmaker(source.engine)() as session:
        books = Category(name="Books")
        garden = Category(name="Garden")
        session.add_all([books, garden, Category(name="Toys")])
        session.add_all(
            [
                Product(name="Novel", unit_price=12.5, category=books),
                Product(name="Atlas", unit_price=40.0, category=books),
                Product(name="Shovel", unit_price=18.0, category=garden),
            ]
        )
        await session.commit()

    return source


async def main(use_redis: bool) -> None:
    """Run the demo."""
    source = await build_source()
    store = RedisCacheRepository.create() if use_redis else InMemoryCacheStore()
    service = ProductsByCategoryCacheService.create(
        cache=TypedCache(store=store),
        source=source,
        policy=CacheEntryPolicy(
            sliding_expiration=timedelta(minutes=5),
            absolute_expiration=timedelta(minutes=15),
        ),
        rebuild_on_miss=False,
    )

    print_section("Reading before population")
    await service.invalidate()
    try:
        await service.get_snapshot()
    except CacheNotPopulatedError as e:
        print(f"  ✓ {e}")

    print_section("Startup population")
    print(f"  Populated: {await service.populate_on_startup()}")
    print(f"  Populated again: {await service.populate_on_startup()}")
    for entry in sorted(await service.get_snapshot(), key=lambda e: e.category_name):
        print(f"  {entry.category_name:<12} {entry.product_count}")

    print_section("Point lookup")
    print(f"  Books -> {(await service.get_by_category('Books')).product_count}")
    try:
        await service.get_by_category("Unknown")
    except CategoryNotFoundError as e:
        print(f"  ✓ {e}")

    print_section("Rebuild")
    snapshot = await service.rebuild_cache()
    print(f"  Rebuilt snapshot with {len(snapshot)} categories")

    await source.dispose()
    if use_redis:
        await store.close()


if __name__ == "__main__":
    asyncio.run(main(use_redis="--redis" in sys.argv))
