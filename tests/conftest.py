"""
Shared fixtures for the catalog cache tests.
"""

import asyncio
from datetime import timedelta

import pytest

from catalog_cache.cache import TypedCache
from catalog_cache.entities import CacheEntryPolicy, ProductsByCategory
from catalog_cache.repositories import InMemoryCacheStore
from catalog_cache.services import ProductsByCategoryCacheService


class FakeClock:
    """Manually advanced clock returning seconds."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeStatisticsSource:
    """StatisticsSource returning canned counts and recording calls."""

    def __init__(self, counts: dict[str, int] | None = None) -> None:
        self.counts = counts if counts is not None else {"Books": 3, "Toys": 0}
        self.calls = 0
        self.gate: asyncio.Event | None = None
        self.error: Exception | None = None

    async def count_products_by_category(self) -> list[ProductsByCategory]:
        self.calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return [
            ProductsByCategory(category_name=name, product_count=count)
            for name, count in self.counts.items()
        ]


@pytest.fixture
def clock():
    """Create a controllable clock."""
    return FakeClock()


@pytest.fixture
def policy():
    """Short, deterministic expiry policy."""
    return CacheEntryPolicy(
        sliding_expiration=timedelta(seconds=30),
        absolute_expiration=timedelta(seconds=60),
    )


@pytest.fixture
def store(clock):
    """Create an in-memory cache store driven by the fake clock."""
    return InMemoryCacheStore(clock=clock)


@pytest.fixture
def cache(store, policy):
    """Create a typed cache over the in-memory store."""
    return TypedCache(store=store, default_policy=policy)


@pytest.fixture
def source():
    """Create a fake statistics source with Books=3 and Toys=0."""
    return FakeStatisticsSource()


@pytest.fixture
def service(cache, source, policy):
    """Create a fail-fast statistics service."""
    return ProductsByCategoryCacheService(
        cache=cache,
        source=source,
        policy=policy,
        rebuild_on_miss=False,
        key="test:products_by_category",
    )
