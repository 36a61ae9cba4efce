"""Dependency injection configuration for FastAPI app.

Uses FastAPI's app.state pattern for storing service instances.

Pattern:
    - Services stored in app.state during lifespan
    - Dependency functions retrieve from request.app.state
    - Clean separation, no global mutable state
"""

import logging
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI, Request

from catalog_cache.cache import TypedCache
from catalog_cache.config import configure_logging, settings
from catalog_cache.handlers import StatisticsHandler
from catalog_cache.repositories import RedisCacheRepository, SqlStatisticsSource, create_schema
from catalog_cache.services import ProductsByCategoryCacheService

logger = logging.getLogger(__name__)


def get_handler(request: Request) -> StatisticsHandler:
    """Dependency injection for StatisticsHandler from app.state.

    Raises:
        RuntimeError: If handler is not initialized
    """
    handler = getattr(request.app.state, "statistics_handler", None)
    if handler is None:
        raise RuntimeError("StatisticsHandler not initialized. Check lifespan setup.")
    return handler


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for FastAPI app.

    Initializes all layers, warms the statistics cache and stores the
    service and handler in app.state. Closes connections on shutdown.
    """
    configure_logging()

    repository = RedisCacheRepository.create()
    source = SqlStatisticsSource.create()
    try:
        await create_schema(source.engine)

        cache = TypedCache(store=repository, default_policy=settings.cache_entry_policy)
        statistics_service = ProductsByCategoryCacheService.create(cache=cache, source=source)
        await statistics_service.populate_on_startup()

        app.state.statistics_service = statistics_service
        app.state.statistics_handler = StatisticsHandler(statistics_service=statistics_service)

        logger.info("Statistics service initialized (key=%s)", statistics_service.key)

        yield
    finally:
        app.state.statistics_handler = None
        app.state.statistics_service = None
        await repository.close()
        await source.dispose()
        logger.info("Statistics service shut down")


# Type aliases for cleaner dependency injection
HandlerDep = Annotated[StatisticsHandler, Depends(get_handler)]
