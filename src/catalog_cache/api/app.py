from typing import Any

from fastapi import FastAPI

from catalog_cache.api.dependencies import HandlerDep, lifespan
from catalog_cache.config import settings
from catalog_cache.dto import HealthCheckResponse, ProductsByCategoryItem, RefreshResponse

app = FastAPI(
    title="Catalog Cache API",
    description="Products-by-category statistics served from a Redis cache",
    version="0.1.0",
    lifespan=lifespan,
)


@app.get("/")
async def root() -> dict[str, Any]:
    """Root endpoint with API information."""
    return {
        "name": "Catalog Cache API",
        "version": "0.1.0",
        "endpoints": {
            "statistics": "/api/statistic",
            "refresh": "/api/statistic/refresh",
            "health": "/health",
            "docs": "/docs",
        },
    }


@app.get("/health", response_model=HealthCheckResponse)
async def health(handler: HandlerDep) -> HealthCheckResponse:
    """Health check endpoint."""
    return await handler.health_check()


@app.get("/api/statistic", response_model=list[ProductsByCategoryItem])
async def list_statistics(handler: HandlerDep) -> list[ProductsByCategoryItem]:
    """Get the product count of every category."""
    return await handler.list_statistics()


@app.post("/api/statistic/refresh", response_model=RefreshResponse)
async def refresh_statistics(handler: HandlerDep) -> RefreshResponse:
    """Recompute the statistics and replace the cached snapshot."""
    return await handler.refresh()


@app.get("/api/statistic/{category_name}", response_model=ProductsByCategoryItem)
async def get_statistic(category_name: str, handler: HandlerDep) -> ProductsByCategoryItem:
    """Get the product count of one category."""
    return await handler.get_statistic(category_name)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "catalog_cache.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )
