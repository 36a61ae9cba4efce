"""Response DTOs for API endpoints."""

from pydantic import BaseModel, Field


class ProductsByCategoryItem(BaseModel):
    """Product count of a single category."""

    category_name: str = Field(..., description="Category name")
    product_count: int = Field(..., description="Number of products in the category", ge=0)


class RefreshResponse(BaseModel):
    """Response DTO for the statistics refresh operation."""

    success: bool = Field(..., description="Whether the rebuild succeeded")
    category_count: int = Field(..., description="Number of categories in the new snapshot", ge=0)
    message: str = Field(..., description="Human-readable status message")


class HealthCheckResponse(BaseModel):
    """Response DTO for health check."""

    status: str = Field(..., description="Health status: 'healthy' or 'unhealthy'")
    cache_healthy: bool = Field(..., description="Whether the cache backend is reachable")
