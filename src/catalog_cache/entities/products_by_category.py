"""Products-by-category statistic entity."""

from pydantic import BaseModel, ConfigDict, Field


class ProductsByCategory(BaseModel):
    """Amount of products in one category.

    Produced only by recomputation against the source of truth. A full
    snapshot is a list of these, stored and replaced as one cache value.

    Attributes:
        category_name: Category name, unique within a snapshot
        product_count: Number of products in the category
    """

    model_config = ConfigDict(frozen=True)

    category_name: str
    product_count: int = Field(..., ge=0)
