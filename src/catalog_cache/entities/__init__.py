"""Domain entities for internal representation.

These are immutable value types used by services and repositories.
They are NOT used for API contracts - use DTOs from the dto package for that.
"""

from .cache_entry_policy import CacheEntryPolicy
from .products_by_category import ProductsByCategory

__all__ = ["CacheEntryPolicy", "ProductsByCategory"]
