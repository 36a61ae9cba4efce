"""Exceptions raised by the cache layers.

Absence of a cache entry is not an exception at the codec level; it only
becomes :class:`CacheNotPopulatedError` at the service's read entry points.
"""


class CatalogCacheError(Exception):
    """Base class for every error raised by this package."""


class CacheNotPopulatedError(CatalogCacheError):
    """The statistics snapshot was read before it was populated (or after it expired)."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Cache unexpectedly empty: key '{key}' does not exist")


class DeserializationError(CatalogCacheError):
    """A cached payload exists but cannot be decoded as the expected type."""

    def __init__(self, key: str, reason: str) -> None:
        self.key = key
        self.reason = reason
        super().__init__(f"Cached payload under '{key}' could not be decoded: {reason}")


class CategoryNotFoundError(CatalogCacheError):
    """The snapshot holds no entry for the requested category name."""

    def __init__(self, category_name: str) -> None:
        self.category_name = category_name
        super().__init__(f"Category '{category_name}' not found in statistics")


class UpstreamUnavailableError(CatalogCacheError):
    """The cache backend or the source of truth could not be reached."""
