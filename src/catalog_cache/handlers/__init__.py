"""Handler layer for HTTP endpoints.

Handlers depend on services (business logic), not directly on repositories.

Architecture:
    Handler -> Service -> TypedCache -> CacheStore
"""

from .statistics_handler import StatisticsHandler

__all__ = [
    "StatisticsHandler",
]
