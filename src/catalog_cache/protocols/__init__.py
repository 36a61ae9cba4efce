"""Protocol interfaces for swappable implementations.

This package contains protocol definitions using structural typing.
Protocols enable:
- Easy swapping of implementations (Redis → in-memory, SQL → any other store)
- Unit testing with fake implementations
- Clear separation of concerns
"""

from .cache_store import CacheStore
from .statistics_source import StatisticsSource

__all__ = [
    "CacheStore",
    "StatisticsSource",
]
