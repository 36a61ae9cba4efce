import logging
import os
from dataclasses import dataclass
from datetime import timedelta
from functools import lru_cache

import redis.asyncio as redis
from dotenv import load_dotenv

from catalog_cache.entities import CacheEntryPolicy

load_dotenv()


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    # Redis
    redis_url: str = os.getenv("REDIS_URL", "redis://localhost:6379")
    redis_password: str | None = os.getenv("REDIS_PASSWORD")

    # Cache
    cache_key_prefix: str = os.getenv("CACHE_KEY_PREFIX", "catalog_cache")
    cache_sliding_expiration_seconds: int = int(
        os.getenv("CACHE_SLIDING_EXPIRATION_SECONDS", "1800")  # 30 minutes
    )
    cache_absolute_expiration_seconds: int = int(
        os.getenv("CACHE_ABSOLUTE_EXPIRATION_SECONDS", "3600")  # 1 hour
    )
    cache_rebuild_on_miss: bool = os.getenv("CACHE_REBUILD_ON_MISS", "false").lower() == "true"

    # Source of truth
    database_url: str = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./catalog.db")

    # API
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    api_reload: bool = os.getenv("API_RELOAD", "true").lower() == "true"

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    @property
    def cache_entry_policy(self) -> CacheEntryPolicy:
        """Build the expiry policy applied to snapshot writes."""
        return CacheEntryPolicy(
            sliding_expiration=timedelta(seconds=self.cache_sliding_expiration_seconds),
            absolute_expiration=timedelta(seconds=self.cache_absolute_expiration_seconds),
        )

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if self.cache_sliding_expiration_seconds < 0:
            raise ValueError("CACHE_SLIDING_EXPIRATION_SECONDS must not be negative")

        if self.cache_absolute_expiration_seconds < 0:
            raise ValueError("CACHE_ABSOLUTE_EXPIRATION_SECONDS must not be negative")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


def get_redis_client() -> redis.Redis:
    """Create an asyncio Redis client instance."""
    return redis.from_url(
        settings.redis_url,
        password=settings.redis_password,
        decode_responses=False,
    )


def configure_logging(level: str | None = None) -> None:
    """Configure root logging once for the process."""
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
