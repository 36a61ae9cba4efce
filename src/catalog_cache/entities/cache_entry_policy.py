"""Cache entry expiry policy."""

from dataclasses import dataclass
from datetime import timedelta


@dataclass(frozen=True)
class CacheEntryPolicy:
    """Expiry configuration attached to a cache write.

    The effective expiry of an entry is
    ``min(last_access + sliding_expiration, write_time + absolute_expiration)``.
    Either part may be None, in which case it does not constrain the entry.
    When both are None the entry never expires.

    Attributes:
        sliding_expiration: Entry expires if unread for this long; reads reset it
        absolute_expiration: Entry expires this long after the write, regardless of reads
    """

    sliding_expiration: timedelta | None = timedelta(minutes=30)
    absolute_expiration: timedelta | None = timedelta(hours=1)

    def __post_init__(self) -> None:
        for name in ("sliding_expiration", "absolute_expiration"):
            value = getattr(self, name)
            if value is not None and value < timedelta(0):
                raise ValueError(f"{name} must not be negative, got {value}")

    def initial_ttl(self) -> timedelta | None:
        """Time-to-live to apply right after a write.

        Returns:
            The tighter of the two windows, or None when neither is set
        """
        windows = [w for w in (self.sliding_expiration, self.absolute_expiration) if w is not None]
        if not windows:
            return None
        return min(windows)
