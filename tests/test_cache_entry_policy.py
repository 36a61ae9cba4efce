"""
Tests for the cache entry expiry policy.
"""

from datetime import timedelta

import pytest

from catalog_cache.entities import CacheEntryPolicy


def test_default_policy():
    """Default policy is a 30 minute sliding window capped at one hour."""
    policy = CacheEntryPolicy()
    assert policy.sliding_expiration == timedelta(minutes=30)
    assert policy.absolute_expiration == timedelta(hours=1)
    assert policy.initial_ttl() == timedelta(minutes=30)


def test_initial_ttl_uses_tighter_window():
    """Absolute expiration shorter than the sliding window wins."""
    policy = CacheEntryPolicy(
        sliding_expiration=timedelta(minutes=10),
        absolute_expiration=timedelta(minutes=2),
    )
    assert policy.initial_ttl() == timedelta(minutes=2)


def test_initial_ttl_without_expiry():
    """A policy with neither window never expires."""
    policy = CacheEntryPolicy(sliding_expiration=None, absolute_expiration=None)
    assert policy.initial_ttl() is None


def test_zero_absolute_expiration_is_allowed():
    """Zero is a legal boundary value."""
    policy = CacheEntryPolicy(sliding_expiration=None, absolute_expiration=timedelta(0))
    assert policy.initial_ttl() == timedelta(0)


@pytest.mark.parametrize("field", ["sliding_expiration", "absolute_expiration"])
def test_negative_window_rejected(field):
    """Negative durations are rejected at construction."""
    with pytest.raises(ValueError, match=field):
        CacheEntryPolicy(**{field: timedelta(seconds=-1)})
