"""Freshness policy for cached feeds."""

from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from feedcache.cache.config import CacheConfig

MAX_CACHE_AGE_DAYS = 7


def _as_aware(value: datetime) -> datetime:
    # Timezone-naive datetimes are treated as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class FeedCachePolicy:
    """Decides whether a cached feed is still fresh.

    A feed cached at ``timestamp`` is fresh while ``now`` is strictly before
    ``timestamp`` plus ``max_age_days`` calendar days. Days are added in the
    timestamp's own timezone, so a timestamp carrying a ``zoneinfo`` zone
    keeps its wall-clock time across DST changes.

    Examples:
        >>> policy = FeedCachePolicy()
        >>> cached_at = datetime(2024, 1, 1, tzinfo=timezone.utc)
        >>> policy.is_fresh(cached_at, datetime(2024, 1, 7, tzinfo=timezone.utc))
        True
        >>> policy.is_fresh(cached_at, datetime(2024, 1, 8, tzinfo=timezone.utc))
        False
    """

    def __init__(self, max_age_days: int = MAX_CACHE_AGE_DAYS):
        if max_age_days < 0:
            raise ValueError(f"max_age_days must be non-negative, got {max_age_days}")
        self.max_age_days = max_age_days

    @classmethod
    def from_config(cls, config: "CacheConfig") -> "FeedCachePolicy":
        return cls(max_age_days=config.max_cache_age_days)

    def expires_at(self, timestamp: datetime) -> datetime:
        """Get the first instant at which a feed cached at timestamp is stale.

        Args:
            timestamp: Time the feed was cached

        Returns:
            Expiry time, timezone-aware
        """
        return _as_aware(timestamp) + timedelta(days=self.max_age_days)

    def is_fresh(self, timestamp: datetime, now: datetime) -> bool:
        """Check if a feed cached at timestamp may still be served.

        Args:
            timestamp: Time the feed was cached
            now: Reference time

        Returns:
            True if still fresh, False if expired
        """
        return _as_aware(now) < self.expires_at(timestamp)

    def age_remaining(self, timestamp: datetime, now: datetime) -> timedelta:
        """Get time left until the cached feed expires.

        Args:
            timestamp: Time the feed was cached
            now: Reference time

        Returns:
            Remaining time, never negative
        """
        remaining = self.expires_at(timestamp) - _as_aware(now)
        return max(timedelta(0), remaining)
