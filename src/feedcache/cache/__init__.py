"""Local caching of the last fetched feed.

This module persists one snapshot of the feed with the time it was taken and
serves it back while it is fresh.

Key components:
- LocalFeedLoader: Save, load and validate the cached feed
- FeedStore: Store interface (DiskFeedStore, InMemoryFeedStore)
- FeedCachePolicy: Age-based freshness check
- CacheConfig: Configuration management
"""

from feedcache.cache.config import CacheConfig, get_global_config, set_global_config
from feedcache.cache.disk import DiskFeedStore
from feedcache.cache.loader import LocalFeedLoader
from feedcache.cache.memory import InMemoryFeedStore
from feedcache.cache.models import CachedFeed, LocalFeedItem
from feedcache.cache.policy import MAX_CACHE_AGE_DAYS, FeedCachePolicy
from feedcache.cache.store import (
    DeletionError,
    FeedStore,
    FeedStoreError,
    InsertionError,
    RetrievalError,
)

__all__ = [
    "LocalFeedLoader",
    "FeedStore",
    "DiskFeedStore",
    "InMemoryFeedStore",
    "FeedCachePolicy",
    "MAX_CACHE_AGE_DAYS",
    "CacheConfig",
    "get_global_config",
    "set_global_config",
    "CachedFeed",
    "LocalFeedItem",
    "FeedStoreError",
    "RetrievalError",
    "InsertionError",
    "DeletionError",
]
