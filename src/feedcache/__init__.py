"""feedcache: Remote feed loading with a time-stamped local cache."""

__version__ = "0.1.0"

from feedcache.api import (
    ConnectivityError,
    HTTPClient,
    InvalidDataError,
    RemoteFeedLoader,
    RequestsHTTPClient,
)
from feedcache.cache import (
    CacheConfig,
    DiskFeedStore,
    FeedCachePolicy,
    InMemoryFeedStore,
    LocalFeedLoader,
)
from feedcache.loader import FeedLoader
from feedcache.models import FeedItem

__all__ = [
    "FeedItem",
    "FeedLoader",
    "LocalFeedLoader",
    "DiskFeedStore",
    "InMemoryFeedStore",
    "FeedCachePolicy",
    "CacheConfig",
    "RemoteFeedLoader",
    "HTTPClient",
    "RequestsHTTPClient",
    "ConnectivityError",
    "InvalidDataError",
    "__version__",
]
