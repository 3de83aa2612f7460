"""In-memory feed store implementation."""

import threading
from concurrent.futures import Future
from datetime import datetime
from typing import Callable, Optional, Sequence, TypeVar

from feedcache.cache.models import CachedFeed, LocalFeedItem
from feedcache.cache.store import FeedStore

T = TypeVar("T")


class InMemoryFeedStore(FeedStore):
    """
    In-process store holding the cached record in an attribute.

    Suitable for tests and for applications that don't need the cache to
    survive a restart. Operations run under a lock on the calling thread, so
    every returned future is already complete.
    """

    def __init__(self, cached: Optional[CachedFeed] = None) -> None:
        self._cached = cached
        self._lock = threading.Lock()

    def _run(self, operation: Callable[[], T]) -> "Future[T]":
        future: Future = Future()
        with self._lock:
            result = operation()
        future.set_result(result)
        return future

    def retrieve(self) -> "Future[Optional[CachedFeed]]":
        return self._run(lambda: self._cached)

    def insert(
        self, feed: Sequence[LocalFeedItem], timestamp: datetime
    ) -> "Future[None]":
        def replace() -> None:
            self._cached = CachedFeed(feed=feed, timestamp=timestamp)

        return self._run(replace)

    def delete(self) -> "Future[None]":
        def clear() -> None:
            self._cached = None

        return self._run(clear)
