"""Store interface for the single cached feed record.

This module defines the abstract base class every cache store implements,
together with the errors stores report through their futures.
"""

from abc import ABC, abstractmethod
from concurrent.futures import Future
from datetime import datetime
from typing import Optional, Sequence

from feedcache.cache.models import CachedFeed, LocalFeedItem


class FeedStoreError(Exception):
    """Base exception for cache store errors."""

    pass


class RetrievalError(FeedStoreError):
    """Raised when a stored record exists but cannot be read or decoded."""

    pass


class InsertionError(FeedStoreError):
    """Raised when a record cannot be written."""

    pass


class DeletionError(FeedStoreError):
    """Raised when an existing record cannot be removed."""

    pass


class FeedStore(ABC):
    """Abstract base class for cache stores.

    A store holds at most one :class:`CachedFeed`. Each operation returns a
    single-shot future; the future may complete on any thread, so callers
    should hand further work to their own context if needed.

    Stores must apply operations against the record in submission order and
    must never let a retrieve observe a partially applied insert or delete.

    Examples:
        >>> store.insert(items, timestamp).result()
        >>> cached = store.retrieve().result()
        >>> cached.timestamp == timestamp
        True
    """

    @abstractmethod
    def retrieve(self) -> "Future[Optional[CachedFeed]]":
        """Read the stored record.

        Retrieval never modifies the store.

        Returns:
            Future resolving to the record, or None when the store is empty.
            Fails with RetrievalError if the record cannot be decoded.
        """
        pass

    @abstractmethod
    def insert(
        self, feed: Sequence[LocalFeedItem], timestamp: datetime
    ) -> "Future[None]":
        """Replace the stored record with a new one.

        Args:
            feed: Items to store
            timestamp: Time the snapshot was taken

        Returns:
            Future resolving to None. Fails with InsertionError.
        """
        pass

    @abstractmethod
    def delete(self) -> "Future[None]":
        """Remove the stored record.

        Deleting from an empty store succeeds.

        Returns:
            Future resolving to None. Fails with DeletionError.
        """
        pass
