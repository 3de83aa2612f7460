"""Local feed loader combining a cache store with the freshness policy."""

import logging
import weakref
from concurrent.futures import Future
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, List, Optional

from feedcache.cache.models import CachedFeed, to_local, to_models
from feedcache.cache.policy import FeedCachePolicy
from feedcache.cache.store import FeedStore
from feedcache.loader import FeedLoader
from feedcache.models import FeedItem

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _deliver(
    loader_ref: "weakref.ReferenceType",
    result: Future,
    value: Any = None,
    error: Optional[BaseException] = None,
) -> None:
    """Resolve result unless the loader that started the operation is gone."""
    if loader_ref() is None:
        logger.debug("LocalFeedLoader released before completion, dropping result")
        result.cancel()
        return
    if error is not None:
        result.set_exception(error)
    else:
        result.set_result(value)


class LocalFeedLoader(FeedLoader):
    """Serves the feed from the local cache and keeps the cache up to date.

    The loader itself holds no state between calls; everything lives in the
    store. Each operation returns a future.

    - ``save`` deletes the current record, then inserts the new items stamped
      with ``current_date()``. If the delete fails nothing is inserted. If the
      insert fails the cache is left empty.
    - ``load`` returns the cached items while they are fresh and an empty list
      when the cache is empty or expired. It never modifies the store.
    - ``validate_cache`` deletes a record that is expired or unreadable.

    Store completions only hold a weak reference to the loader. If the loader
    is garbage collected while an operation is in flight, any follow-up store
    call is skipped and the returned future is cancelled, so keep a reference
    to the loader until its futures resolve.

    Examples:
        >>> loader = LocalFeedLoader(DiskFeedStore(path))
        >>> loader.save(items).result()
        >>> loader.load().result() == items
        True
    """

    def __init__(
        self,
        store: FeedStore,
        current_date: Callable[[], datetime] = _utc_now,
        policy: Optional[FeedCachePolicy] = None,
    ):
        """Initialize local feed loader.

        Args:
            store: Store holding the cached record
            current_date: Clock used to stamp saves and judge freshness
            policy: Freshness policy (7-day policy if None)
        """
        self.store = store
        self.current_date = current_date
        self.policy = policy or FeedCachePolicy()

    def save(self, items: Iterable[FeedItem]) -> "Future[None]":
        """Replace the cached feed with items.

        Args:
            items: Items to cache

        Returns:
            Future resolving to None, or failing with the store's
            DeletionError or InsertionError
        """
        result: Future = Future()
        loader_ref = weakref.ref(self)
        store = self.store
        local_items = to_local(items)

        def on_inserted(insertion: Future) -> None:
            if insertion.cancelled():
                result.cancel()
                return
            _deliver(loader_ref, result, error=insertion.exception())

        def on_deleted(deletion: Future) -> None:
            if deletion.cancelled():
                result.cancel()
                return

            loader = loader_ref()
            if loader is None:
                _deliver(loader_ref, result)
                return

            error = deletion.exception()
            if error is not None:
                logger.debug(f"Cache deletion failed, skipping insert: {error}")
                _deliver(loader_ref, result, error=error)
                return

            try:
                timestamp = loader.current_date()
                store.insert(local_items, timestamp).add_done_callback(on_inserted)
            except Exception as e:
                _deliver(loader_ref, result, error=e)

        try:
            store.delete().add_done_callback(on_deleted)
        except Exception as e:
            result.set_exception(e)
        return result

    def load(self) -> "Future[List[FeedItem]]":
        """Load the cached feed.

        Returns:
            Future resolving to the cached items if fresh, otherwise an empty
            list. Fails with RetrievalError if the record can't be read.
        """
        result: Future = Future()
        loader_ref = weakref.ref(self)

        def on_retrieved(retrieval: Future) -> None:
            if retrieval.cancelled():
                result.cancel()
                return

            loader = loader_ref()
            if loader is None:
                _deliver(loader_ref, result)
                return

            error = retrieval.exception()
            if error is not None:
                _deliver(loader_ref, result, error=error)
                return

            cached: Optional[CachedFeed] = retrieval.result()
            try:
                fresh = cached is not None and loader._is_fresh(cached)
            except Exception as e:
                _deliver(loader_ref, result, error=e)
                return

            if fresh:
                _deliver(loader_ref, result, value=to_models(cached.feed))
            else:
                if cached is not None:
                    logger.debug(f"Cached feed from {cached.timestamp} has expired")
                _deliver(loader_ref, result, value=[])

        try:
            self.store.retrieve().add_done_callback(on_retrieved)
        except Exception as e:
            result.set_exception(e)
        return result

    def validate_cache(self) -> "Future[None]":
        """Delete the cached record if it is expired or unreadable.

        Errors are never reported: a failed cleanup is logged and the
        returned future still resolves to None. Waiting on it is optional.

        Returns:
            Future resolving to None once maintenance is finished
        """
        result: Future = Future()
        loader_ref = weakref.ref(self)
        store = self.store

        def on_deleted(deletion: Future) -> None:
            if not deletion.cancelled() and deletion.exception() is not None:
                logger.warning(
                    f"Failed to delete invalid feed cache: {deletion.exception()}"
                )
            _deliver(loader_ref, result)

        def delete_cache() -> None:
            try:
                store.delete().add_done_callback(on_deleted)
            except Exception as e:
                logger.warning(f"Failed to delete invalid feed cache: {e}")
                _deliver(loader_ref, result)

        def on_retrieved(retrieval: Future) -> None:
            loader = loader_ref()
            if loader is None or retrieval.cancelled():
                result.cancel()
                return

            error = retrieval.exception()
            if error is not None:
                logger.info(f"Deleting unreadable feed cache: {error}")
                delete_cache()
                return

            cached: Optional[CachedFeed] = retrieval.result()
            try:
                expired = cached is not None and not loader._is_fresh(cached)
            except Exception as e:
                logger.warning(f"Failed to check feed cache freshness: {e}")
                result.set_result(None)
                return

            if expired:
                logger.info(f"Deleting expired feed cache from {cached.timestamp}")
                delete_cache()
                return

            result.set_result(None)

        try:
            store.retrieve().add_done_callback(on_retrieved)
        except Exception as e:
            logger.warning(f"Failed to validate feed cache: {e}")
            result.set_result(None)
        return result

    def _is_fresh(self, cached: CachedFeed) -> bool:
        return self.policy.is_fresh(cached.timestamp, self.current_date())
