"""Unit tests for LocalFeedLoader using a store spy."""

import gc
from datetime import datetime, timedelta, timezone

import pytest

from feedcache.cache.loader import LocalFeedLoader
from feedcache.cache.models import CachedFeed
from feedcache.cache.policy import FeedCachePolicy
from feedcache.cache.store import DeletionError, InsertionError, RetrievalError

DELETE = ("delete",)
RETRIEVE = ("retrieve",)


@pytest.fixture
def now():
    return datetime(2024, 6, 15, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def loader(store_spy, now):
    """Create loader with a fixed clock."""
    return LocalFeedLoader(store_spy, current_date=lambda: now)


def cached_at(local_items, timestamp):
    return CachedFeed(feed=local_items, timestamp=timestamp)


def broken_clock():
    raise RuntimeError("clock unavailable")


class TestInitialization:
    """Test loader construction."""

    def test_init_does_not_message_store(self, store_spy):
        """Test that creating a loader doesn't touch the store."""
        LocalFeedLoader(store_spy)
        assert store_spy.messages == []

    def test_default_policy(self, store_spy):
        """Test that the seven-day policy is used by default."""
        assert LocalFeedLoader(store_spy).policy.max_age_days == 7


class TestSave:
    """Test caching a feed."""

    def test_save_requests_cache_deletion(self, loader, store_spy, unique_items):
        """Test that save starts by deleting the old record."""
        loader.save(unique_items()[0])
        assert store_spy.messages == [DELETE]

    def test_save_does_not_insert_on_deletion_error(
        self, loader, store_spy, unique_items
    ):
        """Test that a failed delete stops the save."""
        loader.save(unique_items()[0])
        store_spy.complete_deletion(error=DeletionError("delete failed"))

        assert store_spy.messages == [DELETE]

    def test_save_inserts_with_timestamp_on_successful_deletion(
        self, loader, store_spy, unique_items, now
    ):
        """Test that save inserts the local items stamped with the current time."""
        models, local_items = unique_items()

        loader.save(models)
        store_spy.complete_deletion()

        assert store_spy.messages == [DELETE, ("insert", local_items, now)]

    def test_save_fails_on_deletion_error(self, loader, store_spy, unique_items):
        """Test that save completes with the deletion error."""
        deletion_error = DeletionError("delete failed")

        result = loader.save(unique_items()[0])
        store_spy.complete_deletion(error=deletion_error)

        assert result.exception(timeout=1) is deletion_error

    def test_save_fails_on_insertion_error(self, loader, store_spy, unique_items):
        """Test that save completes with the insertion error."""
        insertion_error = InsertionError("insert failed")

        result = loader.save(unique_items()[0])
        store_spy.complete_deletion()
        store_spy.complete_insertion(error=insertion_error)

        assert result.exception(timeout=1) is insertion_error

    def test_save_succeeds_on_successful_insertion(
        self, loader, store_spy, unique_items
    ):
        """Test that save completes once the insert succeeds."""
        result = loader.save(unique_items()[0])
        assert not result.done()

        store_spy.complete_deletion()
        assert not result.done()

        store_spy.complete_insertion()
        assert result.result(timeout=1) is None

    def test_save_uses_clock_at_insert_time(self, store_spy, unique_items, now):
        """Test that the timestamp is read after the delete completes."""
        clock = {"now": now}
        loader = LocalFeedLoader(store_spy, current_date=lambda: clock["now"])
        models, local_items = unique_items()

        loader.save(models)
        clock["now"] = now + timedelta(seconds=5)
        store_spy.complete_deletion()

        assert store_spy.messages[-1] == ("insert", local_items, now + timedelta(seconds=5))

    def test_save_does_not_insert_after_loader_released(
        self, store_spy, unique_items, now
    ):
        """Test that a released loader doesn't continue a save."""
        loader = LocalFeedLoader(store_spy, current_date=lambda: now)
        result = loader.save(unique_items()[0])

        del loader
        gc.collect()
        store_spy.complete_deletion()

        assert store_spy.messages == [DELETE]
        assert result.cancelled()

    def test_save_drops_insertion_result_after_loader_released(
        self, store_spy, unique_items, now
    ):
        """Test that a released loader doesn't deliver the insertion outcome."""
        loader = LocalFeedLoader(store_spy, current_date=lambda: now)
        result = loader.save(unique_items()[0])
        store_spy.complete_deletion()

        del loader
        gc.collect()
        store_spy.complete_insertion(error=InsertionError("insert failed"))

        assert result.cancelled()


class TestLoad:
    """Test loading the cached feed."""

    def test_load_requests_cache_retrieval(self, loader, store_spy):
        """Test that load retrieves from the store."""
        loader.load()
        assert store_spy.messages == [RETRIEVE]

    def test_load_fails_on_retrieval_error(self, loader, store_spy):
        """Test that load completes with the retrieval error."""
        retrieval_error = RetrievalError("corrupt")

        result = loader.load()
        store_spy.complete_retrieval(error=retrieval_error)

        assert result.exception(timeout=1) is retrieval_error

    def test_load_delivers_no_items_on_empty_cache(self, loader, store_spy):
        """Test that an empty cache loads as an empty feed."""
        result = loader.load()
        store_spy.complete_retrieval(cached=None)

        assert result.result(timeout=1) == []

    def test_load_delivers_items_on_fresh_cache(
        self, loader, store_spy, unique_items, now
    ):
        """Test that a feed one second short of expiry is served."""
        models, local_items = unique_items()
        timestamp = now - timedelta(days=7) + timedelta(seconds=1)

        result = loader.load()
        store_spy.complete_retrieval(cached=cached_at(local_items, timestamp))

        assert result.result(timeout=1) == models

    def test_load_delivers_no_items_on_expiring_cache(
        self, loader, store_spy, unique_items, now
    ):
        """Test that a feed exactly seven days old is not served."""
        _, local_items = unique_items()

        result = loader.load()
        store_spy.complete_retrieval(
            cached=cached_at(local_items, now - timedelta(days=7))
        )

        assert result.result(timeout=1) == []

    def test_load_delivers_no_items_on_expired_cache(
        self, loader, store_spy, unique_items, now
    ):
        """Test that a feed older than seven days is not served."""
        _, local_items = unique_items()
        timestamp = now - timedelta(days=7) - timedelta(seconds=1)

        result = loader.load()
        store_spy.complete_retrieval(cached=cached_at(local_items, timestamp))

        assert result.result(timeout=1) == []

    @pytest.mark.parametrize("age", [timedelta(days=1), timedelta(days=30)])
    def test_load_has_no_side_effects(self, loader, store_spy, unique_items, now, age):
        """Test that load never deletes, fresh or expired."""
        _, local_items = unique_items()

        loader.load()
        store_spy.complete_retrieval(cached=cached_at(local_items, now - age))

        assert store_spy.messages == [RETRIEVE]

    def test_load_has_no_side_effects_on_retrieval_error(self, loader, store_spy):
        """Test that load leaves an unreadable record for validate_cache."""
        loader.load()
        store_spy.complete_retrieval(error=RetrievalError("corrupt"))

        assert store_spy.messages == [RETRIEVE]

    def test_load_uses_injected_policy(self, store_spy, unique_items, now):
        """Test that the policy's max age decides freshness."""
        loader = LocalFeedLoader(
            store_spy, current_date=lambda: now, policy=FeedCachePolicy(max_age_days=1)
        )
        _, local_items = unique_items()

        result = loader.load()
        store_spy.complete_retrieval(
            cached=cached_at(local_items, now - timedelta(days=2))
        )

        assert result.result(timeout=1) == []

    def test_load_fails_when_clock_raises(self, store_spy, unique_items, now):
        """Test that a failing clock fails the load instead of leaving it pending."""
        loader = LocalFeedLoader(store_spy, current_date=broken_clock)
        _, local_items = unique_items()

        result = loader.load()
        store_spy.complete_retrieval(cached=cached_at(local_items, now))

        error = result.exception(timeout=1)
        assert isinstance(error, RuntimeError)
        assert store_spy.messages == [RETRIEVE]

    def test_load_drops_result_after_loader_released(self, store_spy, now):
        """Test that a released loader doesn't deliver a load result."""
        loader = LocalFeedLoader(store_spy, current_date=lambda: now)
        result = loader.load()

        del loader
        gc.collect()
        store_spy.complete_retrieval(cached=None)

        assert result.cancelled()


class TestValidateCache:
    """Test cache validation."""

    def test_validate_deletes_cache_on_retrieval_error(self, loader, store_spy):
        """Test that an unreadable record is deleted once."""
        loader.validate_cache()
        store_spy.complete_retrieval(error=RetrievalError("corrupt"))

        assert store_spy.messages == [RETRIEVE, DELETE]

    def test_validate_does_not_delete_empty_cache(self, loader, store_spy):
        """Test that an empty cache is left alone."""
        loader.validate_cache()
        store_spy.complete_retrieval(cached=None)

        assert store_spy.messages == [RETRIEVE]

    def test_validate_does_not_delete_fresh_cache(
        self, loader, store_spy, unique_items, now
    ):
        """Test that a fresh record is kept."""
        _, local_items = unique_items()
        timestamp = now - timedelta(days=7) + timedelta(seconds=1)

        loader.validate_cache()
        store_spy.complete_retrieval(cached=cached_at(local_items, timestamp))

        assert store_spy.messages == [RETRIEVE]

    def test_validate_deletes_expiring_cache(
        self, loader, store_spy, unique_items, now
    ):
        """Test that a record exactly seven days old is deleted once."""
        _, local_items = unique_items()

        loader.validate_cache()
        store_spy.complete_retrieval(
            cached=cached_at(local_items, now - timedelta(days=7))
        )

        assert store_spy.messages == [RETRIEVE, DELETE]

    def test_validate_deletes_expired_cache(
        self, loader, store_spy, unique_items, now
    ):
        """Test that an expired record is deleted once."""
        _, local_items = unique_items()
        timestamp = now - timedelta(days=7) - timedelta(seconds=1)

        loader.validate_cache()
        store_spy.complete_retrieval(cached=cached_at(local_items, timestamp))

        assert store_spy.messages == [RETRIEVE, DELETE]

    def test_validate_completes_after_cleanup(self, loader, store_spy):
        """Test that the returned future resolves after the delete finishes."""
        result = loader.validate_cache()
        store_spy.complete_retrieval(error=RetrievalError("corrupt"))
        assert not result.done()

        store_spy.complete_deletion()
        assert result.result(timeout=1) is None

    def test_validate_ignores_deletion_error(self, loader, store_spy, caplog):
        """Test that a failed cleanup is logged, not reported."""
        result = loader.validate_cache()
        store_spy.complete_retrieval(error=RetrievalError("corrupt"))
        store_spy.complete_deletion(error=DeletionError("delete failed"))

        assert result.result(timeout=1) is None
        assert "delete failed" in caplog.text

    def test_validate_does_not_delete_after_loader_released(self, store_spy, now):
        """Test that a released loader doesn't clean up."""
        loader = LocalFeedLoader(store_spy, current_date=lambda: now)
        result = loader.validate_cache()

        del loader
        gc.collect()
        store_spy.complete_retrieval(error=RetrievalError("corrupt"))

        assert store_spy.messages == [RETRIEVE]
        assert result.cancelled()

    def test_validate_completes_when_clock_raises(
        self, store_spy, unique_items, now, caplog
    ):
        """Test that a failing clock is logged and the record is kept."""
        loader = LocalFeedLoader(store_spy, current_date=broken_clock)
        _, local_items = unique_items()

        result = loader.validate_cache()
        store_spy.complete_retrieval(cached=cached_at(local_items, now))

        assert result.result(timeout=1) is None
        assert store_spy.messages == [RETRIEVE]
        assert "clock unavailable" in caplog.text
