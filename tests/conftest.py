"""Shared fixtures for feedcache tests."""

import tempfile
import uuid
from concurrent.futures import Future
from pathlib import Path

import pytest

from feedcache.cache.models import to_local
from feedcache.cache.store import FeedStore
from feedcache.models import FeedItem


class FeedStoreSpy(FeedStore):
    """Store that records calls and leaves every future pending.

    Tests complete the recorded operations explicitly, which lets them
    check exactly which store calls an operation makes and in what order.
    """

    DELETE = ("delete",)
    RETRIEVE = ("retrieve",)

    def __init__(self):
        self.messages = []
        self._deletions = []
        self._insertions = []
        self._retrievals = []

    def delete(self):
        self.messages.append(self.DELETE)
        future = Future()
        self._deletions.append(future)
        return future

    def insert(self, feed, timestamp):
        self.messages.append(("insert", list(feed), timestamp))
        future = Future()
        self._insertions.append(future)
        return future

    def retrieve(self):
        self.messages.append(self.RETRIEVE)
        future = Future()
        self._retrievals.append(future)
        return future

    def complete_deletion(self, error=None, index=0):
        _complete(self._deletions[index], None, error)

    def complete_insertion(self, error=None, index=0):
        _complete(self._insertions[index], None, error)

    def complete_retrieval(self, cached=None, error=None, index=0):
        _complete(self._retrievals[index], cached, error)


def _complete(future, value, error):
    if error is not None:
        future.set_exception(error)
    else:
        future.set_result(value)


def make_item(description=None, location=None):
    return FeedItem(
        id=uuid.uuid4(),
        description=description,
        location=location,
        image_url=f"https://example.com/{uuid.uuid4().hex}.png",
    )


@pytest.fixture
def temp_cache_dir():
    """Create temporary cache directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def store_path(temp_cache_dir):
    """Path of the cached feed file inside the temporary directory."""
    return temp_cache_dir / "feed-store.json"


@pytest.fixture
def store_spy():
    """Create a store spy."""
    return FeedStoreSpy()


@pytest.fixture
def unique_items():
    """Factory returning two distinct items as (models, local items)."""

    def factory():
        models = [
            make_item(description="a description", location="a location"),
            make_item(),
        ]
        return models, to_local(models)

    return factory


@pytest.fixture
def new_item():
    """Factory creating a distinct feed item on each call."""
    return make_item
