"""Common interface for anything that produces a feed."""

from abc import ABC, abstractmethod
from concurrent.futures import Future
from typing import List

from feedcache.models import FeedItem


class FeedLoader(ABC):
    """Abstract base class for feed loaders.

    Implementations deliver the feed asynchronously: ``load()`` returns
    immediately with a future that resolves to the list of items or fails
    with a loader-specific error.

    Examples:
        >>> items = loader.load().result(timeout=5)
    """

    @abstractmethod
    def load(self) -> "Future[List[FeedItem]]":
        """Start loading the feed.

        Returns:
            Future resolving to the loaded items
        """
        pass
