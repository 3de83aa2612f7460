"""Loader fetching the feed from a remote endpoint."""

import logging
import weakref
from concurrent.futures import Future
from typing import List

from feedcache.api.client import HTTPClient, HTTPResponse
from feedcache.api.mapper import FeedItemsMapper
from feedcache.loader import FeedLoader
from feedcache.models import FeedItem

logger = logging.getLogger(__name__)


class RemoteFeedError(Exception):
    """Base exception for remote feed errors."""

    pass


class ConnectivityError(RemoteFeedError):
    """Raised when the request got no response."""

    pass


class InvalidDataError(RemoteFeedError):
    """Raised when the response has the wrong status or shape."""

    pass


class RemoteFeedLoader(FeedLoader):
    """Loads the feed from a URL through an :class:`HTTPClient`.

    Errors are not retried. Like :class:`~feedcache.cache.LocalFeedLoader`,
    the client's completion only holds a weak reference to the loader; if the
    loader is collected first, the returned future is cancelled.

    Examples:
        >>> with RequestsHTTPClient() as client:
        ...     loader = RemoteFeedLoader("https://example.com/feed", client)
        ...     items = loader.load().result()
    """

    def __init__(self, url: str, client: HTTPClient):
        self.url = url
        self.client = client

    def load(self) -> "Future[List[FeedItem]]":
        """Fetch and decode the feed.

        Returns:
            Future resolving to the items. Fails with ConnectivityError if the
            request fails, or InvalidDataError if the response is unusable.
        """
        result: Future = Future()
        loader_ref = weakref.ref(self)
        url = self.url

        def on_response(request: Future) -> None:
            if loader_ref() is None or request.cancelled():
                result.cancel()
                return

            error = request.exception()
            if error is not None:
                logger.warning(f"Could not reach feed at {url}: {error}")
                result.set_exception(
                    ConnectivityError(f"Could not reach {url}: {error}")
                )
                return

            response: HTTPResponse = request.result()
            try:
                items = FeedItemsMapper.map(response.data, response.status_code)
            except ValueError as e:
                logger.warning(f"Invalid feed data from {url}: {e}")
                result.set_exception(InvalidDataError(str(e)))
                return

            result.set_result(items)

        try:
            self.client.get(url).add_done_callback(on_response)
        except Exception as e:
            result.set_exception(ConnectivityError(f"Could not reach {url}: {e}"))
        return result
