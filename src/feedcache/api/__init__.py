"""Remote feed loading over HTTP.

Key components:
- RemoteFeedLoader: Fetch and decode the feed from a URL
- HTTPClient: Client interface (RequestsHTTPClient)
- FeedItemsMapper: JSON envelope decoding
"""

from feedcache.api.client import HTTPClient, HTTPResponse, RequestsHTTPClient
from feedcache.api.mapper import FeedItemsMapper
from feedcache.api.remote import (
    ConnectivityError,
    InvalidDataError,
    RemoteFeedError,
    RemoteFeedLoader,
)

__all__ = [
    "RemoteFeedLoader",
    "HTTPClient",
    "HTTPResponse",
    "RequestsHTTPClient",
    "FeedItemsMapper",
    "RemoteFeedError",
    "ConnectivityError",
    "InvalidDataError",
]
