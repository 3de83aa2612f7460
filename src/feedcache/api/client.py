"""HTTP client used to fetch the remote feed."""

import logging
from abc import ABC, abstractmethod
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional

import requests

from feedcache.cache.config import CacheConfig, get_global_config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HTTPResponse:
    """Body and status of a completed HTTP request."""

    data: bytes
    status_code: int


class HTTPClient(ABC):
    """Abstract base class for HTTP clients.

    The returned future may complete on any thread. A request that gets no
    response at all fails the future with the transport's exception.
    """

    @abstractmethod
    def get(self, url: str) -> "Future[HTTPResponse]":
        """Start a GET request.

        Args:
            url: URL to fetch

        Returns:
            Future resolving to the response, whatever its status code
        """
        pass


class RequestsHTTPClient(HTTPClient):
    """HTTP client backed by a ``requests.Session`` and a small thread pool."""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: float = 30.0,
        max_workers: int = 4,
    ):
        """Initialize the client.

        Args:
            session: Session to send requests with (a new one if None)
            timeout: Seconds before a request is abandoned
            max_workers: Number of requests that may run at once
        """
        self.session = session or requests.Session()
        self.timeout = timeout
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="feed-http"
        )

    @classmethod
    def from_config(cls, config: Optional[CacheConfig] = None) -> "RequestsHTTPClient":
        """Create a client using the configured request timeout.

        Args:
            config: Cache configuration (uses global if None)

        Returns:
            RequestsHTTPClient instance
        """
        config = config or get_global_config()
        return cls(timeout=config.request_timeout)

    def __enter__(self) -> "RequestsHTTPClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        """Wait for running requests and release the session."""
        self._executor.shutdown(wait=True)
        self.session.close()

    def get(self, url: str) -> "Future[HTTPResponse]":
        return self._executor.submit(self._get, url)

    def _get(self, url: str) -> HTTPResponse:
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error(f"Request to {url} failed: {e}")
            raise

        logger.debug(f"GET {url} -> {response.status_code}")
        return HTTPResponse(data=response.content, status_code=response.status_code)
