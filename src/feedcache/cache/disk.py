"""JSON file store for the cached feed."""

import errno
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Union
from zoneinfo import ZoneInfo

import orjson
from filelock import FileLock, Timeout

from feedcache.cache.config import CacheConfig, get_global_config
from feedcache.cache.models import CachedFeed, LocalFeedItem
from feedcache.cache.store import (
    DeletionError,
    FeedStore,
    InsertionError,
    RetrievalError,
)

logger = logging.getLogger(__name__)


def _encode_timestamp(timestamp: datetime) -> Dict[str, str]:
    """Encode timestamp as ``date`` plus the IANA zone name in ``tz``.

    The UTC offset in ``date`` alone would turn a zoneinfo timestamp into a
    fixed-offset one and change its calendar-day arithmetic across DST.
    """
    encoded = {"date": timestamp.isoformat()}
    if isinstance(timestamp.tzinfo, ZoneInfo):
        encoded["tz"] = timestamp.tzinfo.key
    return encoded


def _decode_timestamp(data: Dict[str, Any]) -> datetime:
    timestamp = datetime.fromisoformat(data["date"])
    zone = data.get("tz")
    if zone is None:
        return timestamp
    if not isinstance(zone, str) or timestamp.tzinfo is None:
        raise ValueError(f"Invalid timezone {zone!r} for {data['date']}")
    # ZoneInfoNotFoundError is a KeyError
    return timestamp.astimezone(ZoneInfo(zone))


class DiskFeedStore(FeedStore):
    """Stores the cached feed as a single JSON file.

    The file holds ``{"items": [...], "date": "<ISO-8601>"}``, plus a ``"tz"``
    key with the zone name when the timestamp uses ``zoneinfo``. Writes go to a
    temporary sibling file that is renamed over the target, so a reader sees
    either the previous record or the new one.

    Every operation runs on a dedicated single worker thread, which applies
    them strictly in submission order. While touching the file the worker also
    holds a file lock next to the store file.

    Only one DiskFeedStore should be pointed at a given path.

    Examples:
        >>> with DiskFeedStore(Path("/tmp/feed-store.json")) as store:
        ...     store.delete().result()
        ...     store.retrieve().result() is None
        True
    """

    def __init__(self, store_path: Union[str, Path], lock_timeout: float = 30.0):
        """Initialize disk store.

        Args:
            store_path: File holding the cached record
            lock_timeout: Seconds to wait for the file lock before failing
        """
        self.store_path = Path(store_path).expanduser()
        self.lock_path = self.store_path.with_name(self.store_path.name + ".lock")
        self.lock_timeout = lock_timeout
        self._executor = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="feed-store"
        )

    @classmethod
    def from_config(cls, config: Optional[CacheConfig] = None) -> "DiskFeedStore":
        """Create a store from configuration.

        Args:
            config: Cache configuration (uses global if None)

        Returns:
            DiskFeedStore instance
        """
        config = config or get_global_config()
        return cls(config.store_path, lock_timeout=config.lock_timeout)

    def __enter__(self) -> "DiskFeedStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        """Finish queued operations and stop the worker thread."""
        self._executor.shutdown(wait=True)

    def _lock(self) -> FileLock:
        return FileLock(self.lock_path, timeout=self.lock_timeout)

    # =========================================================================
    # Public operations
    # =========================================================================

    def retrieve(self) -> "Future[Optional[CachedFeed]]":
        return self._executor.submit(self._retrieve)

    def insert(
        self, feed: Sequence[LocalFeedItem], timestamp: datetime
    ) -> "Future[None]":
        # Items are copied at submission time
        return self._executor.submit(self._insert, list(feed), timestamp)

    def delete(self) -> "Future[None]":
        return self._executor.submit(self._delete)

    # =========================================================================
    # Worker-side implementations
    # =========================================================================

    def _retrieve(self) -> Optional[CachedFeed]:
        # Taking the lock would create the lock file and its directory
        if not self.store_path.exists():
            return None

        try:
            with self._lock():
                content = self.store_path.read_bytes()
        except FileNotFoundError:
            return None
        except Timeout as e:
            raise RetrievalError(
                f"Timeout acquiring lock for {self.store_path} after "
                f"{self.lock_timeout} seconds"
            ) from e
        except OSError as e:
            logger.error(f"Error reading feed cache {self.store_path}: {e}")
            raise RetrievalError(f"Cannot read feed cache: {e}") from e

        try:
            data = orjson.loads(content)
            items = [LocalFeedItem.from_dict(item) for item in data["items"]]
            timestamp = _decode_timestamp(data)
        except (
            orjson.JSONDecodeError,
            AttributeError,
            KeyError,
            TypeError,
            ValueError,
        ) as e:
            logger.error(f"Corrupt feed cache at {self.store_path}: {e}")
            raise RetrievalError(f"Cannot decode feed cache: {e}") from e

        logger.debug(f"Retrieved {len(items)} cached items from {self.store_path}")
        return CachedFeed(feed=items, timestamp=timestamp)

    def _insert(self, feed: Sequence[LocalFeedItem], timestamp: datetime) -> None:
        content = orjson.dumps(
            {
                "items": [item.to_dict() for item in feed],
                **_encode_timestamp(timestamp),
            }
        )

        # Write to temp file first (atomic write)
        temp_path = self.store_path.with_name(self.store_path.name + ".tmp")

        try:
            self.store_path.parent.mkdir(parents=True, exist_ok=True)
            with self._lock():
                try:
                    temp_path.write_bytes(content)
                    temp_path.replace(self.store_path)
                except OSError:
                    if temp_path.exists():
                        try:
                            temp_path.unlink()
                        except OSError as cleanup_error:
                            logger.warning(
                                f"Failed to clean up temp file {temp_path}: {cleanup_error}"
                            )
                    raise
        except Timeout as e:
            raise InsertionError(
                f"Timeout acquiring lock for {self.store_path} after "
                f"{self.lock_timeout} seconds"
            ) from e
        except PermissionError as e:
            raise InsertionError(
                f"Cannot write feed cache {self.store_path}: permission denied"
            ) from e
        except OSError as e:
            if e.errno == errno.ENOSPC:
                raise InsertionError(
                    f"Disk full while writing feed cache {self.store_path}"
                ) from e
            logger.error(f"OS error writing feed cache: {e}")
            raise InsertionError(f"Cannot write feed cache: {e}") from e

        logger.debug(f"Cached {len(feed)} items at {self.store_path}")

    def _delete(self) -> None:
        if not self.store_path.exists():
            return

        try:
            with self._lock():
                self.store_path.unlink()
        except FileNotFoundError:
            return
        except Timeout as e:
            raise DeletionError(
                f"Timeout acquiring lock for {self.store_path} after "
                f"{self.lock_timeout} seconds"
            ) from e
        except PermissionError as e:
            raise DeletionError(
                f"Cannot delete feed cache {self.store_path}: permission denied"
            ) from e
        except OSError as e:
            logger.error(f"OS error deleting feed cache: {e}")
            raise DeletionError(f"Cannot delete feed cache: {e}") from e

        logger.debug(f"Deleted feed cache at {self.store_path}")
