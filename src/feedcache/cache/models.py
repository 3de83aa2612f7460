"""Persisted representation of the cached feed."""

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from feedcache.models import FeedItem


@dataclass(frozen=True)
class LocalFeedItem:
    """Feed item as stored in the local cache.

    Mirrors :class:`~feedcache.models.FeedItem` field for field, but is kept
    separate so the on-disk format can change without touching the domain
    model.
    """

    id: uuid.UUID
    description: Optional[str]
    location: Optional[str]
    image_url: str

    @classmethod
    def from_feed_item(cls, item: FeedItem) -> "LocalFeedItem":
        """Create local item from a domain item."""
        return cls(
            id=item.id,
            description=item.description,
            location=item.location,
            image_url=item.image_url,
        )

    def to_feed_item(self) -> FeedItem:
        """Convert back to a domain item."""
        return FeedItem(
            id=self.id,
            description=self.description,
            location=self.location,
            image_url=self.image_url,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Encode item for the disk format.

        Returns:
            Dict with ``id``, ``description``, ``location`` and ``imageURL`` keys
        """
        return {
            "id": str(self.id),
            "description": self.description,
            "location": self.location,
            "imageURL": self.image_url,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LocalFeedItem":
        """Decode item from the disk format.

        Args:
            data: Dict produced by :meth:`to_dict`

        Returns:
            LocalFeedItem instance

        Raises:
            KeyError: If a required key is missing
            TypeError: If a field has the wrong type
            ValueError: If ``id`` is not a valid UUID
        """
        description = data.get("description")
        location = data.get("location")
        image_url = data["imageURL"]

        for name, value in (("description", description), ("location", location)):
            if value is not None and not isinstance(value, str):
                raise TypeError(f"Field '{name}' must be a string or null")
        if not isinstance(image_url, str):
            raise TypeError("Field 'imageURL' must be a string")

        return cls(
            id=uuid.UUID(data["id"]),
            description=description,
            location=location,
            image_url=image_url,
        )


@dataclass(frozen=True)
class CachedFeed:
    """A full snapshot of the feed together with the time it was cached."""

    feed: Tuple[LocalFeedItem, ...]
    timestamp: datetime

    def __post_init__(self):
        # Accept any iterable but store an immutable sequence
        object.__setattr__(self, "feed", tuple(self.feed))


def to_local(items: Iterable[FeedItem]) -> List[LocalFeedItem]:
    """Map domain items to their persisted representation."""
    return [LocalFeedItem.from_feed_item(item) for item in items]


def to_models(items: Iterable[LocalFeedItem]) -> List[FeedItem]:
    """Map persisted items back to domain items."""
    return [item.to_feed_item() for item in items]
