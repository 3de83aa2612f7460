"""Domain model for feed items."""

import uuid
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class FeedItem:
    """One entry of the content feed.

    Attributes:
        id: Unique identifier of the item
        description: Optional free-text description
        location: Optional human-readable location
        image_url: URL of the item's image
    """

    id: uuid.UUID
    description: Optional[str]
    location: Optional[str]
    image_url: str
