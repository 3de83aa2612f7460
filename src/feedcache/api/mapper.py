"""Decoding of the remote feed's JSON envelope."""

import uuid
from typing import Any, Dict, List

import orjson

from feedcache.models import FeedItem

OK_200 = 200


class FeedItemsMapper:
    """Maps a raw HTTP response to feed items.

    Only a 200 response whose body is ``{"items": [...]}`` is accepted. Each
    item needs an ``id`` UUID string and an ``image`` URL string;
    ``description`` and ``location`` may be missing or null. One bad item
    rejects the whole response.
    """

    @staticmethod
    def map(data: bytes, status_code: int) -> List[FeedItem]:
        """Decode a response body.

        Args:
            data: Response body
            status_code: HTTP status code

        Returns:
            Decoded items, possibly empty

        Raises:
            ValueError: If the status or body is not acceptable
        """
        if status_code != OK_200:
            raise ValueError(f"Unexpected status code {status_code}")

        try:
            root = orjson.loads(data)
        except orjson.JSONDecodeError as e:
            raise ValueError(f"Response is not valid JSON: {e}") from e

        if not isinstance(root, dict) or not isinstance(root.get("items"), list):
            raise ValueError("Response has no 'items' list")

        return [_decode_item(item) for item in root["items"]]


def _decode_item(item: Dict[str, Any]) -> FeedItem:
    if not isinstance(item, dict):
        raise ValueError(f"Feed item must be an object, got {type(item).__name__}")

    item_id = item.get("id")
    image = item.get("image")
    if not isinstance(item_id, str):
        raise ValueError("Feed item is missing 'id'")
    if not isinstance(image, str) or not image:
        raise ValueError("Feed item is missing 'image'")

    optional = {}
    for name in ("description", "location"):
        value = item.get(name)
        if value is not None and not isinstance(value, str):
            raise ValueError(f"Feed item field '{name}' must be a string")
        optional[name] = value

    return FeedItem(
        id=uuid.UUID(item_id),
        description=optional["description"],
        location=optional["location"],
        image_url=image,
    )
