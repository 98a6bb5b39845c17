"""Per-record image cache owned by the gallery view-model."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from loguru import logger


@dataclass
class _CacheEntry:
    thumbnail: Any = None
    large: Any = None


class ImageCache:
    """Thumbnail and large-image slots keyed by `photo_id`.

    Each slot goes from empty to populated once and is never cleared; a second
    write to a populated slot is ignored.
    """

    def __init__(self) -> None:
        self._entries: dict[str, _CacheEntry] = {}

    def thumbnail(self, photo_id: str) -> Any:
        entry = self._entries.get(photo_id)
        return entry.thumbnail if entry else None

    def large_image(self, photo_id: str) -> Any:
        entry = self._entries.get(photo_id)
        return entry.large if entry else None

    def has_thumbnail(self, photo_id: str) -> bool:
        return self.thumbnail(photo_id) is not None

    def has_large_image(self, photo_id: str) -> bool:
        return self.large_image(photo_id) is not None

    def set_thumbnail(self, photo_id: str, image: Any) -> bool:
        """Store the thumbnail if the slot is empty. Returns True when stored."""
        if image is None:
            return False
        entry = self._entries.setdefault(photo_id, _CacheEntry())
        if entry.thumbnail is not None:
            logger.debug("Thumbnail already cached for {}", photo_id)
            return False
        entry.thumbnail = image
        return True

    def set_large_image(self, photo_id: str, image: Any) -> bool:
        """Store the large image if the slot is empty. Returns True when stored."""
        if image is None:
            return False
        entry = self._entries.setdefault(photo_id, _CacheEntry())
        if entry.large is not None:
            logger.debug("Large image already cached for {}", photo_id)
            return False
        entry.large = image
        return True

    def __len__(self) -> int:
        return len(self._entries)
