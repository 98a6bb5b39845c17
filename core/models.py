"""Core domain models for Flickr photo records and search groups."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

PHOTO_URL_TEMPLATE = "https://live.staticflickr.com/{server}/{photo_id}_{secret}_{size}.jpg"
THUMBNAIL_SIZE_SUFFIX = "m"
LARGE_SIZE_SUFFIX = "b"


@dataclass(frozen=True)
class PhotoRecord:
    """A single photo returned by a Flickr search.

    Identity and dimensions are fixed at creation. Decoded images live in
    `core.image_cache.ImageCache`, keyed by `photo_id`.
    """

    photo_id: str
    server: str
    secret: str
    title: str = ""
    width: int = 0
    height: int = 0
    farm: int | None = None

    def image_url(self, size: str = THUMBNAIL_SIZE_SUFFIX) -> str:
        """Static image URL for the given Flickr size suffix."""
        return PHOTO_URL_TEMPLATE.format(
            server=self.server, photo_id=self.photo_id, secret=self.secret, size=size
        )

    @property
    def thumbnail_url(self) -> str:
        return self.image_url(THUMBNAIL_SIZE_SUFFIX)

    @property
    def large_url(self) -> str:
        return self.image_url(LARGE_SIZE_SUFFIX)

    @property
    def aspect_ratio(self) -> float:
        """Width / height, or 1.0 when dimensions are unknown."""
        if self.width <= 0 or self.height <= 0:
            return 1.0
        return self.width / self.height


@dataclass
class SearchResults:
    """One query's ordered list of photos.

    `thumbnails` carries the decoded thumbnails fetched with the search; the
    gallery moves them into its image cache when the group arrives.
    """

    search_term: str
    photos: list[PhotoRecord] = field(default_factory=list)
    thumbnails: dict[str, Any] = field(default_factory=dict, repr=False)


@dataclass(frozen=True, order=True)
class GridPosition:
    """Address of a cell: section (search group) and item within it."""

    section: int
    item: int
