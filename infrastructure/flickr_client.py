"""Flickr REST client for photo search and image download.

Calls are blocking and must run off the UI thread. Failures are returned as
`Err(FlickrError)` values rather than raised.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from loguru import logger
import requests

from core.models import PhotoRecord, SearchResults
from core.result import Err, Ok, Result
from core.services.interfaces import FlickrError
from infrastructure.image_service import decode_image, image_size

API_URL = "https://api.flickr.com/services/rest/"
SEARCH_METHOD = "flickr.photos.search"
DEFAULT_PER_PAGE = 20
DEFAULT_TIMEOUT_SEC = 30.0


class FlickrClient:
    """Synchronous client for `flickr.photos.search` and static image URLs."""

    def __init__(
        self,
        api_key: str,
        per_page: int = DEFAULT_PER_PAGE,
        timeout: float = DEFAULT_TIMEOUT_SEC,
        session: requests.Session | None = None,
        decoder: Callable[[bytes], Any] = decode_image,
    ) -> None:
        """Create a client.

        Args:
            api_key: Flickr API key.
            per_page: Number of photos requested per search.
            timeout: Per-request timeout in seconds.
            session: Optional pre-configured `requests.Session`.
            decoder: Turns downloaded bytes into an image object.
        """
        self.api_key = api_key
        self.per_page = per_page
        self.timeout = timeout
        self.session = session or requests.Session()
        self._decode = decoder

    @classmethod
    def from_settings(cls, settings: Any) -> FlickrClient:
        """Build a client from `flickr.*` settings keys."""
        api_key = str(settings.get("flickr.api_key", "") or "")
        if not api_key or api_key.startswith("$"):
            logger.warning("Flickr API key is not configured; searches will fail")
        per_page = settings.get_int("flickr.per_page", DEFAULT_PER_PAGE)
        try:
            timeout = float(settings.get("flickr.timeout_sec", DEFAULT_TIMEOUT_SEC))
        except (ValueError, TypeError):
            timeout = DEFAULT_TIMEOUT_SEC
        return cls(api_key=api_key, per_page=per_page, timeout=timeout)

    # Public API

    def search(self, term: str) -> Result[SearchResults]:
        """Search Flickr for `term` and download the thumbnail of every hit."""
        params = {
            "method": SEARCH_METHOD,
            "api_key": self.api_key,
            "text": term,
            "per_page": self.per_page,
            "extras": "url_m",
            "format": "json",
            "nojsoncallback": 1,
        }
        try:
            response = self.session.get(API_URL, params=params, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.exceptions.RequestException as ex:
            return Err(FlickrError(f"Search request failed: {ex}"))
        except ValueError as ex:
            return Err(FlickrError(f"Invalid JSON in search response: {ex}"))

        if not isinstance(payload, dict):
            return Err(FlickrError("Unknown API response"))
        stat = payload.get("stat")
        if stat == "fail":
            return Err(FlickrError(str(payload.get("message", "Flickr error")), payload.get("code")))
        photos_node = payload.get("photos")
        if stat != "ok" or not isinstance(photos_node, dict):
            return Err(FlickrError("Unknown API response"))
        raw_photos = photos_node.get("photo")
        if not isinstance(raw_photos, list):
            return Err(FlickrError("Unknown API response"))

        results = SearchResults(search_term=term)
        for item in raw_photos:
            photo = self._parse_photo(item)
            if photo is None:
                continue
            thumb = self._download(photo.thumbnail_url)
            if isinstance(thumb, Err):
                logger.debug("Skipping photo {}: {}", photo.photo_id, thumb.reason)
                continue
            if photo.width <= 0 or photo.height <= 0:
                w, h = image_size(thumb.value)
                photo = PhotoRecord(
                    photo_id=photo.photo_id,
                    server=photo.server,
                    secret=photo.secret,
                    title=photo.title,
                    width=w,
                    height=h,
                    farm=photo.farm,
                )
            results.photos.append(photo)
            results.thumbnails[photo.photo_id] = thumb.value

        logger.info("Found {} matching '{}'", len(results.photos), term)
        return Ok(results)

    def load_large_image(self, photo: PhotoRecord) -> Result[Any]:
        """Download and decode the large variant of `photo`."""
        return self._download(photo.large_url)

    # Internal helpers

    def _download(self, url: str) -> Result[Any]:
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
            return Ok(self._decode(response.content))
        except requests.exceptions.RequestException as ex:
            return Err(FlickrError(f"Image download failed for {url}: {ex}"))
        except ValueError as ex:
            return Err(FlickrError(f"Image decode failed for {url}: {ex}"))

    @staticmethod
    def _parse_photo(item: Any) -> PhotoRecord | None:
        """Parse one entry of `photos.photo` into a `PhotoRecord`."""
        if not isinstance(item, dict):
            return None
        photo_id = item.get("id")
        server = item.get("server")
        secret = item.get("secret")
        if not photo_id or not server or not secret:
            return None
        farm = item.get("farm")
        return PhotoRecord(
            photo_id=str(photo_id),
            server=str(server),
            secret=str(secret),
            title=str(item.get("title") or ""),
            width=_as_int(item.get("width_m")),
            height=_as_int(item.get("height_m")),
            farm=_as_int(farm) if farm is not None else None,
        )


def _as_int(value: Any) -> int:
    try:
        return int(value)
    except (ValueError, TypeError):
        return 0
