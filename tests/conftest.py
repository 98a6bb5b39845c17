# tests/conftest.py
# Shared fixtures: fake task runner, fake view, photo factories

from __future__ import annotations

from io import BytesIO
from typing import Any

import pytest
from PIL import Image

from app.viewmodels.gallery_vm import GalleryVM
from core.models import PhotoRecord, SearchResults
from core.result import Err, Ok
from core.services.interfaces import FlickrError


class FakeRunner:
    """TaskRunner that queues requests until the test resolves them."""

    def __init__(self) -> None:
        self.searches: list[tuple[str, Any]] = []
        self.large_requests: list[tuple[PhotoRecord, Any]] = []

    def run_search(self, term, callback) -> None:
        self.searches.append((term, callback))

    def run_large_image(self, photo, callback) -> None:
        self.large_requests.append((photo, callback))

    def finish_search(self, index: int, result) -> None:
        _, callback = self.searches[index]
        callback(result)

    def finish_large(self, index: int, result) -> None:
        _, callback = self.large_requests[index]
        callback(result)


class FakeView:
    """Records every GalleryView callback as (name, args)."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple]] = []
        self.share_requests: list[tuple[list, Any]] = []

    def reload_all(self) -> None:
        self.calls.append(("reload_all", ()))

    def reload_items(self, positions) -> None:
        self.calls.append(("reload_items", (list(positions),)))

    def scroll_to(self, position) -> None:
        self.calls.append(("scroll_to", (position,)))

    def show_image(self, position, image) -> None:
        self.calls.append(("show_image", (position, image)))

    def set_item_busy(self, position, busy) -> None:
        self.calls.append(("set_item_busy", (position, busy)))

    def update_sharing(self, sharing, selected_count) -> None:
        self.calls.append(("update_sharing", (sharing, selected_count)))

    def present_share(self, images, on_complete) -> None:
        self.calls.append(("present_share", (list(images),)))
        self.share_requests.append((list(images), on_complete))

    def names(self) -> list[str]:
        return [name for name, _ in self.calls]

    def last(self, name: str) -> tuple | None:
        for call_name, args in reversed(self.calls):
            if call_name == name:
                return args
        return None


def make_photo(photo_id: str, width: int = 240, height: int = 160, title: str = "") -> PhotoRecord:
    return PhotoRecord(
        photo_id=photo_id,
        server="65535",
        secret=f"s{photo_id}",
        title=title or f"Photo {photo_id}",
        width=width,
        height=height,
    )


def make_results(term: str, ids: list[str], with_thumbnails: bool = True) -> SearchResults:
    photos = [make_photo(i) for i in ids]
    thumbs = {p.photo_id: f"thumb-{p.photo_id}" for p in photos} if with_thumbnails else {}
    return SearchResults(search_term=term, photos=photos, thumbnails=thumbs)


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def view() -> FakeView:
    return FakeView()


@pytest.fixture
def vm(runner: FakeRunner, view: FakeView) -> GalleryVM:
    gallery = GalleryVM(runner)
    gallery.bind_view(view)
    return gallery


@pytest.fixture
def add_search(vm: GalleryVM, runner: FakeRunner):
    """Run a successful search through the fake runner and return its group."""

    def _add(term: str, ids: list[str], with_thumbnails: bool = True) -> SearchResults:
        results = make_results(term, ids, with_thumbnails)
        vm.submit_search(term)
        runner.finish_search(len(runner.searches) - 1, Ok(results))
        return results

    return _add


@pytest.fixture
def search_error() -> Err:
    return Err(FlickrError("Service unavailable", 105))


@pytest.fixture
def jpeg_bytes():
    """Factory for in-memory JPEG bytes of the given size."""

    def _make(width: int = 240, height: int = 160, color=(100, 150, 200)) -> bytes:
        buf = BytesIO()
        Image.new("RGB", (width, height), color=color).save(buf, "JPEG")
        return buf.getvalue()

    return _make
