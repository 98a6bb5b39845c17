"""Core service interfaces shared by the view-model and infrastructure.

The view-model depends only on these protocols; the Flickr client and the Qt
task runner implement them, and tests provide in-memory fakes.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol

from core.models import PhotoRecord, SearchResults
from core.result import Result


class FlickrError(Exception):
    """Error reported by the remote photo service or the transport.

    Attributes:
        message: Human readable reason.
        code: Flickr API error code when the service returned one.
    """

    def __init__(self, message: str, code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code

    def __str__(self) -> str:
        if self.code is not None:
            return f"{self.message} (code {self.code})"
        return self.message


class PhotoSearchClient(Protocol):
    """Blocking remote search client; called off the UI thread."""

    def search(self, term: str) -> Result[SearchResults]:
        """Search photos matching `term`."""
        ...

    def load_large_image(self, photo: PhotoRecord) -> Result[Any]:
        """Fetch and decode the large image for `photo`."""
        ...


SearchCallback = Callable[[Result[SearchResults]], None]
ImageCallback = Callable[[Result[Any]], None]


class TaskRunner(Protocol):
    """Runs client calls in the background.

    Callbacks are invoked exactly once per request, on the UI thread.
    """

    def run_search(self, term: str, callback: SearchCallback) -> None:
        """Start a search for `term`."""
        ...

    def run_large_image(self, photo: PhotoRecord, callback: ImageCallback) -> None:
        """Start loading the large image of `photo`."""
        ...
