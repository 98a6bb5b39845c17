from __future__ import annotations

from collections.abc import Callable
from typing import Any

from PySide6.QtCore import QObject, QRunnable, Qt, QThreadPool, Signal, Slot
from loguru import logger

from core.models import PhotoRecord
from core.result import Err
from core.services.interfaces import FlickrError, ImageCallback, PhotoSearchClient, SearchCallback


class _TaskRelay(QObject):
    """Lives on the UI thread and hands worker results to their callbacks."""

    finished = Signal(object, object)  # callback, result

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self.finished.connect(self._deliver, Qt.QueuedConnection)

    @Slot(object, object)
    def _deliver(self, callback: Callable[[Any], None], result: Any) -> None:
        try:
            callback(result)
        except Exception as ex:  # pragma: no cover - UI callback
            logger.exception("Task callback failed: {}", ex)


class _ClientTask(QRunnable):
    """QRunnable running one blocking client call.

    Emits `relay.finished(callback, result)` upon completion; unexpected
    exceptions are turned into `Err(FlickrError)`.
    """

    def __init__(
        self,
        *,
        call: Callable[[], Any],
        callback: Callable[[Any], None],
        relay: _TaskRelay,
        label: str,
    ) -> None:
        super().__init__()
        self._call = call
        self._callback = callback
        self._relay = relay
        self._label = label

    def run(self) -> None:  # type: ignore[override]
        try:
            result = self._call()
        except Exception as ex:  # pragma: no cover - GUI background task
            logger.error("{} failed: {}", self._label, ex)
            result = Err(FlickrError(str(ex)))
        try:
            self._relay.finished.emit(self._callback, result)
        except RuntimeError:  # pragma: no cover - relay destroyed at shutdown
            logger.debug("{} finished after relay was destroyed", self._label)


class FlickrTaskRunner:
    """Dispatches Flickr client calls to the global thread pool."""

    def __init__(self, *, client: PhotoSearchClient, parent: QObject | None = None) -> None:
        self._client = client
        self._relay = _TaskRelay(parent)
        self._pool = QThreadPool.globalInstance()

    def run_search(self, term: str, callback: SearchCallback) -> None:
        """Search `term` in the background; `callback` runs on the UI thread."""
        client = self._client
        self._start(lambda: client.search(term), callback, f"Search '{term}'")

    def run_large_image(self, photo: PhotoRecord, callback: ImageCallback) -> None:
        """Load the large image of `photo`; `callback` runs on the UI thread."""
        client = self._client
        self._start(
            lambda: client.load_large_image(photo), callback, f"Large image {photo.photo_id}"
        )

    def _start(self, call: Callable[[], Any], callback: Callable[[Any], None], label: str) -> None:
        task = _ClientTask(call=call, callback=callback, relay=self._relay, label=label)
        self._pool.start(task)
