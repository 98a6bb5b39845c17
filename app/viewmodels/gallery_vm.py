"""View-model for the Flickr search gallery screen.

Owns the list of search groups (newest first), the screen state, and the
image cache. It does not import Qt: the window implements `GalleryView` and
background work goes through a `TaskRunner`.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol
import weakref

from loguru import logger

from core.image_cache import ImageCache
from core.models import GridPosition, PhotoRecord, SearchResults
from core.result import Err, Result
from core.services.gallery_state import (
    Browsing,
    Collapse,
    Expanded,
    ScreenState,
    Sharing,
    StartSharing,
    StopSharing,
    Tap,
    expanded_position,
    is_selected,
    selection_of,
    transition,
)
from core.services.interfaces import TaskRunner
from core.services.layout_service import LayoutService
from core.services.reorder_service import ReorderService


class GalleryView(Protocol):
    """Callbacks the view-model uses to drive the screen."""

    def reload_all(self) -> None:
        """Rebuild every section and cell."""
        ...

    def reload_items(self, positions: list[GridPosition]) -> None:
        """Re-render only the given cells."""
        ...

    def scroll_to(self, position: GridPosition) -> None:
        """Bring the cell into view once pending reloads are applied."""
        ...

    def show_image(self, position: GridPosition, image: Any) -> None:
        """Replace the image displayed by a cell."""
        ...

    def set_item_busy(self, position: GridPosition, busy: bool) -> None:
        """Show or hide a cell's loading indicator."""
        ...

    def update_sharing(self, sharing: bool, selected_count: int) -> None:
        """Reflect sharing mode and the live selection count."""
        ...

    def present_share(self, images: list[Any], on_complete: Callable[[], None]) -> None:
        """Present the share sheet; `on_complete` runs however it is closed."""
        ...


class GalleryVM:
    """Gallery screen controller.

    Mediates between the Flickr task runner and the grid view.
    """

    def __init__(
        self,
        runner: TaskRunner,
        layout: LayoutService | None = None,
        reorder: ReorderService | None = None,
        image_cache: ImageCache | None = None,
    ) -> None:
        """Create a GalleryVM.

        Args:
            runner: Background runner for searches and large-image loads.
            layout: Cell sizing service (defaults to `LayoutService`).
            reorder: Drag reorder service (defaults to `ReorderService`).
            image_cache: Image cache (a fresh one by default).
        """
        self._runner = runner
        self._layout = layout or LayoutService()
        self._reorder = reorder or ReorderService()
        self.image_cache = image_cache or ImageCache()
        self.searches: list[SearchResults] = []
        self._state: ScreenState = Browsing()
        self._pending_large: set[str] = set()
        self._failed_large: set[str] = set()
        self._view: GalleryView | None = None

    def bind_view(self, view: GalleryView | None) -> None:
        self._view = view

    # State accessors

    @property
    def state(self) -> ScreenState:
        return self._state

    @property
    def layout(self) -> LayoutService:
        return self._layout

    @property
    def expanded_position(self) -> GridPosition | None:
        return expanded_position(self._state)

    @property
    def is_sharing(self) -> bool:
        return isinstance(self._state, Sharing)

    @property
    def selection(self) -> list[PhotoRecord]:
        """Selected photos in selection order (empty unless sharing)."""
        return list(selection_of(self._state))

    # Data source

    def section_count(self) -> int:
        return len(self.searches)

    def item_count(self, section: int) -> int:
        return len(self.searches[section].photos)

    def search_term(self, section: int) -> str:
        return self.searches[section].search_term

    def photo_at(self, position: GridPosition) -> PhotoRecord:
        return self.searches[position.section].photos[position.item]

    def photo_count(self) -> int:
        """Total number of photos across all groups."""
        return sum(len(g.photos) for g in self.searches)

    def is_valid(self, position: GridPosition) -> bool:
        return 0 <= position.section < len(self.searches) and 0 <= position.item < len(
            self.searches[position.section].photos
        )

    def is_selected(self, position: GridPosition) -> bool:
        return is_selected(selection_of(self._state), self.photo_at(position))

    # Search

    def submit_search(self, term: str, on_finished: Callable[[], None] | None = None) -> None:
        """Start a search for `term`.

        `on_finished` runs when the search completes, whatever the outcome.
        """
        logger.info("Searching Flickr for '{}'", term)
        vm_ref = weakref.ref(self)

        def _done(result: Result[SearchResults]) -> None:
            if on_finished is not None:
                on_finished()
            vm = vm_ref()
            if vm is None:
                logger.debug("Search for '{}' finished after gallery was released", term)
                return
            vm._on_search_finished(result)

        self._runner.run_search(term, _done)

    def _on_search_finished(self, result: Result[SearchResults]) -> None:
        if isinstance(result, Err):
            logger.error("Error searching: {}", result.reason)
            return
        results = result.value
        for photo_id, image in results.thumbnails.items():
            self.image_cache.set_thumbnail(photo_id, image)
        results.thumbnails = {}
        logger.debug("Adding group '{}' with {} photo(s)", results.search_term, len(results.photos))

        self.searches.insert(0, results)
        # the expanded record moved down one section
        if isinstance(self._state, Expanded):
            pos = self._state.position
            self._state = Expanded(GridPosition(pos.section + 1, pos.item))
        if self._view is not None:
            self._view.reload_all()

    # Cell rendering

    def image_for(self, position: GridPosition) -> Any:
        """Image a cell should display right now.

        For the expanded cell without a cached large image this returns the
        thumbnail and starts loading the large image once per record.
        """
        photo = self.photo_at(position)
        thumbnail = self.image_cache.thumbnail(photo.photo_id)
        if self.expanded_position != position:
            return thumbnail
        large = self.image_cache.large_image(photo.photo_id)
        if large is not None:
            return large
        self._request_large_image(position, photo)
        return thumbnail

    def is_loading(self, position: GridPosition) -> bool:
        return self.photo_at(position).photo_id in self._pending_large

    def _request_large_image(self, position: GridPosition, photo: PhotoRecord) -> None:
        if photo.photo_id in self._pending_large or photo.photo_id in self._failed_large:
            return
        self._pending_large.add(photo.photo_id)
        if self._view is not None:
            self._view.set_item_busy(position, True)
        vm_ref = weakref.ref(self)

        def _loaded(result: Result[Any]) -> None:
            vm = vm_ref()
            if vm is None:
                return
            vm._on_large_image_loaded(photo, result)

        self._runner.run_large_image(photo, _loaded)

    def _on_large_image_loaded(self, photo: PhotoRecord, result: Result[Any]) -> None:
        self._pending_large.discard(photo.photo_id)
        current = self.expanded_position
        # only a cell still expanded on this Flickr photo may be updated
        still_expanded = current is not None and self.photo_at(current).photo_id == photo.photo_id

        if isinstance(result, Err):
            logger.error("Large image load failed for {}: {}", photo.photo_id, result.reason)
            self._failed_large.add(photo.photo_id)
            if still_expanded and self._view is not None:
                self._view.set_item_busy(current, False)
            return

        self.image_cache.set_large_image(photo.photo_id, result.value)
        if not still_expanded:
            logger.debug("Discarding stale large image for {}", photo.photo_id)
            return
        if self._view is not None:
            self._view.set_item_busy(current, False)
            self._view.show_image(current, result.value)

    # Sizing

    def cell_size(
        self, position: GridPosition, bounds_width: float, bounds_height: float
    ) -> tuple[int, int]:
        """Pixel size of the cell at `position` for a grid of the given bounds."""
        if self.expanded_position == position:
            photo = self.photo_at(position)
            return self._layout.expanded_size(photo.aspect_ratio, bounds_width, bounds_height)
        side = self._layout.thumbnail_side(bounds_width)
        return side, side

    # Interaction

    def tap(self, position: GridPosition) -> None:
        """Handle a tap: expand/collapse, or toggle selection while sharing."""
        if not self.is_valid(position):
            logger.warning("Tap on invalid position {}", position)
            return
        old = self._state
        self._state = transition(old, Tap(position, self.photo_at(position)))

        if isinstance(self._state, Sharing):
            if self._view is not None:
                self._view.reload_items([position])
                self._view.update_sharing(True, len(self._state.selection))
            return

        previous = expanded_position(old)
        current = self.expanded_position
        changed = [p for p in (previous, current) if p is not None]
        if self._view is not None:
            self._view.reload_items(changed)
            if current is not None:
                self._view.scroll_to(current)

    def share_pressed(self) -> None:
        """Share control: toggle sharing, or share the selected thumbnails."""
        if not self.searches:
            return
        state = self._state
        if not isinstance(state, Sharing):
            self._set_sharing(True)
            return
        if not state.selection:
            self._set_sharing(False)
            return

        images: list[Any] = []
        for photo in state.selection:
            thumb = self.image_cache.thumbnail(photo.photo_id)
            if thumb is not None:
                images.append(thumb)
        if not images:
            logger.info("No cached thumbnails among {} selected photo(s)", len(state.selection))
            return
        logger.info("Sharing {} photo(s)", len(images))
        if self._view is not None:
            self._view.present_share(images, self.share_finished)

    def share_finished(self) -> None:
        """Share sheet closed: leave sharing and drop the selection."""
        self._set_sharing(False)

    def _set_sharing(self, sharing: bool) -> None:
        old = self._state
        self._state = transition(old, StartSharing() if sharing else StopSharing())
        if self._view is None:
            return
        previous = expanded_position(old)
        if previous is not None:
            self._view.reload_items([previous])
        if selection_of(old):
            self._view.reload_all()
        self._view.update_sharing(self.is_sharing, len(selection_of(self._state)))

    # Drag and drop

    def can_drag(self, position: GridPosition) -> bool:
        return self.is_valid(position) and self.image_cache.has_thumbnail(
            self.photo_at(position).photo_id
        )

    def drag_payload(self, position: GridPosition) -> Any:
        """Thumbnail offered while dragging, or None when the cell cannot be dragged."""
        if not self.can_drag(position):
            return None
        return self.image_cache.thumbnail(self.photo_at(position).photo_id)

    def move(self, source: GridPosition, destination: GridPosition) -> GridPosition:
        """Move the photo at `source` to `destination` (remove, then insert).

        Any expanded cell is collapsed. Returns the final position.
        """
        final = self._reorder.move(self.searches, source, destination)
        logger.debug("Moved photo from {} to {}", source, final)
        self._state = transition(self._state, Collapse())
        if self._view is not None:
            self._view.reload_all()
        return final
