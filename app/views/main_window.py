"""Main window of the Flickr search gallery.

Hosts the search toolbar and the photo grid, and implements the
`GalleryView` callbacks the view-model drives.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from PySide6.QtGui import QAction
from PySide6.QtWidgets import QMainWindow
from loguru import logger

from app.viewmodels.gallery_vm import GalleryVM
from app.views.components.menu_controller import MenuController
from app.views.constants import STATUS_TIMEOUT_MS, WINDOW_TITLE
from app.views.dialogs.share_dialog import ShareDialog
from app.views.layout.layout_manager import LayoutManager
from app.views.photo_grid import PhotoGridView
from core.models import GridPosition
from infrastructure.image_service import ShareService
from infrastructure.logging import open_latest_log, open_log_directory


class MainWindow(QMainWindow):
    """Gallery screen: search field, share control, and the sectioned grid."""

    def __init__(
        self,
        vm: GalleryVM,
        share_service: ShareService | None = None,
        settings: Any | None = None,
    ) -> None:
        """Initialize MainWindow.

        Args:
            vm: Gallery view-model
            share_service: Service used by the share dialog to export images
            settings: Settings instance for configuration
        """
        super().__init__()
        self._vm = vm
        self._share_service = share_service or ShareService()
        self._settings = settings
        self._busy_count = 0
        self._share_dialog: ShareDialog | None = None

        self._setup_ui()
        self._connect_signals()
        self._vm.bind_view(self)

    def _setup_ui(self) -> None:
        self.setWindowTitle(WINDOW_TITLE)

        self.menu_controller = MenuController(self)
        self.menu_controller.setup_menus()

        self.share_action = QAction("Share", self)
        self.layout_manager = LayoutManager(self)
        self.layout_manager.create_search_toolbar(self.share_action)
        self.search_field = self.layout_manager.search_field

        self.grid = PhotoGridView(self._vm, self)
        self.setCentralWidget(self.grid)

        self.layout_manager.setup_initial_window_size()
        self.statusBar().showMessage("Ready", STATUS_TIMEOUT_MS)

    def _connect_signals(self) -> None:
        handlers = {
            "share": self._vm.share_pressed,
            "exit": self.close,
            "open_latest_log": lambda: open_latest_log(self._log_dir()),
            "open_log_directory": lambda: open_log_directory(self._log_dir()),
        }
        self.menu_controller.connect_actions(handlers)
        self.share_action.triggered.connect(self._vm.share_pressed)
        self.search_field.returnPressed.connect(self.on_search_submitted)

    # Search field

    def on_search_submitted(self) -> None:
        """Start a search, then clear the field and drop focus without waiting."""
        term = self.search_field.text()
        self._set_busy(True)
        self._vm.submit_search(term, on_finished=lambda: self._set_busy(False))
        self.search_field.clear()
        self.search_field.clearFocus()

    def _set_busy(self, busy: bool) -> None:
        self._busy_count = max(0, self._busy_count + (1 if busy else -1))
        indicator = self.layout_manager.busy_indicator
        if indicator is not None:
            indicator.setVisible(self._busy_count > 0)

    # GalleryView

    def reload_all(self) -> None:
        self.grid.reload_all()
        self.statusBar().showMessage(
            f"{self._vm.photo_count()} photo(s) in {self._vm.section_count()} search(es)",
            STATUS_TIMEOUT_MS,
        )

    def reload_items(self, positions: list[GridPosition]) -> None:
        self.grid.reload_items(positions)

    def scroll_to(self, position: GridPosition) -> None:
        self.grid.scroll_to(position)

    def show_image(self, position: GridPosition, image: Any) -> None:
        self.grid.show_image(position, image)

    def set_item_busy(self, position: GridPosition, busy: bool) -> None:
        self.grid.set_item_busy(position, busy)

    def update_sharing(self, sharing: bool, selected_count: int) -> None:
        label = self.layout_manager.selection_label
        action = self.layout_manager.selection_action
        if label is not None:
            label.setText(f"{selected_count} photo(s) selected")
        if action is not None:
            action.setVisible(sharing)
        self.share_action.setText("Share Selected" if sharing and selected_count else "Share")

    def present_share(self, images: list[Any], on_complete: Callable[[], None]) -> None:
        default_dir = ""
        if self._settings is not None:
            default_dir = str(self._settings.get("share.default_dir", "") or "")
        dialog = ShareDialog(images, self._share_service, default_dir=default_dir, parent=self)

        def _finished(_result: int) -> None:
            logger.info("Share finished (action: {})", dialog.chosen_action)
            self._share_dialog = None
            on_complete()

        dialog.finished.connect(_finished)
        self._share_dialog = dialog
        dialog.open()

    # internals

    def _log_dir(self) -> str | None:
        if self._settings is None:
            return None
        return self._settings.get("logging.dir", None) or None
