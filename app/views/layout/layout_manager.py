"""LayoutManager: Builds the search toolbar and sizes the main window."""

from __future__ import annotations

from PySide6.QtCore import Qt
from PySide6.QtGui import QAction
from PySide6.QtWidgets import (
    QApplication,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QMainWindow,
    QProgressBar,
    QToolBar,
    QWidget,
)

from app.views.constants import SEARCH_PLACEHOLDER, THEME_COLOR


class LayoutManager:
    """Manages main window layout.

    This class encapsulates all layout-related functionality including:
    - Search field with its busy indicator
    - Share action and selection status label
    - Window sizing and positioning
    """

    # Layout constants
    SEARCH_FIELD_MIN_WIDTH = 280
    BUSY_INDICATOR_WIDTH = 60
    WINDOW_SIZE_RATIO = 0.5

    def __init__(self, main_window: QMainWindow) -> None:
        """Initialize with main window reference.

        Args:
            main_window: The QMainWindow to manage layout for
        """
        self.window = main_window
        self.search_field: QLineEdit | None = None
        self.busy_indicator: QProgressBar | None = None
        self.share_action: QAction | None = None
        self.selection_label: QLabel | None = None
        self.selection_action: QAction | None = None

    def create_search_toolbar(self, share_action: QAction) -> QToolBar:
        """Create the toolbar holding the search field, busy bar, and share control.

        Args:
            share_action: Action toggling sharing mode / sharing the selection

        Returns:
            The toolbar, already added to the window
        """
        toolbar = QToolBar("Search", self.window)
        toolbar.setMovable(False)

        field_box = QWidget()
        row = QHBoxLayout(field_box)
        row.setContentsMargins(0, 0, 0, 0)

        self.search_field = QLineEdit()
        self.search_field.setPlaceholderText(SEARCH_PLACEHOLDER)
        self.search_field.setMinimumWidth(self.SEARCH_FIELD_MIN_WIDTH)
        self.search_field.setClearButtonEnabled(True)
        row.addWidget(self.search_field, 1)

        self.busy_indicator = QProgressBar()
        self.busy_indicator.setRange(0, 0)
        self.busy_indicator.setTextVisible(False)
        self.busy_indicator.setFixedWidth(self.BUSY_INDICATOR_WIDTH)
        self.busy_indicator.setVisible(False)
        row.addWidget(self.busy_indicator)

        toolbar.addWidget(field_box)
        toolbar.addSeparator()

        self.share_action = share_action
        toolbar.addAction(share_action)

        self.selection_label = QLabel()
        self.selection_label.setStyleSheet(f"color: {THEME_COLOR}; padding-left: 8px;")
        self.selection_label.setAlignment(Qt.AlignVCenter | Qt.AlignLeft)
        self.selection_action = toolbar.addWidget(self.selection_label)
        # toolbar widgets are shown/hidden through their action
        self.selection_action.setVisible(False)

        self.window.addToolBar(Qt.TopToolBarArea, toolbar)
        return toolbar

    def setup_initial_window_size(self) -> None:
        """Setup initial window size based on screen dimensions."""
        screen = QApplication.primaryScreen()
        if screen is None:
            return
        rect = screen.availableGeometry()
        width = int(rect.width() * self.WINDOW_SIZE_RATIO)
        height = int(rect.height() * self.WINDOW_SIZE_RATIO)
        self.window.resize(width, height)
