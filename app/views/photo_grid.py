from __future__ import annotations

from typing import Any

from PySide6.QtCore import QByteArray, QMimeData, QPoint, Qt, QTimer
from PySide6.QtGui import QDrag, QPixmap
from PySide6.QtWidgets import (
    QApplication,
    QFrame,
    QGridLayout,
    QLabel,
    QProgressBar,
    QScrollArea,
    QVBoxLayout,
    QWidget,
)
from loguru import logger

from app.viewmodels.gallery_vm import GalleryVM
from app.views.constants import (
    CELL_BACKGROUND,
    DRAG_MIME_TYPE,
    DRAG_PIXMAP_SIDE,
    SECTION_HEADER_STYLE,
    SELECTED_BORDER_PX,
    THEME_COLOR,
)
from core.models import GridPosition
from infrastructure.image_service import pil_to_qimage


def encode_position(position: GridPosition) -> bytes:
    """Serialize a grid position for drag-and-drop mime data."""
    return f"{position.section},{position.item}".encode("ascii")


def decode_position(data: bytes) -> GridPosition | None:
    """Parse `encode_position` output; None for malformed data."""
    try:
        section, item = data.decode("ascii").split(",")
        return GridPosition(int(section), int(item))
    except (UnicodeDecodeError, ValueError):
        return None


class PhotoTile(QFrame):
    """One grid cell: image, selection border, and a busy indicator."""

    def __init__(self, grid: PhotoGridView, position: GridPosition) -> None:
        super().__init__()
        self._grid = grid
        self.position = position
        self._pixmap: QPixmap | None = None
        self._press_pos: QPoint | None = None
        self._selected = False

        self.setObjectName("photoTile")
        self.setAcceptDrops(True)
        self._apply_style()

        lay = QVBoxLayout(self)
        lay.setContentsMargins(0, 0, 0, 0)
        self._image_label = QLabel()
        self._image_label.setAlignment(Qt.AlignCenter)
        lay.addWidget(self._image_label)

        # overlay, positioned in resizeEvent
        self._busy = QProgressBar(self)
        self._busy.setRange(0, 0)
        self._busy.setTextVisible(False)
        self._busy.hide()

    # Public API
    def set_cell_size(self, width: int, height: int) -> None:
        if self.width() == width and self.height() == height:
            return
        self.setFixedSize(max(1, width), max(1, height))
        self._apply_pixmap()

    def set_image(self, image: Any) -> None:
        if image is None:
            self._pixmap = None
            self._image_label.clear()
            return
        qimg = pil_to_qimage(image)
        if qimg is None:
            logger.debug("Tile {} got an undisplayable image", self.position)
            return
        self._pixmap = QPixmap.fromImage(qimg)
        self._apply_pixmap()

    def set_selected(self, selected: bool) -> None:
        if selected != self._selected:
            self._selected = selected
            self._apply_style()
            self._apply_pixmap()

    def set_busy(self, busy: bool) -> None:
        self._busy.setVisible(busy)

    # Qt events
    def resizeEvent(self, event) -> None:  # type: ignore[override]
        super().resizeEvent(event)
        w, h = self.width(), self.height()
        self._busy.setGeometry(w // 4, h // 2 - 3, w // 2, 6)

    def mousePressEvent(self, event) -> None:  # type: ignore[override]
        if event.button() == Qt.LeftButton:
            self._press_pos = event.position().toPoint()
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event) -> None:  # type: ignore[override]
        if self._press_pos is None or not (event.buttons() & Qt.LeftButton):
            return
        moved = event.position().toPoint() - self._press_pos
        if moved.manhattanLength() < QApplication.startDragDistance():
            return
        self._press_pos = None
        self._grid.start_drag(self)

    def mouseReleaseEvent(self, event) -> None:  # type: ignore[override]
        if self._press_pos is not None and event.button() == Qt.LeftButton:
            self._press_pos = None
            self._grid.on_tile_clicked(self.position)
        super().mouseReleaseEvent(event)

    def dragEnterEvent(self, event) -> None:  # type: ignore[override]
        if event.mimeData().hasFormat(DRAG_MIME_TYPE):
            event.acceptProposedAction()

    def dragMoveEvent(self, event) -> None:  # type: ignore[override]
        if event.mimeData().hasFormat(DRAG_MIME_TYPE):
            event.acceptProposedAction()

    def dropEvent(self, event) -> None:  # type: ignore[override]
        source = decode_position(bytes(event.mimeData().data(DRAG_MIME_TYPE)))
        if source is None:
            return
        event.acceptProposedAction()
        self._grid.on_drop(source, self.position)

    # internals
    def _apply_style(self) -> None:
        border = f"{SELECTED_BORDER_PX}px solid {THEME_COLOR}" if self._selected else "none"
        self.setStyleSheet(
            f"QFrame#photoTile {{ background-color: {CELL_BACKGROUND}; border: {border}; }}"
        )

    def _apply_pixmap(self) -> None:
        if self._pixmap is None or self._pixmap.isNull():
            return
        rect = self.contentsRect()
        pad = 2 * SELECTED_BORDER_PX if self._selected else 0
        self._image_label.setPixmap(
            self._pixmap.scaled(
                max(1, rect.width() - pad),
                max(1, rect.height() - pad),
                Qt.KeepAspectRatio,
                Qt.SmoothTransformation,
            )
        )


class _SectionWidget(QWidget):
    """Header with the search term plus the grid of tiles for one search."""

    def __init__(self, grid: PhotoGridView, section: int, title: str) -> None:
        super().__init__()
        self._grid = grid
        self.section = section
        self.setAcceptDrops(True)

        root = QVBoxLayout(self)
        root.setContentsMargins(0, 0, 0, 0)
        root.setSpacing(0)
        header = QLabel(title)
        header.setStyleSheet(SECTION_HEADER_STYLE)
        root.addWidget(header)

        self.tiles_widget = QWidget()
        self.grid_layout = QGridLayout(self.tiles_widget)
        ins = grid.vm.layout.metrics.insets
        self.grid_layout.setContentsMargins(ins.left, ins.top, ins.right, ins.bottom)
        self.grid_layout.setSpacing(grid.vm.layout.metrics.line_spacing)
        self.grid_layout.setAlignment(Qt.AlignLeft | Qt.AlignTop)
        root.addWidget(self.tiles_widget)

    def dragEnterEvent(self, event) -> None:  # type: ignore[override]
        if event.mimeData().hasFormat(DRAG_MIME_TYPE):
            event.acceptProposedAction()

    def dragMoveEvent(self, event) -> None:  # type: ignore[override]
        if event.mimeData().hasFormat(DRAG_MIME_TYPE):
            event.acceptProposedAction()

    def dropEvent(self, event) -> None:  # type: ignore[override]
        # dropped on empty space: append to this section
        source = decode_position(bytes(event.mimeData().data(DRAG_MIME_TYPE)))
        if source is None:
            return
        event.acceptProposedAction()
        end = GridPosition(self.section, self._grid.vm.item_count(self.section))
        self._grid.on_drop(source, end)


class PhotoGridView(QScrollArea):
    """Sectioned photo grid, one section per search (newest first)."""

    def __init__(self, vm: GalleryVM, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.vm = vm
        self.setWidgetResizable(True)
        self.setHorizontalScrollBarPolicy(Qt.ScrollBarAlwaysOff)
        self.setVerticalScrollBarPolicy(Qt.ScrollBarAsNeeded)

        self._container = QWidget()
        self._layout = QVBoxLayout(self._container)
        self._layout.setContentsMargins(0, 0, 0, 0)
        self._layout.addStretch(1)
        self.setWidget(self._container)

        self._sections: list[_SectionWidget] = []
        self._tiles: dict[GridPosition, PhotoTile] = {}
        self._last_width = -1

    # Public API
    def reload_all(self) -> None:
        """Rebuild all sections and tiles from the view-model."""
        for sec in self._sections:
            self._layout.removeWidget(sec)
            sec.deleteLater()
        self._sections = []
        self._tiles.clear()

        for s in range(self.vm.section_count()):
            sec = _SectionWidget(self, s, self.vm.search_term(s))
            self._layout.insertWidget(self._layout.count() - 1, sec)
            self._sections.append(sec)
            for i in range(self.vm.item_count(s)):
                pos = GridPosition(s, i)
                self._tiles[pos] = PhotoTile(self, pos)
            self._flow_section(s)
            for i in range(self.vm.item_count(s)):
                self._render_tile(GridPosition(s, i))

    def reload_items(self, positions: list[GridPosition]) -> None:
        """Re-flow the affected sections and re-render only `positions`."""
        for s in sorted({p.section for p in positions}):
            if 0 <= s < len(self._sections):
                self._flow_section(s)
        for pos in positions:
            self._render_tile(pos)

    def scroll_to(self, position: GridPosition) -> None:
        # after the layout pass triggered by the reload
        QTimer.singleShot(0, lambda: self._ensure_visible(position))

    def show_image(self, position: GridPosition, image: Any) -> None:
        tile = self._tiles.get(position)
        if tile is not None:
            tile.set_image(image)

    def set_item_busy(self, position: GridPosition, busy: bool) -> None:
        tile = self._tiles.get(position)
        if tile is not None:
            tile.set_busy(busy)

    # Tile callbacks
    def on_tile_clicked(self, position: GridPosition) -> None:
        try:
            self.vm.tap(position)
        except Exception as ex:  # pragma: no cover - UI best effort
            logger.error("Tap handling failed at {}: {}", position, ex)

    def start_drag(self, tile: PhotoTile) -> None:
        payload = self.vm.drag_payload(tile.position)
        if payload is None:
            return
        mime = QMimeData()
        mime.setData(DRAG_MIME_TYPE, QByteArray(encode_position(tile.position)))
        drag = QDrag(tile)
        drag.setMimeData(mime)
        qimg = pil_to_qimage(payload)
        if qimg is not None:
            drag.setPixmap(
                QPixmap.fromImage(qimg).scaled(
                    DRAG_PIXMAP_SIDE, DRAG_PIXMAP_SIDE, Qt.KeepAspectRatio, Qt.SmoothTransformation
                )
            )
        drag.exec(Qt.MoveAction)

    def on_drop(self, source: GridPosition, destination: GridPosition) -> None:
        # tiles are rebuilt by the move; leave the drop handler first
        QTimer.singleShot(0, lambda: self._apply_move(source, destination))

    # Qt events
    def resizeEvent(self, event) -> None:  # type: ignore[override]
        super().resizeEvent(event)
        width = self.viewport().width()
        if width == self._last_width:
            return
        self._last_width = width
        for s in range(len(self._sections)):
            self._flow_section(s)

    # internals
    def _bounds(self) -> tuple[int, int]:
        vp = self.viewport()
        return max(1, vp.width()), max(1, vp.height())

    def _flow_section(self, section: int) -> None:
        """Place tiles row by row; the expanded tile takes a full row."""
        grid = self._sections[section].grid_layout
        while grid.count():
            grid.takeAt(0)

        cols = max(1, self.vm.layout.metrics.items_per_row)
        width, height = self._bounds()
        expanded = self.vm.expanded_position
        row = col = 0
        for i in range(self.vm.item_count(section)):
            pos = GridPosition(section, i)
            tile = self._tiles.get(pos)
            if tile is None:
                continue
            tile.position = pos
            tile.set_cell_size(*self.vm.cell_size(pos, width, height))
            if pos == expanded:
                if col:
                    row, col = row + 1, 0
                grid.addWidget(tile, row, 0, 1, cols, Qt.AlignCenter)
                row += 1
                continue
            grid.addWidget(tile, row, col)
            col += 1
            if col >= cols:
                row, col = row + 1, 0

    def _render_tile(self, position: GridPosition) -> None:
        tile = self._tiles.get(position)
        if tile is None or not self.vm.is_valid(position):
            return
        tile.set_image(self.vm.image_for(position))
        tile.set_selected(self.vm.is_sharing and self.vm.is_selected(position))
        tile.set_busy(self.vm.expanded_position == position and self.vm.is_loading(position))

    def _ensure_visible(self, position: GridPosition) -> None:
        tile = self._tiles.get(position)
        if tile is not None:
            self.ensureWidgetVisible(tile)

    def _apply_move(self, source: GridPosition, destination: GridPosition) -> None:
        try:
            self.vm.move(source, destination)
        except IndexError as ex:
            logger.warning("Ignoring drop {} -> {}: {}", source, destination, ex)
