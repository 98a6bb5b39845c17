from __future__ import annotations

from typing import Any

from PySide6.QtCore import QSize, Qt
from PySide6.QtGui import QIcon, QPixmap
from PySide6.QtWidgets import (
    QDialog,
    QFileDialog,
    QHBoxLayout,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QMessageBox,
    QPushButton,
    QVBoxLayout,
)
from loguru import logger

from infrastructure.image_service import ShareService, pil_to_qimage
from infrastructure.logging import open_path_in_default_app

PREVIEW_ICON_PX = 96


class ShareDialog(QDialog):
    """Preview of the photos being shared with the available share actions.

    `chosen_action` is "save" after a successful export, otherwise None.
    """

    def __init__(
        self,
        images: list[Any],
        share_service: ShareService,
        default_dir: str = "",
        parent=None,
    ) -> None:
        super().__init__(parent)
        self.setWindowTitle("Share Photos")
        self._images = images
        self._service = share_service
        self._default_dir = default_dir
        self.chosen_action: str | None = None

        root = QVBoxLayout(self)
        root.addWidget(QLabel(f"Share {len(images)} photo(s)"))

        lst = QListWidget()
        lst.setViewMode(QListWidget.IconMode)
        lst.setIconSize(QSize(PREVIEW_ICON_PX, PREVIEW_ICON_PX))
        lst.setMovement(QListWidget.Static)
        for img in images:
            qimg = pil_to_qimage(img)
            if qimg is None:
                continue
            pm = QPixmap.fromImage(qimg).scaled(
                PREVIEW_ICON_PX, PREVIEW_ICON_PX, Qt.KeepAspectRatio, Qt.SmoothTransformation
            )
            lst.addItem(QListWidgetItem(QIcon(pm), ""))
        root.addWidget(lst)

        btns = QHBoxLayout()
        self.btn_save = QPushButton("Save to Folder…")
        self.btn_cancel = QPushButton("Cancel")
        btns.addWidget(self.btn_save)
        btns.addStretch(1)
        btns.addWidget(self.btn_cancel)
        root.addLayout(btns)

        self.btn_save.clicked.connect(self._on_save)
        self.btn_cancel.clicked.connect(self.reject)

    def _on_save(self) -> None:
        target = QFileDialog.getExistingDirectory(self, "Save Photos To", self._default_dir)
        if not target:
            return
        try:
            written = self._service.export(self._images, target)
        except OSError as ex:
            logger.error("Share export failed: {}", ex)
            QMessageBox.warning(self, "Share Failed", f"Could not save photos:\n{ex}")
            return
        self.chosen_action = "save"
        if written:
            open_path_in_default_app(str(written[0].parent))
        self.accept()
