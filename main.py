from __future__ import annotations

from pathlib import Path
import sys

from PySide6.QtWidgets import QApplication
from loguru import logger

from app.viewmodels.gallery_vm import GalleryVM
from app.views.image_tasks import FlickrTaskRunner
from app.views.main_window import MainWindow
from core.services.layout_service import LayoutService
from infrastructure.flickr_client import FlickrClient
from infrastructure.image_service import ShareService
from infrastructure.logging import init_logging
from infrastructure.settings import JsonSettings, grid_metrics_from_settings

BASE_DIR = Path(__file__).parent


def main() -> int:
    settings = JsonSettings(BASE_DIR / "settings.json")
    init_logging(settings.get("logging.dir", None) or None, settings.get("logging.level", "INFO"))
    logger.info("Starting Flickr search gallery")

    app = QApplication(sys.argv)

    client = FlickrClient.from_settings(settings)
    runner = FlickrTaskRunner(client=client, parent=app)
    vm = GalleryVM(runner, layout=LayoutService(grid_metrics_from_settings(settings)))

    win = MainWindow(vm=vm, share_service=ShareService(), settings=settings)
    win.show()

    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
