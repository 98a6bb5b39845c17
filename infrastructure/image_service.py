"""Image decoding, Qt conversion, and export helpers.

Downloaded bytes are decoded with Pillow on worker threads; the Qt layer
converts to `QImage` only when a cell is painted.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from io import BytesIO
from pathlib import Path
from typing import Any

from PIL import Image, ImageOps, UnidentifiedImageError
from PySide6.QtGui import QImage
from loguru import logger


def decode_image(data: bytes) -> Image.Image:
    """Decode image `data` into a fully loaded Pillow image.

    EXIF orientation is applied so the pixel size matches what is shown.

    Raises:
        ValueError: If the bytes are not a readable image.
    """
    try:
        with Image.open(BytesIO(data)) as im:
            try:
                im = ImageOps.exif_transpose(im)
            except (OSError, ValueError, AttributeError):
                pass
            im.load()
            return im.copy()
    except (UnidentifiedImageError, OSError) as ex:
        raise ValueError(f"Cannot decode image: {ex}") from ex


def image_size(image: Any) -> tuple[int, int]:
    """Pixel (width, height) of a Pillow image or `QImage`; (0, 0) when unknown."""
    if image is None:
        return 0, 0
    size = getattr(image, "size", None)
    if isinstance(size, tuple) and len(size) == 2:
        return int(size[0]), int(size[1])
    try:
        return int(image.width()), int(image.height())
    except (AttributeError, TypeError):
        return 0, 0


def pil_to_qimage(pil_img: Any) -> QImage | None:
    """Convert a Pillow image to `QImage` and detach from the source buffer."""
    if isinstance(pil_img, QImage):
        return pil_img
    try:
        mode = pil_img.mode
        if mode not in ("RGBA", "RGB"):
            pil_img = pil_img.convert("RGBA")
            mode = pil_img.mode
        if mode == "RGB":
            data = pil_img.tobytes("raw", "RGB")
            qimg = QImage(data, pil_img.width, pil_img.height, pil_img.width * 3, QImage.Format_RGB888)
        else:
            data = pil_img.tobytes("raw", "RGBA")
            qimg = QImage(
                data, pil_img.width, pil_img.height, pil_img.width * 4, QImage.Format_RGBA8888
            )
        if qimg is None or qimg.isNull():
            return None
        return qimg.copy()
    except (ValueError, TypeError, AttributeError) as ex:
        logger.debug("PIL->QImage convert failed: {}", ex)
        return None


class ShareService:
    """Writes shared images to disk as PNG files."""

    def export(self, images: Iterable[Any], target_dir: str | Path) -> list[Path]:
        """Save `images` into a new timestamped folder under `target_dir`.

        Images that are not Pillow images are skipped.

        Returns:
            Paths of the written files, in input order.
        """
        out_dir = self._new_folder(Path(target_dir))

        written: list[Path] = []
        for i, img in enumerate(images, start=1):
            if not isinstance(img, Image.Image):
                logger.debug("Skipping non-Pillow image in share export: {!r}", type(img))
                continue
            path = out_dir / f"photo_{i:03d}.png"
            img.save(path, "PNG")
            written.append(path)
        logger.info("Exported {} image(s) to {}", len(written), out_dir)
        return written

    @staticmethod
    def _new_folder(target_dir: Path) -> Path:
        """Create a fresh export folder; exports within the same second get a suffix."""
        target_dir.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        base = f"flickr_share_{stamp}"
        suffix = 1
        while True:
            out_dir = target_dir / (base if suffix == 1 else f"{base}_{suffix}")
            try:
                out_dir.mkdir()
                return out_dir
            except FileExistsError:
                suffix += 1
