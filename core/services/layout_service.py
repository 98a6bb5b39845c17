"""Cell sizing for the photo grid.

Pure arithmetic so it can be shared by the view-model and the Qt widgets.
"""

from __future__ import annotations

from dataclasses import dataclass
import math


@dataclass(frozen=True)
class SectionInsets:
    """Padding around each section of the grid, in pixels."""

    top: int = 50
    left: int = 10
    bottom: int = 50
    right: int = 10


@dataclass(frozen=True)
class GridMetrics:
    """Grid geometry settings (items per row and section insets)."""

    items_per_row: int = 3
    insets: SectionInsets = SectionInsets()

    @property
    def line_spacing(self) -> int:
        """Spacing between rows and columns; matches the left inset."""
        return self.insets.left


class LayoutService:
    """Computes thumbnail and expanded cell sizes."""

    def __init__(self, metrics: GridMetrics | None = None) -> None:
        self.metrics = metrics or GridMetrics()

    def thumbnail_side(self, available_width: float) -> int:
        """Side of a square cell so that `items_per_row` cells fit across.

        Args:
            available_width: Width of the grid viewport.
        """
        per_row = max(1, int(self.metrics.items_per_row))
        padding = self.metrics.insets.left * (per_row + 1)
        side = (available_width - padding) / per_row
        return max(0, math.floor(side))

    def expanded_size(
        self, aspect_ratio: float, bounds_width: float, bounds_height: float
    ) -> tuple[int, int]:
        """Largest size with `aspect_ratio` fitting inside bounds minus insets.

        Returns:
            Tuple of (width, height), floored to whole pixels.
        """
        ins = self.metrics.insets
        avail_w = max(0.0, bounds_width - ins.left - ins.right)
        avail_h = max(0.0, bounds_height - ins.top - ins.bottom)
        if avail_w <= 0 or avail_h <= 0:
            return 0, 0
        ratio = aspect_ratio if aspect_ratio > 0 else 1.0
        if avail_w / avail_h > ratio:
            # box is wider than the photo -> height bound
            height = avail_h
            width = height * ratio
        else:
            width = avail_w
            height = width / ratio
        return math.floor(width), math.floor(height)
