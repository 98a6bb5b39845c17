"""Settings access helpers for JSON-based configuration."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from core.services.layout_service import GridMetrics, SectionInsets


class JsonSettings:
    """Lightweight JSON settings reader with dotted-key access.

    String values have environment variables expanded, so secrets such as
    the Flickr API key can be written as ``"$FLICKR_API_KEY"``.
    """

    def __init__(self, settings_path: str | Path) -> None:
        self._path = Path(settings_path)
        if not self._path.exists():
            raise FileNotFoundError(f"settings.json not found: {self._path}")
        with self._path.open("r", encoding="utf-8") as f:
            self._data = json.load(f)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> JsonSettings:
        """Build settings from an in-memory mapping (no file involved)."""
        inst = cls.__new__(cls)
        inst._path = Path("<memory>")
        inst._data = data
        return inst

    def get(self, key: str, default: Any | None = None) -> Any:
        """Return value for dotted `key`, or `default` if not present."""
        parts = key.split(".")
        node: Any = self._data
        for part in parts:
            if isinstance(node, dict) and part in node:
                node = node[part]
            else:
                return default
        if isinstance(node, str):
            return os.path.expandvars(node)
        return node

    def get_int(self, key: str, default: int) -> int:
        """Return `key` as int, falling back to `default` on missing/invalid values."""
        try:
            return int(self.get(key, default))
        except (ValueError, TypeError):
            return default


def grid_metrics_from_settings(settings: JsonSettings | None) -> GridMetrics:
    """Read `grid.*` keys into `GridMetrics`, keeping defaults for missing keys."""
    if settings is None:
        return GridMetrics()
    base = SectionInsets()
    insets = SectionInsets(
        top=settings.get_int("grid.section_insets.top", base.top),
        left=settings.get_int("grid.section_insets.left", base.left),
        bottom=settings.get_int("grid.section_insets.bottom", base.bottom),
        right=settings.get_int("grid.section_insets.right", base.right),
    )
    per_row = settings.get_int("grid.items_per_row", GridMetrics.items_per_row)
    return GridMetrics(items_per_row=max(1, per_row), insets=insets)
