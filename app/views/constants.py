"""
UI/view constants centralized for reuse across view modules.

Grid geometry (items per row, section insets) is configurable and lives in
`core.services.layout_service`; only purely visual values are kept here.
"""

from __future__ import annotations

WINDOW_TITLE: str = "Flickr Search"
SEARCH_PLACEHOLDER: str = "Search Flickr…"

# Theme
THEME_COLOR: str = "#03693a"
CELL_BACKGROUND: str = "#000000"
SELECTED_BORDER_PX: int = 10

# Section header
SECTION_HEADER_STYLE: str = "font-size: 20px; font-weight: bold; padding: 4px 10px;"

# Drag and drop
DRAG_MIME_TYPE: str = "application/x-flickr-search-position"
DRAG_PIXMAP_SIDE: int = 96

# Status
STATUS_TIMEOUT_MS: int = 3000
