"""Drag-and-drop reordering of photos across search groups.

A move removes the record from its source position first and then inserts it
at the destination index of the destination group. For a single group
`[p1, p2, p3]`, moving index 0 to index 2 yields `[p2, p3, p1]`.
"""

from __future__ import annotations

from collections.abc import Sequence

from core.models import GridPosition, PhotoRecord, SearchResults


class ReorderService:
    """Moves records between positions of a list of `SearchResults`."""

    def move(
        self,
        groups: Sequence[SearchResults],
        source: GridPosition,
        destination: GridPosition,
    ) -> GridPosition:
        """Move the record at `source` to `destination` in place.

        The destination index is clamped to the destination group's length
        after the removal.

        Returns:
            The position the record ended up at.

        Raises:
            IndexError: If `source` or the destination section does not exist.
        """
        if not 0 <= source.section < len(groups):
            raise IndexError(f"No section {source.section}")
        src_items = groups[source.section].photos
        if not 0 <= source.item < len(src_items):
            raise IndexError(f"No photo at {source}")
        if not 0 <= destination.section < len(groups):
            raise IndexError(f"No section {destination.section}")

        photo: PhotoRecord = src_items.pop(source.item)
        dst_items = groups[destination.section].photos
        index = min(max(0, destination.item), len(dst_items))
        dst_items.insert(index, photo)
        return GridPosition(destination.section, index)
