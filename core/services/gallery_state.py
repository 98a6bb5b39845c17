"""Screen state of the gallery and its transition function.

The gallery is in exactly one of three states: browsing, one photo expanded,
or sharing with an ordered selection. Transitions are computed by
`transition`, which never mutates its inputs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from core.models import GridPosition, PhotoRecord


@dataclass(frozen=True)
class Browsing:
    pass


@dataclass(frozen=True)
class Expanded:
    position: GridPosition


@dataclass(frozen=True)
class Sharing:
    selection: tuple[PhotoRecord, ...] = ()


ScreenState = Union[Browsing, Expanded, Sharing]


# Events


@dataclass(frozen=True)
class Tap:
    """User tapped the cell at `position` showing `photo`."""

    position: GridPosition
    photo: PhotoRecord


@dataclass(frozen=True)
class StartSharing:
    pass


@dataclass(frozen=True)
class StopSharing:
    pass


@dataclass(frozen=True)
class Collapse:
    pass


Event = Union[Tap, StartSharing, StopSharing, Collapse]


def transition(state: ScreenState, event: Event) -> ScreenState:
    """Return the state that follows `state` after `event`."""
    if isinstance(event, StartSharing):
        return Sharing()
    if isinstance(event, StopSharing):
        return Browsing() if isinstance(state, Sharing) else state
    if isinstance(event, Collapse):
        return Browsing() if isinstance(state, Expanded) else state
    if isinstance(event, Tap):
        if isinstance(state, Sharing):
            return Sharing(_toggle(state.selection, event.photo))
        if isinstance(state, Expanded) and state.position == event.position:
            return Browsing()
        return Expanded(event.position)
    raise TypeError(f"Unknown gallery event: {event!r}")


def is_selected(selection: tuple[PhotoRecord, ...], photo: PhotoRecord) -> bool:
    """Whether this very record is selected.

    Records match by identity: the same Flickr photo can sit in several groups
    and each copy is selected on its own.
    """
    return any(p is photo for p in selection)


def _toggle(selection: tuple[PhotoRecord, ...], photo: PhotoRecord) -> tuple[PhotoRecord, ...]:
    if is_selected(selection, photo):
        return tuple(p for p in selection if p is not photo)
    return selection + (photo,)


def expanded_position(state: ScreenState) -> GridPosition | None:
    return state.position if isinstance(state, Expanded) else None


def selection_of(state: ScreenState) -> tuple[PhotoRecord, ...]:
    return state.selection if isinstance(state, Sharing) else ()
