"""Tagged success/error values returned by remote collaborators.

Callers branch on the variant explicitly instead of catching exceptions, so a
failed search or image load is just another value to log and ignore.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def is_ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    reason: Exception

    @property
    def is_ok(self) -> bool:
        return False


Result = Union[Ok[T], Err]
