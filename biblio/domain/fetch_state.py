"""Fetch lifecycle for one remote list, plus request fencing.

``FetchState`` is a closed union: a page is idle, loading, loaded with data,
or failed with a user-facing message. There is no combination such as
"loading with an error" to reason about.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Loading:
    pass


@dataclass(frozen=True)
class Loaded(Generic[T]):
    data: T


@dataclass(frozen=True)
class Failed:
    message: str


FetchState = Union[Idle, Loading, Loaded[Any], Failed]

IDLE = Idle()
LOADING = Loading()


class RequestFence:
    """Monotonic sequence numbers for one list.

    Each fetch calls :meth:`issue` before going to the network and checks
    :meth:`is_current` on completion. Only the response of the most recently
    issued request is applied; anything older is stale.
    """

    def __init__(self) -> None:
        self._latest = 0

    @property
    def latest(self) -> int:
        return self._latest

    def issue(self) -> int:
        self._latest += 1
        return self._latest

    def is_current(self, seq: int) -> bool:
        return seq == self._latest


__all__ = [
    "FetchState",
    "Failed",
    "IDLE",
    "Idle",
    "LOADING",
    "Loaded",
    "Loading",
    "RequestFence",
]
