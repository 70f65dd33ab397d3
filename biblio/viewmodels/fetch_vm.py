"""Base viewmodel for a page backed by one fenced remote fetch."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

from biblio.domain.fetch_state import (
    IDLE,
    LOADING,
    Failed,
    FetchState,
    Loaded,
    RequestFence,
)

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

IoRunner = Callable[..., Awaitable[Any]]


async def run_inline(fn: Callable[..., Any], *args: Any) -> Any:
    """Runner that calls ``fn`` on the event loop thread (tests, demos)."""
    return fn(*args)


class FetchVM(Generic[T]):
    """Owns the ``FetchState`` of a page and applies only the latest response.

    Network work goes through ``runner`` so the caller decides where blocking
    calls execute (a worker thread in the browser runtime).
    """

    error_message = "Error loading data"

    def __init__(
        self,
        loader: Callable[[], T],
        *,
        runner: Optional[IoRunner] = None,
        on_change: Optional[Callable[[], None]] = None,
    ) -> None:
        self._loader = loader
        self._runner: IoRunner = runner or asyncio.to_thread
        self.on_change = on_change
        self.fence = RequestFence()
        self.state: FetchState = IDLE

    @property
    def data(self) -> Optional[T]:
        if isinstance(self.state, Loaded):
            return self.state.data
        return None

    # ------------------------------------------------------------------
    # Two-phase fetch API
    # ------------------------------------------------------------------
    def begin_fetch(self) -> int:
        seq = self.fence.issue()
        self.state = LOADING
        self._changed()
        return seq

    def complete_fetch(self, seq: int, data: T) -> bool:
        if not self.fence.is_current(seq):
            LOGGER.debug("%s: dropping stale response #%d (latest #%d)", type(self).__name__, seq, self.fence.latest)
            return False
        self.state = Loaded(data)
        self._changed()
        return True

    def fail_fetch(self, seq: int, exc: Exception) -> bool:
        if not self.fence.is_current(seq):
            LOGGER.debug("%s: dropping stale failure #%d", type(self).__name__, seq)
            return False
        LOGGER.error("%s: %s", self.error_message, exc, exc_info=exc)
        self.state = Failed(self.error_message)
        self._changed()
        return True

    async def refresh(self) -> None:
        seq = self.begin_fetch()
        try:
            data = await self._runner(self._loader)
        except Exception as exc:
            # Any loader failure, mapped or not, ends in Failed.
            self.fail_fetch(seq, exc)
            return
        self.complete_fetch(seq, data)

    async def retry(self) -> None:
        await self.refresh()

    def _changed(self) -> None:
        if self.on_change:
            self.on_change()


__all__ = ["FetchVM", "IoRunner", "run_inline"]
