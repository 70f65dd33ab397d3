from __future__ import annotations

from datetime import date
from typing import Any, Callable, Dict, List, Mapping, Optional, Set, Tuple

from biblio.adapters.api_errors import ApiServerError
from biblio.adapters.library_mock import InMemoryLibrary
from biblio.domain.entities import ApiEnvelope
from biblio.domain.ports import RecordId
from biblio.viewmodels.action_gate_vm import ActionGate

TODAY = date(2025, 3, 10)

Call = Tuple[str, str]


class RecordingLibrary(InMemoryLibrary):
    """In-memory backend that records requests and can fail chosen paths."""

    def __init__(self) -> None:
        super().__init__(today=TODAY)
        self.calls: List[Call] = []
        self.fail_paths: Set[str] = set()

    def _record(self, method: str, path: str) -> None:
        self.calls.append((method, path))
        if path in self.fail_paths:
            raise ApiServerError(f"{method} {path}: HTTP 500", status=500, context=f"{method} {path}")

    def list_records(self, collection: str, *, limit: Optional[int] = None) -> ApiEnvelope:
        self._record("GET", collection)
        return super().list_records(collection, limit=limit)

    def create_record(self, collection: str, payload: Mapping[str, Any]) -> ApiEnvelope:
        self._record("POST", collection)
        return super().create_record(collection, payload)

    def update_record(self, collection: str, record_id: RecordId, payload: Mapping[str, Any]) -> ApiEnvelope:
        self._record("PUT", f"{collection}/{record_id}")
        return super().update_record(collection, record_id, payload)

    def delete_record(self, collection: str, record_id: RecordId) -> ApiEnvelope:
        self._record("DELETE", f"{collection}/{record_id}")
        return super().delete_record(collection, record_id)

    def create_loan(self, user_id: RecordId, book_id: RecordId) -> ApiEnvelope:
        self._record("POST", "/prestamos")
        return super().create_loan(user_id, book_id)

    def return_loan(self, loan_id: RecordId) -> ApiEnvelope:
        self._record("PUT", f"/prestamos/{loan_id}/devolver")
        return super().return_loan(loan_id)

    def fetch(self, path: str, *, params: Optional[Dict[str, Any]] = None) -> ApiEnvelope:
        self._record("GET", path)
        return super().fetch(path, params=params)

    def mutations(self) -> List[Call]:
        return [call for call in self.calls if call[0] != "GET"]


class FakeTimer:
    def __init__(self, delay_s: float, callback: Callable[[], None]) -> None:
        self.delay_s = delay_s
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        if not self.cancelled:
            self.callback()


class FakeScheduler:
    """Collects scheduled callbacks so tests decide when time passes."""

    def __init__(self) -> None:
        self.timers: List[FakeTimer] = []

    def __call__(self, delay_s: float, callback: Callable[[], None]) -> FakeTimer:
        timer = FakeTimer(delay_s, callback)
        self.timers.append(timer)
        return timer

    def advance(self, seconds: float) -> None:
        """Fire every pending timer due within ``seconds``."""
        for timer in list(self.timers):
            if timer.delay_s <= seconds:
                timer.fire()


def make_gate() -> Tuple[ActionGate, FakeScheduler]:
    scheduler = FakeScheduler()
    return ActionGate(scheduler=scheduler), scheduler


__all__ = ["FakeScheduler", "FakeTimer", "RecordingLibrary", "TODAY", "make_gate"]
