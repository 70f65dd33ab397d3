from __future__ import annotations

import asyncio
from typing import List

import pytest

from biblio.tests.unit.viewmodels.helpers import FakeScheduler, make_gate
from biblio.viewmodels.action_gate_vm import NOTIFICATION_TIMEOUT_S, ActionGate


def test_decline_drops_action_without_running_it() -> None:
    gate, _ = make_gate()
    ran: List[str] = []

    gate.request_confirmation("Delete book", "Sure?", lambda: ran.append("x"), "danger")
    gate.decline()

    assert gate.confirmation is None
    assert ran == []


def test_accept_closes_dialog_before_running_action() -> None:
    gate, _ = make_gate()
    seen: List[object] = []

    async def action() -> None:
        seen.append(gate.confirmation)

    gate.request_confirmation("Create genre", "Confirm?", action)
    asyncio.run(gate.accept())

    assert seen == [None]


def test_accept_supports_plain_callables_and_is_idempotent() -> None:
    gate, _ = make_gate()
    ran: List[int] = []

    gate.request_confirmation("Return book", "Confirm?", lambda: ran.append(1), "warning")
    asyncio.run(gate.accept())
    asyncio.run(gate.accept())

    assert ran == [1]


def test_new_request_replaces_pending_one() -> None:
    gate, _ = make_gate()

    gate.request_confirmation("First", "a", lambda: None)
    gate.request_confirmation("Second", "b", lambda: None, "danger")

    assert gate.confirmation is not None
    assert gate.confirmation.title == "Second"
    assert gate.confirmation.severity == "danger"


def test_notification_expires_after_timeout() -> None:
    gate, scheduler = make_gate()

    gate.notify('Book "Don Quijote" deleted successfully')

    assert scheduler.timers[0].delay_s == NOTIFICATION_TIMEOUT_S == 3.0
    assert gate.notification is not None
    scheduler.advance(3.0)
    assert gate.notification is None


def test_newer_notification_survives_older_timer() -> None:
    gate, scheduler = make_gate()

    gate.notify("first")
    first_timer = scheduler.timers[0]
    gate.notify("second", "error")
    first_timer.callback()

    assert first_timer.cancelled
    assert gate.notification is not None
    assert gate.notification.message == "second"
    assert gate.notification.severity == "error"


def test_manual_dismiss_and_close_cancel_timer() -> None:
    gate, scheduler = make_gate()

    gate.notify("hello")
    gate.dismiss_notification()
    assert gate.notification is None
    assert scheduler.timers[0].cancelled

    gate.notify("again")
    gate.close()
    assert scheduler.timers[1].cancelled


def test_on_change_fires_for_each_transition() -> None:
    gate, _ = make_gate()
    changes: List[int] = []
    gate.on_change = lambda: changes.append(1)

    gate.request_confirmation("t", "m", lambda: None)
    asyncio.run(gate.accept())
    gate.notify("done")

    assert len(changes) == 3


def test_gate_needs_an_explicit_scheduler() -> None:
    with pytest.raises(TypeError):
        ActionGate()  # type: ignore[call-arg]

    scheduler = FakeScheduler()
    gate = ActionGate(scheduler=scheduler)
    gate.notify("saved")

    assert [timer.delay_s for timer in scheduler.timers] == [NOTIFICATION_TIMEOUT_S]
