"""Confirmation gate and transient notification shared by every page.

A page viewmodel never calls a mutating use case directly. It hands the call
to :meth:`ActionGate.request_confirmation` as a zero-argument action; the view
renders the pending request as a modal and calls :meth:`ActionGate.accept` or
:meth:`ActionGate.decline`. Once the action settles, the page reports the
outcome through :meth:`ActionGate.notify`.

Call context:
    One ``ActionGate`` is created per page by ``biblio.web_ui.runtime`` and
    injected into that page's viewmodel. The NiceGUI page supplies a
    ``scheduler`` backed by ``ui.timer`` so auto-dismissal runs on the page's
    event loop.
"""

from __future__ import annotations

from dataclasses import dataclass
import inspect
import logging
from typing import Any, Callable, Literal, Optional, Protocol

LOGGER = logging.getLogger(__name__)

ConfirmSeverity = Literal["info", "warning", "danger"]
NotifySeverity = Literal["success", "error", "info"]

NOTIFICATION_TIMEOUT_S = 3.0


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


Scheduler = Callable[[float, Callable[[], None]], TimerHandle]


@dataclass(frozen=True)
class ConfirmationRequest:
    title: str
    message: str
    severity: ConfirmSeverity
    action: Callable[[], Any]


@dataclass(frozen=True)
class Notification:
    message: str
    severity: NotifySeverity
    serial: int


class ActionGate:
    """Holds at most one confirmation request and one notification."""

    def __init__(
        self,
        *,
        scheduler: Scheduler,
        on_change: Optional[Callable[[], None]] = None,
        timeout_s: float = NOTIFICATION_TIMEOUT_S,
    ) -> None:
        self._scheduler = scheduler
        self.on_change = on_change
        self.timeout_s = timeout_s
        self._confirmation: Optional[ConfirmationRequest] = None
        self._notification: Optional[Notification] = None
        self._timer: Optional[TimerHandle] = None
        self._serial = 0

    @property
    def confirmation(self) -> Optional[ConfirmationRequest]:
        return self._confirmation

    @property
    def notification(self) -> Optional[Notification]:
        return self._notification

    # ------------------------------------------------------------------
    # Confirmation
    # ------------------------------------------------------------------
    def request_confirmation(
        self,
        title: str,
        message: str,
        action: Callable[[], Any],
        severity: ConfirmSeverity = "info",
    ) -> ConfirmationRequest:
        """Show a confirmation, replacing any request still on screen."""
        request = ConfirmationRequest(title=title, message=message, severity=severity, action=action)
        self._confirmation = request
        self._changed()
        return request

    async def accept(self) -> None:
        """Dismiss the pending request, then run its deferred action."""
        request = self._confirmation
        if request is None:
            return
        self._confirmation = None
        self._changed()
        result = request.action()
        if inspect.isawaitable(result):
            await result

    def decline(self) -> None:
        if self._confirmation is None:
            return
        LOGGER.debug("Declined: %s", self._confirmation.title)
        self._confirmation = None
        self._changed()

    # ------------------------------------------------------------------
    # Notification
    # ------------------------------------------------------------------
    def notify(self, message: str, severity: NotifySeverity = "success") -> Notification:
        """Show a notification that dismisses itself after ``timeout_s``."""
        self._cancel_timer()
        self._serial += 1
        notification = Notification(message=message, severity=severity, serial=self._serial)
        self._notification = notification
        serial = notification.serial
        self._timer = self._scheduler(self.timeout_s, lambda: self._expire(serial))
        self._changed()
        return notification

    def dismiss_notification(self) -> None:
        self._cancel_timer()
        if self._notification is None:
            return
        self._notification = None
        self._changed()

    def close(self) -> None:
        """Page teardown: drop the pending timer without touching the view."""
        self._cancel_timer()

    # ------------------------------------------------------------------
    def _expire(self, serial: int) -> None:
        current = self._notification
        if current is None or current.serial != serial:
            return
        self._timer = None
        self._notification = None
        self._changed()

    def _cancel_timer(self) -> None:
        timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()

    def _changed(self) -> None:
        if self.on_change:
            self.on_change()


__all__ = [
    "ActionGate",
    "ConfirmSeverity",
    "ConfirmationRequest",
    "NOTIFICATION_TIMEOUT_S",
    "Notification",
    "NotifySeverity",
    "Scheduler",
    "TimerHandle",
]
