"""Reusable NiceGUI building blocks shared by the dashboard pages."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Callable, Iterator, Sequence, Tuple

from nicegui import ui

from biblio.domain.fetch_state import Failed, Loaded
from biblio.viewmodels.action_gate_vm import ActionGate, Scheduler, TimerHandle
from biblio.viewmodels.fetch_vm import FetchVM
from biblio.viewmodels.status_format import (
    confirm_color,
    confirm_icon,
    notify_color,
    notify_icon,
)

NAV_LINKS: Sequence[Tuple[str, str, str]] = (
    ("/", "Dashboard", "dashboard"),
    ("/libros", "Books", "menu_book"),
    ("/autores", "Authors", "person"),
    ("/prestamos", "Loans", "swap_horiz"),
    ("/usuarios", "Users", "group"),
    ("/morosos", "Delinquent", "warning"),
)

MANAGE_LINKS: Sequence[Tuple[str, str]] = (
    ("/libros-manage", "Manage books"),
    ("/autores-manage", "Manage authors"),
    ("/generos-manage", "Manage genres"),
)


def nav_header(active: str) -> None:
    with ui.header().classes("biblio-header items-center justify-between q-px-md"):
        with ui.link(target="/").classes("biblio-brand no-underline"):
            ui.icon("local_library").classes("text-h5")
            ui.label("Library Admin").classes("text-h6")
        with ui.row().classes("items-center q-gutter-xs"):
            for path, label, icon in NAV_LINKS:
                ui.button(label, icon=icon, on_click=lambda _, p=path: ui.navigate.to(p)).props(
                    "flat no-caps" + (" outline" if path == active else "")
                ).classes("text-white")
            with ui.button(icon="settings").props("flat round").classes("text-white"):
                with ui.menu():
                    for path, label in MANAGE_LINKS:
                        ui.menu_item(label, on_click=lambda _, p=path: ui.navigate.to(p))


@contextmanager
def page_body(title: str, subtitle: str = "") -> Iterator[ui.column]:
    with ui.column().classes("biblio-page w-full") as column:
        ui.label(title).classes("text-h4 biblio-title")
        if subtitle:
            ui.label(subtitle).classes("text-subtitle1 biblio-muted")
        yield column


def timer_scheduler(host: ui.element) -> Scheduler:
    """Schedule one-shot callbacks with ``ui.timer`` inside a long-lived element."""

    def schedule(delay_s: float, callback: Callable[[], None]) -> TimerHandle:
        with host:
            return ui.timer(delay_s, callback, once=True)

    return schedule


def loading_state(message: str = "Loading...") -> None:
    with ui.column().classes("w-full items-center q-pa-xl"):
        ui.spinner(size="3em", color="primary")
        ui.label(message).classes("biblio-muted")


def error_state(message: str, on_retry: Callable[[], Any]) -> None:
    with ui.card().classes("biblio-card biblio-error w-full items-center q-pa-lg"):
        ui.icon("error_outline", color="negative").classes("text-h3")
        ui.label(message).classes("text-subtitle1")
        ui.button("Retry", icon="refresh", color="primary", on_click=on_retry)


def fetch_state_view(vm: FetchVM, render: Callable[[Any], None], loading_message: str = "Loading...") -> None:
    """Render the loading, error or loaded branch of ``vm.state``."""
    state = vm.state
    if isinstance(state, Loaded):
        render(state.data)
    elif isinstance(state, Failed):
        error_state(state.message, vm.retry)
    else:
        loading_state(loading_message)


def confirmation_dialog(gate: ActionGate) -> None:
    request = gate.confirmation
    if request is None:
        return
    color = confirm_color(request.severity)
    with ui.dialog(value=True).props("persistent"), ui.card().classes("biblio-card q-pa-md biblio-dialog"):
        with ui.row().classes("items-center no-wrap q-gutter-sm"):
            ui.icon(confirm_icon(request.severity), color=color).classes("text-h5")
            ui.label(request.title).classes("text-h6")
        ui.label(request.message).classes("biblio-prewrap")
        with ui.row().classes("w-full justify-end q-gutter-sm"):
            ui.button("Cancel", on_click=gate.decline).props("flat no-caps")
            ui.button("Confirm", color=color, on_click=gate.accept).props("no-caps")


def notification_banner(gate: ActionGate) -> None:
    note = gate.notification
    if note is None:
        return
    with ui.card().classes("biblio-toast q-pa-sm").props(f"data-severity={note.severity}"):
        with ui.row().classes("items-center no-wrap q-gutter-sm"):
            ui.icon(notify_icon(note.severity), color=notify_color(note.severity))
            ui.label(note.message)
            ui.button(icon="close", on_click=gate.dismiss_notification).props("flat round dense size=sm")


def stat_tile(label: str, value: Any, icon: str, color: str = "primary") -> None:
    with ui.card().classes("biblio-card biblio-tile q-pa-md"):
        with ui.row().classes("items-center no-wrap q-gutter-md"):
            ui.icon(icon, color=color).classes("text-h4")
            with ui.column().classes("q-gutter-none"):
                ui.label(str(value)).classes("text-h5 biblio-mono")
                ui.label(label).classes("biblio-muted")


def empty_state(message: str) -> None:
    ui.label(message).classes("biblio-muted q-pa-md")


__all__ = [
    "confirmation_dialog",
    "empty_state",
    "error_state",
    "fetch_state_view",
    "loading_state",
    "nav_header",
    "notification_banner",
    "page_body",
    "stat_tile",
    "timer_scheduler",
]
