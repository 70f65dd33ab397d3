"""NiceGUI entrypoint for the library administration dashboard."""

from __future__ import annotations

import argparse
import json
import logging
from typing import Any, Dict, Optional, Sequence

from nicegui import ui

from biblio.config import AppConfig, resolve_config
from biblio.domain.entities import BookSummary, DashboardStats, DelinquentUser
from biblio.domain.resources import AUTHORS, BOOKS, GENRES, USERS, ResourceSpec
from biblio.usecases.load_author_statistics import AuthorStatistics
from biblio.usecases.load_book_statistics import BookStatistics
from biblio.usecases.load_delinquent_users import DelinquencyReport
from biblio.usecases.load_loans_overview import LoansOverview
from biblio.usecases.load_manage_page import ManagePageData
from biblio.utils import logging as logging_utils
from biblio.viewmodels.action_gate_vm import ActionGate
from biblio.viewmodels.fetch_vm import FetchVM
from biblio.viewmodels.loans_vm import LoansVM
from biblio.viewmodels.manage_page_vm import ManagePageVM
from biblio.viewmodels.stats_vm import TOP_N
from biblio.viewmodels.status_format import loan_tone_color, loan_tone_label
from biblio.web_ui.components import (
    confirmation_dialog,
    empty_state,
    fetch_state_view,
    nav_header,
    notification_banner,
    page_body,
    stat_tile,
    timer_scheduler,
)
from biblio.web_ui.runtime import WebRuntime

LOGGER = logging.getLogger(__name__)

MANAGE_PAGES: Sequence[tuple] = (
    ("/usuarios", USERS, "Users", "Register and maintain library members"),
    ("/libros-manage", BOOKS, "Manage books", "Create, edit and delete the catalogue"),
    ("/autores-manage", AUTHORS, "Manage authors", "Create, edit and delete authors"),
    ("/generos-manage", GENRES, "Manage genres", "Create, edit and delete genres"),
)


def _install_theme() -> None:
    """Install global CSS/theme tokens for the web runtime."""
    ui.add_head_html(
        """
<link rel="preconnect" href="https://fonts.googleapis.com">
<link rel="preconnect" href="https://fonts.gstatic.com" crossorigin>
<link href="https://fonts.googleapis.com/css2?family=Source+Sans+3:wght@400;600;700&family=IBM+Plex+Mono:wght@400;500&display=swap" rel="stylesheet">
<style>
:root {
  --biblio-bg-a: #f4f1ea;
  --biblio-bg-b: #e9eff5;
  --biblio-card: rgba(255, 255, 255, 0.9);
  --biblio-border: #d6d0c4;
  --biblio-accent: #7a3e1d;
  --biblio-muted: #5b6472;
}
body {
  font-family: 'Source Sans 3', sans-serif;
  background: linear-gradient(160deg, var(--biblio-bg-a), var(--biblio-bg-b));
}
.biblio-header { background: var(--biblio-accent); }
.biblio-brand { color: white; display: flex; align-items: center; gap: 8px; }
.biblio-page {
  max-width: 1280px;
  margin: 0 auto;
  padding: 18px;
  animation: slide-in 300ms ease-out;
}
.biblio-card {
  background: var(--biblio-card);
  border: 1px solid var(--biblio-border);
  border-radius: 12px;
}
.biblio-tile { min-width: 200px; }
.biblio-title { color: var(--biblio-accent); }
.biblio-muted { color: var(--biblio-muted); }
.biblio-mono { font-family: 'IBM Plex Mono', monospace; }
.biblio-prewrap { white-space: pre-line; }
.biblio-dialog { min-width: 360px; max-width: 520px; }
.biblio-toast {
  position: fixed;
  top: 76px;
  right: 20px;
  z-index: 6000;
  background: white;
  border-radius: 10px;
  box-shadow: 0 6px 20px rgba(0, 0, 0, 0.15);
}
.biblio-toast[data-severity=success] { border-left: 5px solid #21ba45; }
.biblio-toast[data-severity=error] { border-left: 5px solid #c10015; }
.biblio-toast[data-severity=info] { border-left: 5px solid #31ccec; }
@keyframes slide-in {
  from { opacity: 0; transform: translateY(8px); }
  to { opacity: 1; transform: translateY(0px); }
}
</style>
        """,
        shared=True,
    )


def _gate_layer(runtime: WebRuntime) -> ActionGate:
    """Create the page's action gate together with its dialog and banner."""
    timer_host = ui.element("div").classes("hidden")
    gate = runtime.new_gate(timer_scheduler(timer_host))

    @ui.refreshable
    def render_gate() -> None:
        confirmation_dialog(gate)
        notification_banner(gate)

    gate.on_change = render_gate.refresh
    render_gate()
    _bind_gate_to_client(ui.context.client, gate)
    return gate


def _bind_gate_to_client(client: Any, gate: ActionGate) -> None:
    """Cancel the gate timer when the page is gone, not on a transient reconnect."""
    client.on_delete(gate.close)


async def _mount(vm: FetchVM) -> None:
    await ui.context.client.connected()
    await vm.refresh()


def _scroll_to_top() -> None:
    ui.run_javascript("window.scrollTo({top: 0, behavior: 'smooth'})")


def _book_table(books: Sequence[BookSummary]) -> None:
    if not books:
        empty_state("No books to show.")
        return
    ui.table(
        columns=[
            {"name": "rank", "label": "#", "field": "rank"},
            {"name": "title", "label": "Title", "field": "title", "align": "left"},
            {"name": "author", "label": "Author", "field": "author", "align": "left"},
            {"name": "genre", "label": "Genre", "field": "genre", "align": "left"},
            {"name": "loans", "label": "Loans", "field": "loans"},
        ],
        rows=[
            {
                "rank": idx,
                "title": book.title,
                "author": book.author_name,
                "genre": book.genre_name,
                "loans": book.total_loans,
            }
            for idx, book in enumerate(books, start=1)
        ],
        row_key="rank",
    ).classes("w-full")


def _delinquent_table(users: Sequence[DelinquentUser]) -> None:
    if not users:
        empty_state("No delinquent users in this range.")
        return
    ui.table(
        columns=[
            {"name": "name", "label": "User", "field": "name", "align": "left"},
            {"name": "email", "label": "Email", "field": "email", "align": "left"},
            {"name": "phone", "label": "Phone", "field": "phone", "align": "left"},
            {"name": "title", "label": "Book", "field": "title", "align": "left"},
            {"name": "loaned_at", "label": "Loaned", "field": "loaned_at"},
            {"name": "weeks", "label": "Weeks late", "field": "weeks"},
        ],
        rows=[
            {
                "key": f"{user.user_id}-{user.book_id}-{user.loaned_at}",
                "name": user.name,
                "email": user.email,
                "phone": user.phone or "-",
                "title": user.book_title,
                "loaned_at": user.loaned_at,
                "weeks": user.weeks_late,
            }
            for user in users
        ],
        row_key="key",
    ).classes("w-full")


def _build_ui(runtime: WebRuntime) -> None:
    """Register the NiceGUI pages for the runtime."""

    @ui.page("/")
    async def dashboard_page() -> None:
        nav_header("/")
        vm = runtime.dashboard_vm()

        def render_loaded(stats: DashboardStats) -> None:
            with ui.row().classes("w-full q-gutter-md"):
                stat_tile("Users", stats.total_users, "group")
                stat_tile("Books", stats.total_books, "menu_book")
                stat_tile("Authors", stats.total_authors, "person")
                stat_tile("Genres", stats.total_genres, "category")
                stat_tile("Active loans", stats.active_loans, "swap_horiz", "positive")
                stat_tile("Delinquent users", stats.delinquent_users, "warning", "negative")
                stat_tile("Due soon", stats.due_soon, "schedule", "warning")

        @ui.refreshable
        def render() -> None:
            fetch_state_view(vm, render_loaded, "Loading statistics...")

        with page_body("Dashboard", "Library overview"):
            vm.on_change = render.refresh
            render()
        await _mount(vm)

    @ui.page("/libros")
    async def book_stats_page() -> None:
        nav_header("/libros")
        vm = runtime.book_stats_vm()

        def render_loaded(stats: BookStatistics) -> None:
            if stats.semester is not None or stats.top_genre is not None:
                with ui.row().classes("w-full q-gutter-md"):
                    if stats.semester is not None:
                        semester = stats.semester
                        with ui.card().classes("biblio-card q-pa-md"):
                            ui.label("This semester").classes("text-subtitle1")
                            ui.label(f"Top book: {semester.top_book_title or '-'}")
                            if semester.top_book_author:
                                ui.label(f"by {semester.top_book_author}").classes("biblio-muted")
                            ui.label(f"{semester.top_book_loans} loans").classes("biblio-mono")
                            ui.label(f"Top reader: {semester.top_user_name or '-'}")
                            ui.label(f"{semester.top_user_loans} loans").classes("biblio-mono")
                    if stats.top_genre is not None:
                        with ui.card().classes("biblio-card q-pa-md"):
                            ui.label("Most requested genre").classes("text-subtitle1")
                            ui.label(stats.top_genre.genre_name).classes("text-h6")
                            ui.label(f"{stats.top_genre.total_requests} requests").classes("biblio-mono")

            if stats.random_picks:
                ui.label("Featured books").classes("text-h6")
                with ui.row().classes("w-full q-gutter-md"):
                    for book in stats.random_picks:
                        with ui.card().classes("biblio-card q-pa-md"):
                            ui.label(book.title).classes("text-subtitle1")
                            ui.label(book.author_name).classes("biblio-muted")
                            ui.badge(book.genre_name or "-", color="primary")

            ui.label(f"Top {TOP_N} most lent").classes("text-h6")
            _book_table(vm.most_lent())
            ui.label(f"Top {TOP_N} least lent").classes("text-h6")
            _book_table(vm.least_lent())

        @ui.refreshable
        def render() -> None:
            fetch_state_view(vm, render_loaded, "Loading books...")

        with page_body("Books", "Lending statistics"):
            vm.on_change = render.refresh
            render()
        await _mount(vm)

    @ui.page("/autores")
    async def author_stats_page() -> None:
        nav_header("/autores")
        vm = runtime.author_stats_vm()

        def render_loaded(stats: AuthorStatistics) -> None:
            top = stats.top_country
            with ui.card().classes("biblio-card q-pa-md"):
                ui.label("Country with most authors").classes("text-subtitle1")
                if top is None:
                    empty_state("No data.")
                else:
                    ui.label(top.country_name).classes("text-h6")
                    ui.label(f"{top.total_authors} authors").classes("biblio-mono")

            if not vm.has_publications:
                empty_state("No publication data available.")
                return
            for title, rows in (
                ("Countries with most publications", stats.publications.most),
                ("Countries with fewest publications", stats.publications.least),
            ):
                ui.label(title).classes("text-h6")
                ui.table(
                    columns=[
                        {"name": "country", "label": "Country", "field": "country", "align": "left"},
                        {"name": "books", "label": "Books", "field": "books"},
                        {"name": "publications", "label": "Publications", "field": "publications"},
                    ],
                    rows=[
                        {
                            "id": row.country_id,
                            "country": row.country_name,
                            "books": row.total_books,
                            "publications": row.total_publications,
                        }
                        for row in rows
                    ],
                    row_key="id",
                ).classes("w-full")

        @ui.refreshable
        def render() -> None:
            fetch_state_view(vm, render_loaded, "Loading authors...")

        with page_body("Authors", "Authors and publications by country"):
            vm.on_change = render.refresh
            render()
        await _mount(vm)

    @ui.page("/morosos")
    async def delinquent_page() -> None:
        nav_header("/morosos")
        vm = runtime.delinquency_vm()

        def render_loaded(report: DelinquencyReport) -> None:
            with ui.row().classes("w-full q-gutter-md"):
                stat_tile("5 to 10 weeks late", len(report.five_to_ten_weeks), "hourglass_bottom", "warning")
                stat_tile("More than 10 weeks late", len(report.over_ten_weeks), "report", "negative")
                stat_tile("Total", report.total, "group")
            ui.label("5 to 10 weeks").classes("text-h6")
            _delinquent_table(report.five_to_ten_weeks)
            ui.label("More than 10 weeks").classes("text-h6")
            _delinquent_table(report.over_ten_weeks)

        @ui.refreshable
        def render() -> None:
            fetch_state_view(vm, render_loaded, "Loading delinquent users...")

        with page_body("Delinquent users", "Open loans past their due date"):
            vm.on_change = render.refresh
            render()
        await _mount(vm)

    @ui.page("/prestamos")
    async def loans_page() -> None:
        nav_header("/prestamos")
        gate = _gate_layer(runtime)
        vm: LoansVM = runtime.loans_vm(gate)

        def render_form() -> None:
            with ui.card().classes("biblio-card q-pa-md w-full"):
                ui.label("New loan").classes("text-h6")
                with ui.row().classes("w-full items-end q-gutter-md"):
                    ui.select(
                        vm.user_options(),
                        value=int(vm.selected_user) if vm.selected_user else None,
                        label="User",
                        with_input=True,
                        on_change=lambda e: vm.select_user(e.value),
                    ).props("outlined dense").classes("w-72")
                    ui.select(
                        vm.book_options(),
                        value=int(vm.selected_book) if vm.selected_book else None,
                        label="Book",
                        with_input=True,
                        on_change=lambda e: vm.select_book(e.value),
                    ).props("outlined dense").classes("w-72")
                    submit = ui.button("Register loan", icon="add", color="primary", on_click=vm.request_register)
                    if vm.submitting:
                        submit.props("loading")
                        submit.disable()

        def render_loaded(_: LoansOverview) -> None:
            active, late, due_soon = vm.counts()
            with ui.row().classes("w-full q-gutter-md"):
                stat_tile("Active loans", active, "swap_horiz")
                stat_tile("Late or overdue", late, "warning", "negative")
                stat_tile("Due soon", due_soon, "schedule", "warning")
            render_form()

            ui.label("Due soon").classes("text-h6")
            if not vm.due_soon_rows():
                empty_state("No loans due in the next days.")
            for row in vm.due_soon_rows():
                loan = row.loan
                with ui.card().classes("biblio-card q-pa-sm w-full"):
                    with ui.row().classes("w-full items-center justify-between"):
                        with ui.column().classes("q-gutter-none"):
                            ui.label(loan.book_title).classes("text-subtitle1")
                            ui.label(f"{loan.user_name} ({loan.user_email})").classes("biblio-muted")
                        ui.badge(row.due_label, color="warning")
                        ui.button("Return", icon="assignment_return", color="warning",
                                  on_click=lambda _, item=loan: vm.request_return(item)).props("outline no-caps")

            ui.label("Active loans").classes("text-h6")
            if not vm.active_rows():
                empty_state("No active loans.")
            for row in vm.active_rows():
                loan = row.loan
                with ui.card().classes("biblio-card q-pa-sm w-full"):
                    with ui.row().classes("w-full items-center justify-between"):
                        with ui.column().classes("q-gutter-none"):
                            ui.label(loan.book_title).classes("text-subtitle1")
                            ui.label(f"{loan.user_name} ({loan.user_email})").classes("biblio-muted")
                            ui.label(f"Since {loan.loaned_at}").classes("biblio-mono text-caption")
                        with ui.row().classes("items-center q-gutter-sm"):
                            ui.badge(row.days_label, color=loan_tone_color(row.tone))
                            ui.label(loan_tone_label(row.tone)).classes("text-caption")
                        ui.button("Return", icon="assignment_return", color="warning",
                                  on_click=lambda _, item=loan: vm.request_return(item)).props("outline no-caps")

        @ui.refreshable
        def render() -> None:
            fetch_state_view(vm, render_loaded, "Loading loans...")

        with page_body("Loans", "Register loans and process returns"):
            vm.on_change = render.refresh
            render()
        await _mount(vm)

    for path, spec, title, subtitle in MANAGE_PAGES:
        _build_manage_page(runtime, path, spec, title, subtitle)


def _build_manage_page(runtime: WebRuntime, path: str, spec: ResourceSpec, title: str, subtitle: str) -> None:
    """Register one create/edit/delete page for ``spec``."""

    @ui.page(path)
    async def manage_page() -> None:
        nav_header(path)
        gate = _gate_layer(runtime)
        vm: ManagePageVM = runtime.manage_vm(spec, gate, on_edit=_scroll_to_top)

        def render_field(name: str, label: str, kind: str, lookup: Optional[str]) -> None:
            value = vm.draft.fields.get(name, "")
            if kind == "select" and lookup:
                options: Dict[int, str] = vm.options(lookup)
                selected = int(value) if value.isdigit() and int(value) in options else None
                ui.select(
                    options,
                    value=selected,
                    label=label,
                    on_change=lambda e, n=name: vm.set_field(n, e.value),
                ).props("outlined dense").classes("w-64")
            else:
                ui.input(
                    label=label,
                    value=value,
                    on_change=lambda e, n=name: vm.set_field(n, e.value),
                ).props(f"outlined dense type={'email' if kind == 'email' else 'text'}").classes("w-64")

        def render_form() -> None:
            editing = vm.draft.is_editing
            heading = f"Edit {spec.noun}" if editing else f"New {spec.noun}"
            with ui.card().classes("biblio-card q-pa-md w-full"):
                ui.label(heading).classes("text-h6")
                with ui.row().classes("w-full items-end q-gutter-md"):
                    for form_field in spec.fields:
                        render_field(form_field.name, form_field.label, form_field.kind, form_field.lookup)
                with ui.row().classes("q-gutter-sm"):
                    submit = ui.button(
                        "Update" if editing else "Create",
                        icon="save" if editing else "add",
                        color="primary",
                        on_click=vm.request_submit,
                    )
                    if vm.submitting:
                        submit.props("loading")
                        submit.disable()
                    if editing:
                        ui.button("Cancel", on_click=vm.cancel_edit).props("flat no-caps")

        def render_records(data: ManagePageData) -> None:
            ui.label(f"{spec.plural.capitalize()} ({len(data.records)})").classes("text-h6")
            if not data.records:
                empty_state(f"No {spec.plural} registered.")
                return
            with ui.grid(columns=3).classes("w-full"):
                for row in data.records:
                    with ui.card().classes("biblio-card q-pa-sm"):
                        ui.label(spec.record_label(row)).classes("text-subtitle1")
                        for detail_label, detail_value in vm.details(row):
                            ui.label(f"{detail_label}: {detail_value}").classes("biblio-muted text-caption")
                        with ui.row().classes("q-gutter-xs"):
                            ui.button("Edit", icon="edit", on_click=lambda _, r=row: vm.start_edit(r)).props(
                                "flat dense no-caps"
                            )
                            ui.button(
                                "Delete",
                                icon="delete",
                                color="negative",
                                on_click=lambda _, r=row: vm.request_delete(r),
                            ).props("flat dense no-caps")

        def render_loaded(data: ManagePageData) -> None:
            render_form()
            render_records(data)

        @ui.refreshable
        def render() -> None:
            fetch_state_view(vm, render_loaded, f"Loading {spec.plural}...")

        with page_body(title, subtitle):
            vm.on_change = render.refresh
            render()
        await _mount(vm)


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse CLI args for web runtime startup."""
    parser = argparse.ArgumentParser(description="Run the library admin NiceGUI web UI.")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8080)
    parser.add_argument("--reload", action="store_true")
    parser.add_argument("--api-base-url", default=None, help="Backend base URL, e.g. http://localhost:3000/api")
    parser.add_argument("--timeout-ms", type=int, default=None, help="Request timeout in milliseconds")
    parser.add_argument("--config", default=None, help="Flat JSON file with api_base_url / timeout_ms")
    parser.add_argument("--demo", action="store_true", help="Serve from an in-memory sample library")
    parser.add_argument("--smoke-test", action="store_true")
    return parser.parse_args(argv)


def _resolve(args: argparse.Namespace) -> AppConfig:
    return resolve_config(
        api_base_url=args.api_base_url,
        timeout_ms=args.timeout_ms,
        config_path=args.config,
    )


def main(argv: Optional[Sequence[str]] = None) -> None:
    """CLI entrypoint for the NiceGUI runtime."""
    level = logging_utils.configure_root()
    args = _parse_args(argv)
    config = _resolve(args)
    runtime = WebRuntime(config, demo=args.demo)
    LOGGER.info("Log level %s; config %s", logging_utils.level_name(level), runtime.describe())
    if args.smoke_test:
        payload: Dict[str, Any] = runtime.describe()
        print("web-smoke-ok", json.dumps(payload, sort_keys=True))
        return
    _install_theme()
    _build_ui(runtime)
    ui.run(
        host=args.host,
        port=args.port,
        title="Library Admin",
        reload=args.reload,
        show=False,
    )


if __name__ in {"__main__", "__mp_main__"}:
    main()
