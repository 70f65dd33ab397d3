"""NiceGUI runtime orchestration for the library dashboard.

This module composes the backend adapter, use cases and page viewmodels for
the web runtime. Pages ask the runtime for fresh viewmodels on every visit so
each browser tab owns its own fetch state and action gate.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from nicegui import run

from biblio.adapters.library_mock import InMemoryLibrary
from biblio.adapters.library_rest import LibraryRestAdapter
from biblio.config import AppConfig
from biblio.domain.ports import LibraryPort
from biblio.domain.resources import RESOURCES, ResourceSpec
from biblio.usecases.delete_record import DeleteRecord
from biblio.usecases.load_author_statistics import LoadAuthorStatistics
from biblio.usecases.load_book_statistics import LoadBookStatistics
from biblio.usecases.load_dashboard import LoadDashboard
from biblio.usecases.load_delinquent_users import LoadDelinquentUsers
from biblio.usecases.load_loans_overview import LoadLoansOverview
from biblio.usecases.load_manage_page import LoadManagePage
from biblio.usecases.register_loan import RegisterLoan
from biblio.usecases.return_loan import ReturnLoan
from biblio.usecases.save_record import SaveRecord
from biblio.utils import logging as logging_utils
from biblio.viewmodels.action_gate_vm import ActionGate, Scheduler
from biblio.viewmodels.fetch_vm import IoRunner
from biblio.viewmodels.loans_vm import LoansVM
from biblio.viewmodels.manage_page_vm import ManagePageVM
from biblio.viewmodels.stats_vm import AuthorStatsVM, BookStatsVM, DashboardVM, DelinquencyVM

LOGGER = logging.getLogger(__name__)

OnChange = Optional[Callable[[], None]]


def build_port(config: AppConfig, *, demo: bool = False) -> LibraryPort:
    """Return the in-memory backend for demos, the REST adapter otherwise."""
    if demo:
        LOGGER.info("Using in-memory demo backend.")
        return InMemoryLibrary()
    LOGGER.info("Using REST backend at %s (timeout %d ms).", config.api_base_url, config.timeout_ms)
    return LibraryRestAdapter.from_config(config)


class WebRuntime:
    """Shared wiring used by the NiceGUI pages."""

    def __init__(
        self,
        config: AppConfig,
        *,
        port: Optional[LibraryPort] = None,
        demo: bool = False,
        runner: Optional[IoRunner] = None,
    ) -> None:
        self.config = config
        self.demo = demo
        self.port = port if port is not None else build_port(config, demo=demo)
        self.runner: IoRunner = runner or run.io_bound

        if logging_utils.env_requests_debug():
            logging.getLogger("urllib3").setLevel(logging.DEBUG)

        self.uc_dashboard = LoadDashboard(self.port)
        self.uc_book_stats = LoadBookStatistics(self.port)
        self.uc_author_stats = LoadAuthorStatistics(self.port)
        self.uc_delinquent = LoadDelinquentUsers(self.port)
        self.uc_loans = LoadLoansOverview(self.port)
        self.uc_register_loan = RegisterLoan(self.port)
        self.uc_return_loan = ReturnLoan(self.port)

    # ------------------------------------------------------------------
    # Per-page factories
    # ------------------------------------------------------------------
    @staticmethod
    def new_gate(scheduler: Scheduler, on_change: OnChange = None) -> ActionGate:
        return ActionGate(scheduler=scheduler, on_change=on_change)

    def dashboard_vm(self, on_change: OnChange = None) -> DashboardVM:
        return DashboardVM(self.uc_dashboard, runner=self.runner, on_change=on_change)

    def book_stats_vm(self, on_change: OnChange = None) -> BookStatsVM:
        return BookStatsVM(self.uc_book_stats, runner=self.runner, on_change=on_change)

    def author_stats_vm(self, on_change: OnChange = None) -> AuthorStatsVM:
        return AuthorStatsVM(self.uc_author_stats, runner=self.runner, on_change=on_change)

    def delinquency_vm(self, on_change: OnChange = None) -> DelinquencyVM:
        return DelinquencyVM(self.uc_delinquent, runner=self.runner, on_change=on_change)

    def loans_vm(self, gate: ActionGate, on_change: OnChange = None) -> LoansVM:
        return LoansVM(
            load=self.uc_loans,
            register=self.uc_register_loan,
            return_loan=self.uc_return_loan,
            gate=gate,
            runner=self.runner,
            on_change=on_change,
        )

    def manage_vm(
        self,
        resource: str | ResourceSpec,
        gate: ActionGate,
        on_change: OnChange = None,
        on_edit: OnChange = None,
    ) -> ManagePageVM:
        spec = RESOURCES[resource] if isinstance(resource, str) else resource
        return ManagePageVM(
            spec,
            load=LoadManagePage(self.port, spec),
            save=SaveRecord(self.port, spec),
            delete=DeleteRecord(self.port, spec),
            gate=gate,
            runner=self.runner,
            on_change=on_change,
            on_edit=on_edit,
        )

    def describe(self) -> dict:
        """Startup summary for logs and ``--smoke-test``."""
        payload = self.config.to_dict()
        payload["backend"] = "demo" if self.demo else "rest"
        payload["resources"] = sorted(RESOURCES)
        return payload


__all__ = ["WebRuntime", "build_port"]
