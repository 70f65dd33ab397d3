"""Loans page: active loans, loans due soon, and the register/return actions."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Callable, Dict, List, Optional, Tuple, Union

from biblio.domain.entities import ActiveLoan, LoanDueSoon
from biblio.domain.loan_status import LoanTone, due_in_label, loan_tone
from biblio.domain.ports import RecordId, UseCaseError
from biblio.usecases.load_loans_overview import LoadLoansOverview, LoansOverview
from biblio.usecases.register_loan import RegisterLoan
from biblio.usecases.return_loan import ReturnLoan
from .action_gate_vm import ActionGate
from .fetch_vm import FetchVM, IoRunner

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoanRow:
    """Display row for the active-loans list."""
    loan: ActiveLoan
    tone: LoanTone
    days_label: str


@dataclass(frozen=True)
class DueSoonRow:
    loan: LoanDueSoon
    due_label: str


class LoansVM(FetchVM[LoansOverview]):
    error_message = "Error loading loan data"

    def __init__(
        self,
        *,
        load: LoadLoansOverview,
        register: RegisterLoan,
        return_loan: ReturnLoan,
        gate: ActionGate,
        runner: Optional[IoRunner] = None,
        on_change: Optional[Callable[[], None]] = None,
    ) -> None:
        super().__init__(load, runner=runner, on_change=on_change)
        self._register = register
        self._return = return_loan
        self.gate = gate
        self.selected_user = ""
        self.selected_book = ""
        self.submitting = False

    # ------------------------------------------------------------------
    # Projections
    # ------------------------------------------------------------------
    def user_options(self) -> Dict[int, str]:
        data = self.data
        if data is None:
            return {}
        return {
            int(row["id_usuario"]): f"{row.get('nombre', '')} ({row.get('email', '')})"
            for row in data.users
            if "id_usuario" in row
        }

    def book_options(self) -> Dict[int, str]:
        data = self.data
        if data is None:
            return {}
        return {int(row["id_libro"]): str(row.get("titulo", "")) for row in data.books if "id_libro" in row}

    def active_rows(self) -> List[LoanRow]:
        data = self.data
        if data is None:
            return []
        return [
            LoanRow(loan=loan, tone=loan_tone(loan.days_on_loan), days_label=f"{loan.days_on_loan} days")
            for loan in data.active
        ]

    def due_soon_rows(self) -> List[DueSoonRow]:
        data = self.data
        if data is None:
            return []
        return [DueSoonRow(loan=loan, due_label=due_in_label(loan.days_left)) for loan in data.due_soon]

    def counts(self) -> Tuple[int, int, int]:
        """(active, late or overdue, due soon) for the summary tiles."""
        rows = self.active_rows()
        late = sum(1 for row in rows if row.tone != "ok")
        return len(rows), late, len(self.due_soon_rows())

    # ------------------------------------------------------------------
    # Guarded mutations
    # ------------------------------------------------------------------
    def select_user(self, value: object) -> None:
        self.selected_user = "" if value is None else str(value)

    def select_book(self, value: object) -> None:
        self.selected_book = "" if value is None else str(value)

    def request_register(self) -> bool:
        if self.submitting:
            return False
        if not self.selected_user or not self.selected_book:
            return False
        user_id, book_id = int(self.selected_user), int(self.selected_book)
        user_name = self._user_name(user_id)
        book_title = self.book_options().get(book_id, "")
        self.gate.request_confirmation(
            "Register loan",
            f"Are you sure you want to register this loan?\n\nUser: {user_name}\nBook: {book_title}",
            lambda: self._register_loan(user_id, book_id, user_name),
            "info",
        )
        return True

    def request_return(self, loan: Union[ActiveLoan, LoanDueSoon]) -> None:
        self.gate.request_confirmation(
            "Return book",
            f"Confirm the return?\n\nBook: {loan.book_title}\nUser: {loan.user_name}",
            lambda: self._return_loan(loan.loan_id, loan.book_title),
            "warning",
        )

    async def _register_loan(self, user_id: RecordId, book_id: RecordId, user_name: str) -> None:
        self.submitting = True
        self._changed()
        try:
            await self._runner(self._register, user_id, book_id)
        except UseCaseError as exc:
            LOGGER.error("Registering loan failed: [%s] %s", exc.code, exc.message)
            self.gate.notify("Error creating the loan", "error")
            return
        finally:
            self.submitting = False
            self._changed()
        self.gate.notify(f"Loan registered successfully for {user_name}")
        self.selected_user = ""
        self.selected_book = ""
        await self.refresh()

    async def _return_loan(self, loan_id: RecordId, book_title: str) -> None:
        try:
            await self._runner(self._return, loan_id)
        except UseCaseError as exc:
            LOGGER.error("Returning loan #%s failed: [%s] %s", loan_id, exc.code, exc.message)
            self.gate.notify("Error processing the return", "error")
            return
        self.gate.notify(f'Book "{book_title}" returned successfully')
        await self.refresh()

    def _user_name(self, user_id: int) -> str:
        data = self.data
        if data is None:
            return ""
        for row in data.users:
            if row.get("id_usuario") == user_id:
                return str(row.get("nombre", ""))
        return ""


__all__ = ["DueSoonRow", "LoanRow", "LoansVM"]
