from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from biblio.domain.entities import ActiveLoan, LoanDueSoon, Row
from biblio.domain.ports import LibraryPort
from biblio.usecases.error_mapping import map_api_error

LOAN_BOOKS_LIMIT = 100


@dataclass(frozen=True)
class LoansOverview:
    active: Tuple[ActiveLoan, ...] = ()
    due_soon: Tuple[LoanDueSoon, ...] = ()
    users: Tuple[Row, ...] = ()
    books: Tuple[Row, ...] = ()


@dataclass
class LoadLoansOverview:
    port: LibraryPort

    def __call__(self) -> LoansOverview:
        try:
            active = self.port.fetch("/prestamos/activos")
            due_soon = self.port.fetch("/notificaciones/proximos-vencer")
            users = self.port.list_records("/usuarios")
            books = self.port.list_records("/libros", limit=LOAN_BOOKS_LIMIT)
        except Exception as exc:
            raise map_api_error(exc, default_code="LOAD_FAILED") from exc
        return LoansOverview(
            active=tuple(ActiveLoan.from_payload(row) for row in active.rows()),
            due_soon=tuple(LoanDueSoon.from_payload(row) for row in due_soon.rows()),
            users=tuple(users.rows()),
            books=tuple(books.rows()),
        )
