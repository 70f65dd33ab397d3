from __future__ import annotations

from dataclasses import dataclass

from biblio.domain.ports import LibraryPort, RecordId
from biblio.usecases.error_mapping import map_api_error


@dataclass
class RegisterLoan:
    port: LibraryPort

    def __call__(self, user_id: RecordId, book_id: RecordId) -> None:
        try:
            self.port.create_loan(user_id, book_id)
        except Exception as exc:
            raise map_api_error(exc, default_code="LOAN_FAILED") from exc
