from __future__ import annotations

from dataclasses import dataclass

from biblio.domain.ports import LibraryPort, RecordId
from biblio.usecases.error_mapping import map_api_error


@dataclass
class ReturnLoan:
    port: LibraryPort

    def __call__(self, loan_id: RecordId) -> None:
        try:
            self.port.return_loan(loan_id)
        except Exception as exc:
            raise map_api_error(exc, default_code="RETURN_FAILED") from exc
