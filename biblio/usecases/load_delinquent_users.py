from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from biblio.domain.entities import DelinquentUser
from biblio.domain.ports import LibraryPort
from biblio.usecases.error_mapping import map_api_error


@dataclass(frozen=True)
class DelinquencyReport:
    five_to_ten_weeks: Tuple[DelinquentUser, ...] = ()
    over_ten_weeks: Tuple[DelinquentUser, ...] = ()

    @property
    def total(self) -> int:
        return len(self.five_to_ten_weeks) + len(self.over_ten_weeks)


@dataclass
class LoadDelinquentUsers:
    port: LibraryPort

    def __call__(self) -> DelinquencyReport:
        try:
            mid = self.port.fetch("/usuarios/morosos/5-10-semanas")
            long = self.port.fetch("/usuarios/morosos/mas-10-semanas")
        except Exception as exc:
            raise map_api_error(exc, default_code="LOAD_FAILED") from exc
        return DelinquencyReport(
            five_to_ten_weeks=tuple(DelinquentUser.from_payload(row) for row in mid.rows()),
            over_ten_weeks=tuple(DelinquentUser.from_payload(row) for row in long.rows()),
        )
