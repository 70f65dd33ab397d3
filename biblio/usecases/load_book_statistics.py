from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from biblio.domain.entities import BookSummary, SemesterStats, TopGenre
from biblio.domain.ports import LibraryPort
from biblio.usecases.error_mapping import map_api_error


@dataclass(frozen=True)
class BookStatistics:
    most_lent: Tuple[BookSummary, ...] = ()
    least_lent: Tuple[BookSummary, ...] = ()
    random_picks: Tuple[BookSummary, ...] = ()
    semester: Optional[SemesterStats] = None
    top_genre: Optional[TopGenre] = None


@dataclass
class LoadBookStatistics:
    port: LibraryPort

    def __call__(self) -> BookStatistics:
        try:
            most = self.port.fetch("/libros/mas-prestados")
            least = self.port.fetch("/libros/menos-prestados")
            picks = self.port.fetch("/libros/aleatorios")
            semester = self.port.fetch("/libros/estadisticas-semestre").item()
            genre = self.port.fetch("/libros/genero-mas-solicitado").item()
        except Exception as exc:
            raise map_api_error(exc, default_code="LOAD_FAILED") from exc
        return BookStatistics(
            most_lent=tuple(BookSummary.from_payload(row) for row in most.rows()),
            least_lent=tuple(BookSummary.from_payload(row) for row in least.rows()),
            random_picks=tuple(BookSummary.from_payload(row) for row in picks.rows()),
            semester=None if semester is None else SemesterStats.from_payload(semester),
            top_genre=None if genre is None else TopGenre.from_payload(genre),
        )
