"""Read-only statistics pages.

Each viewmodel only differs by its loader and the static message shown when
the fetch fails; rendering lives in ``biblio.web_ui.main``.
"""

from __future__ import annotations

from typing import List, Optional

from biblio.domain.entities import BookSummary, DashboardStats
from biblio.usecases.load_author_statistics import AuthorStatistics
from biblio.usecases.load_book_statistics import BookStatistics
from biblio.usecases.load_delinquent_users import DelinquencyReport
from .fetch_vm import FetchVM

TOP_N = 10


class DashboardVM(FetchVM[DashboardStats]):
    error_message = "Error loading dashboard statistics"


class BookStatsVM(FetchVM[BookStatistics]):
    error_message = "Error loading book data. Check that the backend is running."

    def most_lent(self) -> List[BookSummary]:
        data = self.data
        return list(data.most_lent[:TOP_N]) if data is not None else []

    def least_lent(self) -> List[BookSummary]:
        data = self.data
        return list(data.least_lent[:TOP_N]) if data is not None else []


class AuthorStatsVM(FetchVM[AuthorStatistics]):
    error_message = "Error loading author data. Check that the backend is running."

    @property
    def has_publications(self) -> bool:
        data: Optional[AuthorStatistics] = self.data
        return data is not None and not data.publications.is_empty


class DelinquencyVM(FetchVM[DelinquencyReport]):
    error_message = "Error loading delinquent users"


__all__ = ["AuthorStatsVM", "BookStatsVM", "DashboardVM", "DelinquencyVM", "TOP_N"]
