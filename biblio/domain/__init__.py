"""Domain package exports for entities, ports and resource descriptions."""

from .entities import (
    ActiveLoan,
    ApiEnvelope,
    BookSummary,
    CountryAuthors,
    CountryPublications,
    DashboardStats,
    DelinquentUser,
    LoanDueSoon,
    PublicationsByCountry,
    Row,
    SemesterStats,
    TopGenre,
)
from .fetch_state import Failed, FetchState, Idle, Loaded, Loading, RequestFence
from .ports import LibraryPort, RecordId, UseCaseError
from .resources import AUTHORS, BOOKS, GENRES, RESOURCES, USERS, ResourceSpec

__all__ = [
    "AUTHORS",
    "ActiveLoan",
    "ApiEnvelope",
    "BOOKS",
    "BookSummary",
    "CountryAuthors",
    "CountryPublications",
    "DashboardStats",
    "DelinquentUser",
    "Failed",
    "FetchState",
    "GENRES",
    "Idle",
    "LibraryPort",
    "LoanDueSoon",
    "Loaded",
    "Loading",
    "PublicationsByCountry",
    "RESOURCES",
    "RecordId",
    "RequestFence",
    "ResourceSpec",
    "Row",
    "SemesterStats",
    "TopGenre",
    "USERS",
    "UseCaseError",
]
