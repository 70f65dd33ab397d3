from __future__ import annotations

import pytest

from biblio.adapters.api_errors import (
    ApiClientError,
    ApiError,
    ApiRejectedError,
    ApiServerError,
    ApiTimeoutError,
)
from biblio.domain.entities import ApiEnvelope
from biblio.domain.ports import UseCaseError
from biblio.domain.resources import AUTHORS, BOOKS, GENRES
from biblio.tests.unit.viewmodels.helpers import RecordingLibrary
from biblio.usecases.delete_record import DeleteRecord
from biblio.usecases.error_mapping import map_api_error
from biblio.usecases.load_author_statistics import LoadAuthorStatistics
from biblio.usecases.load_book_statistics import LoadBookStatistics
from biblio.usecases.load_dashboard import LoadDashboard
from biblio.usecases.load_delinquent_users import LoadDelinquentUsers
from biblio.usecases.load_loans_overview import LoadLoansOverview
from biblio.usecases.load_manage_page import LoadManagePage
from biblio.usecases.register_loan import RegisterLoan
from biblio.usecases.return_loan import ReturnLoan
from biblio.usecases.save_record import SaveRecord


@pytest.mark.parametrize(
    "exc, code",
    [
        (ApiTimeoutError("slow", context="GET /libros"), "REQUEST_TIMEOUT"),
        (ApiRejectedError("nope", status=200, payload={"error": "x"}), "REJECTED"),
        (ApiClientError("gone", status=404), "NOT_FOUND"),
        (ApiClientError("bad", status=400, hint="titulo is required"), "INVALID_REQUEST"),
        (ApiClientError("teapot", status=418), "REQUEST_FAILED"),
        (ApiServerError("boom", status=503), "SERVER_ERROR"),
        (ApiError("odd", status=302), "API_ERROR"),
        (RuntimeError("kaput"), "FALLBACK"),
    ],
)
def test_map_api_error_codes(exc: Exception, code: str) -> None:
    assert map_api_error(exc, default_code="FALLBACK").code == code


def test_map_api_error_keeps_hint_and_passes_use_case_errors() -> None:
    err = map_api_error(ApiClientError("bad", status=422, hint="email invalid"), default_code="X")
    original = UseCaseError("INVALID_FORM", "Author must be selected.")

    assert err.message == "Invalid request: email invalid"
    assert map_api_error(original, default_code="X") is original


def test_load_manage_page_fetches_records_and_lookups() -> None:
    library = RecordingLibrary()

    data = LoadManagePage(library, BOOKS)()

    assert library.calls == [("GET", "/libros"), ("GET", "/autores"), ("GET", "/generos")]
    assert len(data.records) == 5
    assert {row["id_autor"] for row in data.lookups["authors"]} == {1, 2, 3, 4}


def test_load_manage_page_static_lookup_needs_no_request() -> None:
    library = RecordingLibrary()

    data = LoadManagePage(library, AUTHORS)()

    assert library.calls == [("GET", "/autores")]
    assert len(data.lookups["countries"]) == 5


def test_load_manage_page_fails_as_a_whole() -> None:
    library = RecordingLibrary()
    library.fail_paths.add("/generos")

    with pytest.raises(UseCaseError) as info:
        LoadManagePage(library, BOOKS)()

    assert info.value.code == "SERVER_ERROR"


def test_save_record_creates_and_updates() -> None:
    library = RecordingLibrary()
    save = SaveRecord(library, GENRES)

    created = save({"nombre_genero": "Ensayo"})
    assert created is not None
    save({"nombre_genero": "Ensayo breve"}, editing_id=created["id_genero"])

    assert library.mutations() == [("POST", "/generos"), ("PUT", f"/generos/{created['id_genero']}")]


def test_save_record_invalid_form_sends_nothing() -> None:
    library = RecordingLibrary()

    with pytest.raises(UseCaseError) as info:
        SaveRecord(library, BOOKS)({"titulo": "Sin autor", "id_autor": "", "id_genero": "1"})

    assert info.value.code == "INVALID_FORM"
    assert library.calls == []


def test_delete_record_maps_blocked_delete() -> None:
    library = RecordingLibrary()

    with pytest.raises(UseCaseError) as info:
        DeleteRecord(library, AUTHORS)(1)

    assert info.value.code == "INVALID_REQUEST"
    assert "author is referenced by books" in info.value.message


def test_dashboard_combines_counts() -> None:
    stats = LoadDashboard(RecordingLibrary())()

    assert (stats.total_users, stats.total_books, stats.active_loans) == (3, 5, 4)
    assert (stats.total_authors, stats.total_genres) == (4, 3)
    assert stats.delinquent_users == 2
    assert stats.due_soon == 1


def test_dashboard_survives_due_soon_failure() -> None:
    library = RecordingLibrary()
    library.fail_paths.add("/notificaciones/proximos-vencer")

    stats = LoadDashboard(library)()

    assert stats.due_soon == 0
    assert stats.total_books == 5


def test_dashboard_fails_when_summary_fails() -> None:
    library = RecordingLibrary()
    library.fail_paths.add("/estadisticas/dashboard")

    with pytest.raises(UseCaseError) as info:
        LoadDashboard(library)()

    assert info.value.code == "SERVER_ERROR"


def test_loans_overview_and_mutations() -> None:
    library = RecordingLibrary()

    overview = LoadLoansOverview(library)()
    RegisterLoan(library)(2, 7)
    ReturnLoan(library)(overview.active[0].loan_id)

    assert len(overview.active) == 4
    assert overview.due_soon[0].days_left == 2
    assert len(overview.users) == 3
    assert library.mutations() == [("POST", "/prestamos"), ("PUT", f"/prestamos/{overview.active[0].loan_id}/devolver")]


def test_return_unknown_loan_maps_not_found() -> None:
    with pytest.raises(UseCaseError) as info:
        ReturnLoan(RecordingLibrary())(999)

    assert info.value.code == "NOT_FOUND"


def test_statistics_use_cases() -> None:
    library = RecordingLibrary()

    books = LoadBookStatistics(library)()
    authors = LoadAuthorStatistics(library)()
    report = LoadDelinquentUsers(library)()

    assert books.least_lent[0].title == "Don Quijote"
    assert len(books.random_picks) == 3
    assert books.top_genre is not None and books.top_genre.genre_name == "Novela"
    assert books.semester is not None and books.semester.top_user_name == "Ana Torres"
    assert authors.top_country is not None
    assert not authors.publications.is_empty
    assert report.total == 2
    assert report.over_ten_weeks[0].name == "Marta Ruiz"


class _MalformedDashboardLibrary(RecordingLibrary):
    def fetch(self, path, *, params=None):
        if path == "/estadisticas/dashboard":
            self.calls.append(("GET", path))
            return ApiEnvelope(success=True, data={"total_usuarios": "3.0", "total_libros": "n/a"})
        return super().fetch(path, params=params)


def test_dashboard_tolerates_malformed_summary_numbers() -> None:
    stats = LoadDashboard(_MalformedDashboardLibrary())()

    assert stats.total_users == 3
    assert stats.total_books == 0
    assert stats.active_loans == 0
    assert (stats.total_authors, stats.total_genres) == (4, 3)
