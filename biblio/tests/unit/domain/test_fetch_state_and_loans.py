from __future__ import annotations

from biblio.domain.entities import ApiEnvelope, PublicationsByCountry, SemesterStats
from biblio.domain.fetch_state import RequestFence
from biblio.domain.loan_status import due_in_label, loan_tone


def test_fence_only_latest_is_current() -> None:
    fence = RequestFence()

    first = fence.issue()
    second = fence.issue()

    assert not fence.is_current(first)
    assert fence.is_current(second)
    assert fence.latest == second


def test_loan_tone_thresholds() -> None:
    assert loan_tone(0) == "ok"
    assert loan_tone(21) == "ok"
    assert loan_tone(22) == "late"
    assert loan_tone(35) == "late"
    assert loan_tone(36) == "overdue"


def test_due_in_label() -> None:
    assert due_in_label(0) == "Due today"
    assert due_in_label(2) == "Due in 2 day(s)"


def test_envelope_rows_and_total() -> None:
    envelope = ApiEnvelope.from_payload({"success": True, "data": [{"a": 1}, "junk", {"a": 2}], "count": 10})

    assert envelope.rows() == [{"a": 1}, {"a": 2}]
    assert envelope.total() == 10
    assert envelope.item() is None


def test_envelope_without_data_is_empty() -> None:
    envelope = ApiEnvelope.from_payload({"success": True})

    assert envelope.rows() == []
    assert envelope.total() == 0


def test_semester_stats_tolerate_missing_sections() -> None:
    stats = SemesterStats.from_payload({"libro_mas_prestado": {"titulo": "Ficciones", "total_prestamos_semestre": "4"}})

    assert stats.top_book_title == "Ficciones"
    assert stats.top_book_loans == 4
    assert stats.top_user_name == ""


def test_publications_empty_when_either_side_missing() -> None:
    payload = {"paises_con_mas_publicaciones": [{"id_pais": 1, "nombre_pais": "México", "total_libros": 2}]}

    assert PublicationsByCountry.from_payload(payload).is_empty
