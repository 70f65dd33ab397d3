from __future__ import annotations

import pytest

from biblio.domain.resources import AUTHORS, BOOKS, GENRES, RESOURCES, USERS


def test_catalogue_covers_managed_resources() -> None:
    assert set(RESOURCES) == {"books", "authors", "genres", "users"}
    assert BOOKS.collection == "/libros"
    assert BOOKS.list_limit == 1000
    assert AUTHORS.lookup("countries").is_static
    assert [spec.key for spec in BOOKS.fetched_lookups()] == ["authors", "genres"]


def test_book_draft_resolves_ids_from_display_names() -> None:
    row = {"id_libro": 7, "titulo": "Don Quijote", "nombre_autor": "Miguel de Cervantes", "nombre_genero": "Novela"}
    lookups = {
        "authors": [{"id_autor": 1, "nombre_autor": "Miguel de Cervantes"}],
        "genres": [{"id_genero": 1, "nombre_genero": "Novela"}, {"id_genero": 2, "nombre_genero": "Cuento"}],
    }

    draft = BOOKS.draft_from_record(row, lookups)

    assert draft == {"titulo": "Don Quijote", "id_autor": "1", "id_genero": "1"}


def test_author_draft_uses_static_countries() -> None:
    row = {"id_autor": 3, "nombre_autor": "Jorge Luis Borges", "nombre_pais": "Argentina"}

    draft = AUTHORS.draft_from_record(row, {})

    assert draft == {"nombre_autor": "Jorge Luis Borges", "id_pais": "3"}


def test_unresolvable_select_stays_empty() -> None:
    row = {"id_libro": 9, "titulo": "Huérfano", "nombre_autor": "Desconocido", "nombre_genero": "Novela"}

    draft = BOOKS.draft_from_record(row, {"authors": [], "genres": []})

    assert draft["id_autor"] == ""
    assert draft["id_genero"] == ""


def test_missing_fields_report_labels() -> None:
    assert USERS.missing_fields({"nombre": "Ana", "email": "  "}) == ["Email"]
    assert GENRES.missing_fields({"nombre_genero": "Ensayo"}) == []


def test_payload_converts_select_values() -> None:
    payload = BOOKS.payload_from_draft({"titulo": "Ficciones", "id_autor": "3", "id_genero": " 2 "})

    assert payload == {"titulo": "Ficciones", "id_autor": 3, "id_genero": 2}


def test_payload_rejects_unselected_option() -> None:
    with pytest.raises(ValueError):
        BOOKS.payload_from_draft({"titulo": "Ficciones", "id_autor": "", "id_genero": "2"})


def test_user_facing_text() -> None:
    title, message = BOOKS.delete_prompt("Don Quijote")

    assert title == "Delete book"
    assert message == 'Are you sure you want to delete "Don Quijote"?\n\nThis action cannot be undone.'
    assert BOOKS.success_message("deleted", "Don Quijote") == 'Book "Don Quijote" deleted successfully'
    assert AUTHORS.failure_message("creating") == "Error creating the author"
    assert GENRES.load_error_message() == "Error loading genres"
