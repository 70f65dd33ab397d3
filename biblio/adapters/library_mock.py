"""In-memory ``LibraryPort`` used for tests and offline development.

The mock keeps a tiny relational catalogue (books, authors, genres, users,
loans) and answers with the same envelope the real backend uses. Failures
are raised as the same typed adapter errors the REST adapter produces, so the
upper layers cannot tell the two apart.
"""

from __future__ import annotations

from collections import Counter
from datetime import date, timedelta
import random
import threading
from typing import Any, Dict, List, Mapping, Optional

from biblio.adapters.api_errors import ApiClientError
from biblio.domain.entities import ApiEnvelope, Row
from biblio.domain.loan_status import DUE_SOON_WINDOW_DAYS
from biblio.domain.ports import LibraryPort, RecordId
from biblio.domain.resources import COUNTRIES

LOAN_PERIOD_DAYS = 14

_COLLECTIONS = {
    "/libros": "id_libro",
    "/autores": "id_autor",
    "/generos": "id_genero",
    "/usuarios": "id_usuario",
}

_EDITABLE = {
    "/libros": ("titulo", "id_autor", "id_genero"),
    "/autores": ("nombre_autor", "id_pais"),
    "/generos": ("nombre_genero",),
    "/usuarios": ("nombre", "email"),
}


def _ok(data: Any = None, *, message: Optional[str] = None, count: Optional[int] = None) -> ApiEnvelope:
    return ApiEnvelope(success=True, data=data, message=message, count=count)


def _not_found(ctx: str) -> ApiClientError:
    return ApiClientError(f"{ctx}: not found (HTTP 404)", status=404, payload={"error": "not found"}, context=ctx)


def _bad_request(ctx: str, detail: str) -> ApiClientError:
    return ApiClientError(
        f"{ctx}: {detail} (HTTP 400)",
        status=400,
        hint=detail,
        payload={"success": False, "error": detail},
        context=ctx,
    )


class InMemoryLibrary(LibraryPort):
    """Thread-safe, seeded stand-in for the library backend."""

    def __init__(self, *, today: Optional[date] = None, seed: int = 7) -> None:
        self._lock = threading.Lock()
        self._today = today or date.today()
        self._random = random.Random(seed)
        self._tables: Dict[str, Dict[int, Row]] = {name: {} for name in _COLLECTIONS}
        self._next_ids: Dict[str, int] = {name: 1 for name in _COLLECTIONS}
        self._loans: Dict[int, Row] = {}
        self._next_loan_id = 1
        self._seed()

    # ------------------------------------------------------------------
    # Seeding helpers (also handy in tests)
    # ------------------------------------------------------------------
    def add_row(self, collection: str, row: Mapping[str, Any]) -> Row:
        with self._lock:
            return self._insert(collection, dict(row))

    def add_loan(self, user_id: int, book_id: int, *, days_on_loan: int = 0) -> Row:
        with self._lock:
            return self._insert_loan(user_id, book_id, days_on_loan)

    def rows(self, collection: str) -> List[Row]:
        with self._lock:
            return [self._view(collection, row) for row in self._tables[collection].values()]

    # ------------------------------------------------------------------
    # LibraryPort
    # ------------------------------------------------------------------
    def list_records(self, collection: str, *, limit: Optional[int] = None) -> ApiEnvelope:
        return self._list(collection, limit)

    def _list(self, collection: str, limit: Optional[int]) -> ApiEnvelope:
        with self._lock:
            table = self._table(collection, f"GET {collection}")
            rows = [self._view(collection, row) for row in table.values()]
        if limit is not None:
            rows = rows[: max(0, int(limit))]
        return _ok(rows, count=len(rows))

    def create_record(self, collection: str, payload: Mapping[str, Any]) -> ApiEnvelope:
        ctx = f"POST {collection}"
        with self._lock:
            self._table(collection, ctx)
            row = self._validated(collection, payload, ctx)
            if collection == "/libros":
                row.setdefault("cantidad_disponible", 1)
                row.setdefault("anio_publicacion", self._today.year)
            if collection == "/usuarios":
                row.setdefault("fecha_registro", self._today.isoformat())
            created = self._insert(collection, row)
            return _ok(self._view(collection, created), message="created")

    def update_record(
        self, collection: str, record_id: RecordId, payload: Mapping[str, Any]
    ) -> ApiEnvelope:
        ctx = f"PUT {collection}/{record_id}"
        with self._lock:
            table = self._table(collection, ctx)
            current = table.get(int(record_id))
            if current is None:
                raise _not_found(ctx)
            current.update(self._validated(collection, payload, ctx))
            return _ok(self._view(collection, current), message="updated")

    def delete_record(self, collection: str, record_id: RecordId) -> ApiEnvelope:
        ctx = f"DELETE {collection}/{record_id}"
        with self._lock:
            table = self._table(collection, ctx)
            key = int(record_id)
            if key not in table:
                raise _not_found(ctx)
            reason = self._delete_blocker(collection, key)
            if reason:
                raise _bad_request(ctx, reason)
            del table[key]
            return _ok(message="deleted")

    def create_loan(self, user_id: RecordId, book_id: RecordId) -> ApiEnvelope:
        ctx = "POST /prestamos"
        with self._lock:
            if int(user_id) not in self._tables["/usuarios"]:
                raise _bad_request(ctx, "user does not exist")
            book = self._tables["/libros"].get(int(book_id))
            if book is None:
                raise _bad_request(ctx, "book does not exist")
            if int(book.get("cantidad_disponible") or 0) <= 0:
                raise _bad_request(ctx, "no copies available")
            loan = self._insert_loan(int(user_id), int(book_id), 0)
            return _ok(dict(loan), message="loan registered")

    def return_loan(self, loan_id: RecordId) -> ApiEnvelope:
        ctx = f"PUT /prestamos/{loan_id}/devolver"
        with self._lock:
            loan = self._loans.get(int(loan_id))
            if loan is None:
                raise _not_found(ctx)
            if loan["fecha_devolucion"] is not None:
                raise _bad_request(ctx, "loan already returned")
            loan["fecha_devolucion"] = self._today.isoformat()
            book = self._tables["/libros"].get(loan["id_libro"])
            if book is not None:
                book["cantidad_disponible"] = int(book.get("cantidad_disponible") or 0) + 1
            return _ok(dict(loan), message="returned")

    def fetch(self, path: str, *, params: Optional[Dict[str, Any]] = None) -> ApiEnvelope:
        if path in _COLLECTIONS:
            limit = (params or {}).get("limit")
            return self._list(path, None if limit is None else int(limit))
        handler = {
            "/prestamos/activos": self._active_loans,
            "/notificaciones/proximos-vencer": self._due_soon,
            "/estadisticas/dashboard": self._dashboard,
            "/libros/mas-prestados": lambda: self._books_by_loans(most=True),
            "/libros/menos-prestados": lambda: self._books_by_loans(most=False),
            "/libros/aleatorios": self._random_books,
            "/libros/estadisticas-semestre": self._semester,
            "/libros/genero-mas-solicitado": self._top_genre,
            "/autores/pais-mas-autores": self._top_country,
            "/autores/paises-publicaciones": self._country_publications,
            "/usuarios/morosos/5-10-semanas": lambda: self._delinquent(5, 10),
            "/usuarios/morosos/mas-10-semanas": lambda: self._delinquent(10, None),
        }.get(path)
        if handler is None:
            raise _not_found(f"GET {path}")
        with self._lock:
            return handler()

    # ------------------------------------------------------------------
    # Internals (callers hold the lock)
    # ------------------------------------------------------------------
    def _table(self, collection: str, ctx: str) -> Dict[int, Row]:
        table = self._tables.get(collection)
        if table is None:
            raise _not_found(ctx)
        return table

    def _insert(self, collection: str, row: Row) -> Row:
        id_field = _COLLECTIONS[collection]
        key = int(row.get(id_field) or self._next_ids[collection])
        row[id_field] = key
        self._next_ids[collection] = max(self._next_ids[collection], key + 1)
        self._tables[collection][key] = row
        return row

    def _insert_loan(self, user_id: int, book_id: int, days_on_loan: int) -> Row:
        loan = {
            "id_prestamo": self._next_loan_id,
            "id_usuario": user_id,
            "id_libro": book_id,
            "fecha_prestamo": (self._today - timedelta(days=days_on_loan)).isoformat(),
            "fecha_devolucion": None,
            "dias_prestado": days_on_loan,
        }
        self._loans[loan["id_prestamo"]] = loan
        self._next_loan_id += 1
        book = self._tables["/libros"].get(book_id)
        if book is not None:
            book["cantidad_disponible"] = max(0, int(book.get("cantidad_disponible") or 0) - 1)
        return loan

    def _validated(self, collection: str, payload: Mapping[str, Any], ctx: str) -> Row:
        row: Row = {}
        for name in _EDITABLE[collection]:
            value = payload.get(name)
            if value is None or (isinstance(value, str) and not value.strip()):
                raise _bad_request(ctx, f"{name} is required")
            row[name] = value
        if collection == "/libros":
            if int(row["id_autor"]) not in self._tables["/autores"]:
                raise _bad_request(ctx, "author does not exist")
            if int(row["id_genero"]) not in self._tables["/generos"]:
                raise _bad_request(ctx, "genre does not exist")
        return row

    def _delete_blocker(self, collection: str, key: int) -> Optional[str]:
        books = self._tables["/libros"].values()
        if collection == "/autores" and any(int(b["id_autor"]) == key for b in books):
            return "author is referenced by books"
        if collection == "/generos" and any(int(b["id_genero"]) == key for b in books):
            return "genre is referenced by books"
        open_loans = [loan for loan in self._loans.values() if loan["fecha_devolucion"] is None]
        if collection == "/libros" and any(loan["id_libro"] == key for loan in open_loans):
            return "book has active loans"
        if collection == "/usuarios" and any(loan["id_usuario"] == key for loan in open_loans):
            return "user has active loans"
        return None

    def _view(self, collection: str, row: Row) -> Row:
        view = dict(row)
        if collection == "/libros":
            author = self._tables["/autores"].get(int(row.get("id_autor") or 0), {})
            genre = self._tables["/generos"].get(int(row.get("id_genero") or 0), {})
            view["nombre_autor"] = author.get("nombre_autor", "")
            view["nombre_genero"] = genre.get("nombre_genero", "")
            view["nombre_pais"] = self._country_name(author.get("id_pais"))
            view.pop("id_autor", None)
            view.pop("id_genero", None)
        if collection == "/autores":
            view["nombre_pais"] = self._country_name(row.get("id_pais"))
        return view

    @staticmethod
    def _country_name(country_id: Any) -> str:
        for country in COUNTRIES:
            if country["id_pais"] == country_id:
                return str(country["nombre_pais"])
        return ""

    def _loan_view(self, loan: Row) -> Row:
        user = self._tables["/usuarios"].get(loan["id_usuario"], {})
        book = self._tables["/libros"].get(loan["id_libro"], {})
        view = dict(loan)
        view.update(
            nombre_usuario=user.get("nombre", ""),
            email_usuario=user.get("email", ""),
            titulo_libro=book.get("titulo", ""),
        )
        return view

    def _open_loans(self) -> List[Row]:
        return [loan for loan in self._loans.values() if loan["fecha_devolucion"] is None]

    def _active_loans(self) -> ApiEnvelope:
        rows = [self._loan_view(loan) for loan in self._open_loans()]
        rows.sort(key=lambda row: row["dias_prestado"], reverse=True)
        return _ok(rows, count=len(rows))

    def _due_soon(self) -> ApiEnvelope:
        rows = []
        for loan in self._open_loans():
            days_left = LOAN_PERIOD_DAYS - int(loan["dias_prestado"])
            if 0 <= days_left <= DUE_SOON_WINDOW_DAYS:
                view = self._loan_view(loan)
                view["dias_restantes"] = days_left
                rows.append(view)
        rows.sort(key=lambda row: row["dias_restantes"])
        return _ok(rows, count=len(rows))

    def _delinquent_rows(self, min_weeks: int, max_weeks: Optional[int]) -> List[Row]:
        rows = []
        for loan in self._open_loans():
            weeks = int(loan["dias_prestado"]) // 7
            if weeks < min_weeks or (max_weeks is not None and weeks > max_weeks):
                continue
            user = self._tables["/usuarios"].get(loan["id_usuario"], {})
            book = self._tables["/libros"].get(loan["id_libro"], {})
            rows.append(
                {
                    "id_usuario": loan["id_usuario"],
                    "nombre": user.get("nombre", ""),
                    "email": user.get("email", ""),
                    "telefono": user.get("telefono", ""),
                    "semanas_retraso": weeks,
                    "id_libro": loan["id_libro"],
                    "titulo": book.get("titulo", ""),
                    "fecha_prestamo": loan["fecha_prestamo"],
                }
            )
        return rows

    def _delinquent(self, min_weeks: int, max_weeks: Optional[int]) -> ApiEnvelope:
        # The 10-week bucket is exclusive of the 5-10 range.
        lower = min_weeks if max_weeks is not None else min_weeks + 1
        rows = self._delinquent_rows(lower, max_weeks)
        return _ok(rows, count=len(rows))

    def _dashboard(self) -> ApiEnvelope:
        delinquent = {row["id_usuario"] for row in self._delinquent_rows(5, None)}
        return _ok(
            {
                "total_usuarios": len(self._tables["/usuarios"]),
                "total_libros": len(self._tables["/libros"]),
                "prestamos_activos": len(self._open_loans()),
                "usuarios_morosos": len(delinquent),
            }
        )

    def _loan_counts(self) -> Counter:
        return Counter(loan["id_libro"] for loan in self._loans.values())

    def _books_by_loans(self, *, most: bool) -> ApiEnvelope:
        counts = self._loan_counts()
        rows = []
        for row in self._tables["/libros"].values():
            view = self._view("/libros", row)
            view["total_prestamos"] = counts.get(row["id_libro"], 0)
            rows.append(view)
        rows.sort(key=lambda item: (item["total_prestamos"], -item["id_libro"]), reverse=most)
        return _ok(rows, count=len(rows))

    def _random_books(self) -> ApiEnvelope:
        rows = [self._view("/libros", row) for row in self._tables["/libros"].values()]
        picked = self._random.sample(rows, k=min(3, len(rows)))
        return _ok(picked, count=len(picked))

    def _semester(self) -> ApiEnvelope:
        counts = Counter(
            {book_id: total for book_id, total in self._loan_counts().items() if book_id in self._tables["/libros"]}
        )
        if not counts:
            return _ok(None)
        book_id, book_loans = counts.most_common(1)[0]
        user_id, user_loans = Counter(loan["id_usuario"] for loan in self._loans.values()).most_common(1)[0]
        book = self._view("/libros", self._tables["/libros"][book_id])
        user = self._tables["/usuarios"].get(user_id, {})
        return _ok(
            {
                "libro_mas_prestado": {
                    "id_libro": book_id,
                    "titulo": book["titulo"],
                    "nombre_autor": book["nombre_autor"],
                    "total_prestamos_semestre": book_loans,
                },
                "usuario_top": {
                    "id_usuario": user_id,
                    "nombre": user.get("nombre", ""),
                    "total_prestamos": user_loans,
                },
            }
        )

    def _top_genre(self) -> ApiEnvelope:
        per_genre: Counter = Counter()
        for loan in self._loans.values():
            book = self._tables["/libros"].get(loan["id_libro"])
            if book is not None:
                per_genre[int(book["id_genero"])] += 1
        if not per_genre:
            return _ok(None)
        genre_id, total = per_genre.most_common(1)[0]
        genre = self._tables["/generos"].get(genre_id, {})
        return _ok(
            {
                "id_genero": genre_id,
                "nombre_genero": genre.get("nombre_genero", ""),
                "total_solicitudes": total,
            }
        )

    def _top_country(self) -> ApiEnvelope:
        per_country = Counter(int(a["id_pais"]) for a in self._tables["/autores"].values())
        if not per_country:
            return _ok(None)
        country_id, total = per_country.most_common(1)[0]
        return _ok(
            {
                "id_pais": country_id,
                "nombre_pais": self._country_name(country_id),
                "total_autores": total,
            }
        )

    def _country_publications(self) -> ApiEnvelope:
        counts = self._loan_counts()
        books: Counter = Counter()
        loans: Counter = Counter()
        for book in self._tables["/libros"].values():
            author = self._tables["/autores"].get(int(book["id_autor"]))
            if author is None:
                continue
            country_id = int(author["id_pais"])
            books[country_id] += 1
            loans[country_id] += counts.get(book["id_libro"], 0)
        rows = [
            {
                "id_pais": country_id,
                "nombre_pais": self._country_name(country_id),
                "total_libros": books[country_id],
                "total_publicaciones": loans[country_id],
            }
            for country_id in books
        ]
        rows.sort(key=lambda row: (row["total_libros"], row["total_publicaciones"]), reverse=True)
        return _ok(
            {
                "paises_con_mas_publicaciones": rows[:3],
                "paises_con_menos_publicaciones": list(reversed(rows))[:3],
            }
        )

    def _seed(self) -> None:
        for row in (
            {"id_genero": 1, "nombre_genero": "Novela"},
            {"id_genero": 2, "nombre_genero": "Cuento"},
            {"id_genero": 3, "nombre_genero": "Poesía"},
        ):
            self._insert("/generos", row)
        for row in (
            {"id_autor": 1, "nombre_autor": "Miguel de Cervantes", "id_pais": 2},
            {"id_autor": 2, "nombre_autor": "Gabriel García Márquez", "id_pais": 5},
            {"id_autor": 3, "nombre_autor": "Jorge Luis Borges", "id_pais": 3},
            {"id_autor": 4, "nombre_autor": "Octavio Paz", "id_pais": 1},
        ):
            self._insert("/autores", row)
        for row in (
            {"id_libro": 3, "titulo": "Cien años de soledad", "id_autor": 2, "id_genero": 1, "anio_publicacion": 1967, "cantidad_disponible": 3},
            {"id_libro": 4, "titulo": "Ficciones", "id_autor": 3, "id_genero": 2, "anio_publicacion": 1944, "cantidad_disponible": 2},
            {"id_libro": 5, "titulo": "El laberinto de la soledad", "id_autor": 4, "id_genero": 1, "anio_publicacion": 1950, "cantidad_disponible": 1},
            {"id_libro": 6, "titulo": "Piedra de sol", "id_autor": 4, "id_genero": 3, "anio_publicacion": 1957, "cantidad_disponible": 2},
            {"id_libro": 7, "titulo": "Don Quijote", "id_autor": 1, "id_genero": 1, "anio_publicacion": 1605, "cantidad_disponible": 2},
        ):
            self._insert("/libros", row)
        for row in (
            {"id_usuario": 1, "nombre": "Ana Torres", "email": "ana@example.org", "telefono": "555-0101", "fecha_registro": "2024-02-01"},
            {"id_usuario": 2, "nombre": "Luis Gómez", "email": "luis@example.org", "telefono": "555-0102", "fecha_registro": "2024-03-15"},
            {"id_usuario": 3, "nombre": "Marta Ruiz", "email": "marta@example.org", "telefono": "555-0103", "fecha_registro": "2024-05-20"},
        ):
            self._insert("/usuarios", row)
        self._insert_loan(1, 3, 12)
        self._insert_loan(2, 4, 28)
        self._insert_loan(3, 5, 80)
        self._insert_loan(1, 6, 40)


__all__ = ["InMemoryLibrary", "LOAN_PERIOD_DAYS"]
