"""Typed projections of backend payloads.

Managed records (books, authors, genres, users) stay plain ``dict`` rows
because the dashboard only displays and echoes them back. Loans and the
read-only aggregate endpoints are normalized here into small frozen
dataclasses so the viewmodels never index raw JSON.

Every ``from_payload`` tolerates missing or malformed fields and falls back to
neutral defaults, since the backend is treated as an opaque collaborator.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

Row = Dict[str, Any]


def _as_int(value: Any, default: int = 0) -> int:
    if isinstance(value, bool):
        return int(value)
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        pass
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return default


def _as_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _as_optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value)
    return text or None


def _as_mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


@dataclass(frozen=True)
class ApiEnvelope:
    """Uniform ``{success, data, message, error}`` response wrapper."""

    success: bool
    data: Any = None
    message: Optional[str] = None
    error: Optional[str] = None
    count: Optional[int] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "ApiEnvelope":
        count = payload.get("count")
        return cls(
            success=bool(payload.get("success", True)),
            data=payload.get("data"),
            message=_as_optional_str(payload.get("message")),
            error=_as_optional_str(payload.get("error")),
            count=None if count is None else _as_int(count),
        )

    def rows(self) -> List[Row]:
        """Return ``data`` as a list of dict rows; missing data is empty."""
        if not isinstance(self.data, list):
            return []
        return [dict(item) for item in self.data if isinstance(item, Mapping)]

    def item(self) -> Optional[Row]:
        """Return ``data`` as one dict row, or ``None`` when absent."""
        if isinstance(self.data, Mapping):
            return dict(self.data)
        return None

    def total(self) -> int:
        """Collection size as reported by ``count``, else the row count."""
        if self.count is not None:
            return self.count
        return len(self.rows())


@dataclass(frozen=True)
class DashboardStats:
    total_users: int = 0
    total_books: int = 0
    active_loans: int = 0
    total_authors: int = 0
    total_genres: int = 0
    delinquent_users: int = 0
    due_soon: int = 0

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any], **counts: int) -> "DashboardStats":
        """Build from the dashboard summary plus counts taken from other endpoints."""
        return cls(
            total_users=_as_int(payload.get("total_usuarios")),
            total_books=_as_int(payload.get("total_libros")),
            active_loans=_as_int(payload.get("prestamos_activos")),
            delinquent_users=_as_int(payload.get("usuarios_morosos")),
            **counts,
        )


@dataclass(frozen=True)
class BookSummary:
    book_id: int
    title: str
    author_name: str = ""
    genre_name: str = ""
    publication_year: Optional[int] = None
    available_copies: Optional[int] = None
    total_loans: Optional[int] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "BookSummary":
        year = payload.get("anio_publicacion")
        copies = payload.get("cantidad_disponible")
        loans = payload.get("total_prestamos")
        return cls(
            book_id=_as_int(payload.get("id_libro")),
            title=_as_str(payload.get("titulo")),
            author_name=_as_str(payload.get("nombre_autor")),
            genre_name=_as_str(payload.get("nombre_genero")),
            publication_year=None if year is None else _as_int(year),
            available_copies=None if copies is None else _as_int(copies),
            total_loans=None if loans is None else _as_int(loans),
        )


@dataclass(frozen=True)
class SemesterStats:
    top_book_title: str = ""
    top_book_author: str = ""
    top_book_loans: int = 0
    top_user_name: str = ""
    top_user_loans: int = 0

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "SemesterStats":
        book = _as_mapping(payload.get("libro_mas_prestado"))
        user = _as_mapping(payload.get("usuario_top"))
        return cls(
            top_book_title=_as_str(book.get("titulo")),
            top_book_author=_as_str(book.get("nombre_autor")),
            top_book_loans=_as_int(book.get("total_prestamos_semestre")),
            top_user_name=_as_str(user.get("nombre")),
            top_user_loans=_as_int(user.get("total_prestamos")),
        )


@dataclass(frozen=True)
class TopGenre:
    genre_id: int
    genre_name: str
    total_requests: int

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "TopGenre":
        return cls(
            genre_id=_as_int(payload.get("id_genero")),
            genre_name=_as_str(payload.get("nombre_genero")),
            total_requests=_as_int(payload.get("total_solicitudes")),
        )


@dataclass(frozen=True)
class CountryAuthors:
    country_id: int
    country_name: str
    total_authors: int

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "CountryAuthors":
        return cls(
            country_id=_as_int(payload.get("id_pais")),
            country_name=_as_str(payload.get("nombre_pais")),
            total_authors=_as_int(payload.get("total_autores")),
        )


@dataclass(frozen=True)
class CountryPublications:
    country_id: int
    country_name: str
    total_books: int
    total_publications: int

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "CountryPublications":
        return cls(
            country_id=_as_int(payload.get("id_pais")),
            country_name=_as_str(payload.get("nombre_pais")),
            total_books=_as_int(payload.get("total_libros")),
            total_publications=_as_int(payload.get("total_publicaciones")),
        )


@dataclass(frozen=True)
class PublicationsByCountry:
    most: Tuple[CountryPublications, ...] = field(default_factory=tuple)
    least: Tuple[CountryPublications, ...] = field(default_factory=tuple)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "PublicationsByCountry":
        def _rows(key: str) -> Tuple[CountryPublications, ...]:
            raw = payload.get(key)
            if not isinstance(raw, list):
                return ()
            return tuple(
                CountryPublications.from_payload(item)
                for item in raw
                if isinstance(item, Mapping)
            )

        return cls(
            most=_rows("paises_con_mas_publicaciones"),
            least=_rows("paises_con_menos_publicaciones"),
        )

    @property
    def is_empty(self) -> bool:
        return not self.most or not self.least


@dataclass(frozen=True)
class DelinquentUser:
    user_id: int
    name: str
    email: str
    phone: str
    weeks_late: int
    book_id: int
    book_title: str
    loaned_at: str

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "DelinquentUser":
        return cls(
            user_id=_as_int(payload.get("id_usuario")),
            name=_as_str(payload.get("nombre")),
            email=_as_str(payload.get("email")),
            phone=_as_str(payload.get("telefono")),
            weeks_late=_as_int(payload.get("semanas_retraso")),
            book_id=_as_int(payload.get("id_libro")),
            book_title=_as_str(payload.get("titulo")),
            loaned_at=_as_str(payload.get("fecha_prestamo")),
        )


@dataclass(frozen=True)
class ActiveLoan:
    loan_id: int
    user_id: int
    user_name: str
    user_email: str
    book_id: int
    book_title: str
    loaned_at: str
    returned_at: Optional[str]
    days_on_loan: int

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "ActiveLoan":
        return cls(
            loan_id=_as_int(payload.get("id_prestamo")),
            user_id=_as_int(payload.get("id_usuario")),
            user_name=_as_str(payload.get("nombre_usuario")),
            user_email=_as_str(payload.get("email_usuario")),
            book_id=_as_int(payload.get("id_libro")),
            book_title=_as_str(payload.get("titulo_libro")),
            loaned_at=_as_str(payload.get("fecha_prestamo")),
            returned_at=_as_optional_str(payload.get("fecha_devolucion")),
            days_on_loan=_as_int(payload.get("dias_prestado")),
        )


@dataclass(frozen=True)
class LoanDueSoon:
    loan_id: int
    user_id: int
    user_name: str
    user_email: str
    book_id: int
    book_title: str
    loaned_at: str
    days_left: int

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "LoanDueSoon":
        return cls(
            loan_id=_as_int(payload.get("id_prestamo")),
            user_id=_as_int(payload.get("id_usuario")),
            user_name=_as_str(payload.get("nombre_usuario")),
            user_email=_as_str(payload.get("email_usuario")),
            book_id=_as_int(payload.get("id_libro")),
            book_title=_as_str(payload.get("titulo_libro")),
            loaned_at=_as_str(payload.get("fecha_prestamo")),
            days_left=_as_int(payload.get("dias_restantes")),
        )


__all__ = [
    "ActiveLoan",
    "ApiEnvelope",
    "BookSummary",
    "CountryAuthors",
    "CountryPublications",
    "DashboardStats",
    "DelinquentUser",
    "LoanDueSoon",
    "PublicationsByCountry",
    "Row",
    "SemesterStats",
    "TopGenre",
]
