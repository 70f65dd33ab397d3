"""Declarative catalogue of the managed resources.

Each ``ResourceSpec`` captures everything a management page needs that differs
between books, authors, genres and users: the collection path, which fields
identify and label a row, the editable form fields and the lookup lists used
to populate selects. Pages, use cases and viewmodels are generic over it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Literal, Mapping, Optional, Sequence, Tuple

from .entities import Row

FieldKind = Literal["text", "email", "select"]


@dataclass(frozen=True)
class LookupSpec:
    """Option list for a select field.

    ``static_rows`` lookups are never fetched; the others are loaded from
    ``collection`` together with the page's own records.
    """

    key: str
    collection: str
    id_field: str
    label_field: str
    static_rows: Optional[Tuple[Mapping[str, Any], ...]] = None

    @property
    def is_static(self) -> bool:
        return self.static_rows is not None

    def options(self, rows: Iterable[Mapping[str, Any]]) -> Dict[int, str]:
        """Map option id to label, in row order."""
        result: Dict[int, str] = {}
        for row in rows:
            try:
                key = int(row[self.id_field])
            except (KeyError, TypeError, ValueError):
                continue
            result[key] = str(row.get(self.label_field) or "")
        return result


@dataclass(frozen=True)
class FormField:
    name: str
    label: str
    kind: FieldKind = "text"
    lookup: Optional[str] = None
    # Display column holding the lookup label when the row lacks ``name``.
    source_field: Optional[str] = None


@dataclass(frozen=True)
class ResourceSpec:
    key: str
    collection: str
    id_field: str
    label_field: str
    noun: str
    plural: str
    fields: Tuple[FormField, ...]
    lookups: Tuple[LookupSpec, ...] = ()
    list_limit: Optional[int] = None
    detail_fields: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)

    # ------------------------------------------------------------------
    # Row accessors
    # ------------------------------------------------------------------
    def record_id(self, row: Mapping[str, Any]) -> int:
        return int(row[self.id_field])

    def record_label(self, row: Mapping[str, Any]) -> str:
        return str(row.get(self.label_field) or "")

    def lookup(self, key: str) -> LookupSpec:
        for spec in self.lookups:
            if spec.key == key:
                return spec
        raise KeyError(f"{self.key} has no lookup '{key}'")

    def fetched_lookups(self) -> List[LookupSpec]:
        return [spec for spec in self.lookups if not spec.is_static]

    # ------------------------------------------------------------------
    # Form mapping
    # ------------------------------------------------------------------
    def empty_draft(self) -> Dict[str, str]:
        return {form_field.name: "" for form_field in self.fields}

    def draft_from_record(
        self,
        row: Mapping[str, Any],
        lookups: Mapping[str, Sequence[Mapping[str, Any]]],
    ) -> Dict[str, str]:
        """Copy a row's editable values into form strings.

        Select fields take the row's id column when present; otherwise the id
        is found by matching the row's display name against the lookup list.
        Unresolvable selects are left empty.
        """
        draft: Dict[str, str] = {}
        for form_field in self.fields:
            value = row.get(form_field.name)
            if value is None and form_field.lookup and form_field.source_field:
                value = self._resolve_lookup_id(
                    form_field, row.get(form_field.source_field), lookups
                )
            draft[form_field.name] = "" if value is None else str(value)
        return draft

    def missing_fields(self, draft: Mapping[str, str]) -> List[str]:
        return [
            form_field.label
            for form_field in self.fields
            if not str(draft.get(form_field.name, "")).strip()
        ]

    def payload_from_draft(self, draft: Mapping[str, str]) -> Dict[str, Any]:
        """Build the JSON body for POST/PUT; select values become integers."""
        payload: Dict[str, Any] = {}
        for form_field in self.fields:
            raw = draft.get(form_field.name, "")
            if form_field.kind == "select":
                try:
                    payload[form_field.name] = int(str(raw).strip())
                except ValueError as exc:
                    raise ValueError(f"{form_field.label} must be selected.") from exc
            else:
                payload[form_field.name] = raw
        return payload

    def _resolve_lookup_id(
        self,
        form_field: FormField,
        display_name: Any,
        lookups: Mapping[str, Sequence[Mapping[str, Any]]],
    ) -> Optional[int]:
        if display_name is None or form_field.lookup is None:
            return None
        spec = self.lookup(form_field.lookup)
        rows = spec.static_rows if spec.is_static else lookups.get(spec.key, ())
        for option_id, label in spec.options(rows or ()).items():
            if label == display_name:
                return option_id
        return None

    # ------------------------------------------------------------------
    # User-facing text
    # ------------------------------------------------------------------
    def load_error_message(self) -> str:
        return f"Error loading {self.plural}"

    def create_prompt(self, label: str) -> Tuple[str, str]:
        return f"Create {self.noun}", f'Confirm creating the {self.noun} "{label}"?'

    def update_prompt(self, label: str) -> Tuple[str, str]:
        return f"Update {self.noun}", f'Confirm updating "{label}"?'

    def delete_prompt(self, label: str) -> Tuple[str, str]:
        return (
            f"Delete {self.noun}",
            f'Are you sure you want to delete "{label}"?\n\nThis action cannot be undone.',
        )

    def success_message(self, action: str, label: str) -> str:
        return f'{self.noun.capitalize()} "{label}" {action} successfully'

    def failure_message(self, action: str) -> str:
        return f"Error {action} the {self.noun}"


COUNTRIES: Tuple[Mapping[str, Any], ...] = (
    {"id_pais": 1, "nombre_pais": "México"},
    {"id_pais": 2, "nombre_pais": "España"},
    {"id_pais": 3, "nombre_pais": "Argentina"},
    {"id_pais": 4, "nombre_pais": "Estados Unidos"},
    {"id_pais": 5, "nombre_pais": "Colombia"},
)

AUTHOR_LOOKUP = LookupSpec("authors", "/autores", "id_autor", "nombre_autor")
GENRE_LOOKUP = LookupSpec("genres", "/generos", "id_genero", "nombre_genero")
COUNTRY_LOOKUP = LookupSpec("countries", "", "id_pais", "nombre_pais", static_rows=COUNTRIES)

BOOKS = ResourceSpec(
    key="books",
    collection="/libros",
    id_field="id_libro",
    label_field="titulo",
    noun="book",
    plural="books",
    fields=(
        FormField("titulo", "Title"),
        FormField("id_autor", "Author", kind="select", lookup="authors", source_field="nombre_autor"),
        FormField("id_genero", "Genre", kind="select", lookup="genres", source_field="nombre_genero"),
    ),
    lookups=(AUTHOR_LOOKUP, GENRE_LOOKUP),
    list_limit=1000,
    detail_fields=(("nombre_autor", "Author"), ("nombre_genero", "Genre")),
)

AUTHORS = ResourceSpec(
    key="authors",
    collection="/autores",
    id_field="id_autor",
    label_field="nombre_autor",
    noun="author",
    plural="authors",
    fields=(
        FormField("nombre_autor", "Name"),
        FormField("id_pais", "Country", kind="select", lookup="countries", source_field="nombre_pais"),
    ),
    lookups=(COUNTRY_LOOKUP,),
    detail_fields=(("nombre_pais", "Country"),),
)

GENRES = ResourceSpec(
    key="genres",
    collection="/generos",
    id_field="id_genero",
    label_field="nombre_genero",
    noun="genre",
    plural="genres",
    fields=(FormField("nombre_genero", "Name"),),
)

USERS = ResourceSpec(
    key="users",
    collection="/usuarios",
    id_field="id_usuario",
    label_field="nombre",
    noun="user",
    plural="users",
    fields=(
        FormField("nombre", "Name"),
        FormField("email", "Email", kind="email"),
    ),
    detail_fields=(("email", "Email"), ("fecha_registro", "Registered")),
)

RESOURCES: Dict[str, ResourceSpec] = {spec.key: spec for spec in (BOOKS, AUTHORS, GENRES, USERS)}


__all__ = [
    "AUTHORS",
    "BOOKS",
    "COUNTRIES",
    "FormField",
    "GENRES",
    "LookupSpec",
    "RESOURCES",
    "ResourceSpec",
    "USERS",
]
