from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Protocol

from .entities import ApiEnvelope

RecordId = int


# ---- Error model ----
class UseCaseError(Exception):
    """Base class for use case level errors (user-presentable)."""

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


# ---- Ports (Hexagonal boundaries) ----
class LibraryPort(Protocol):
    """CRUD, loan and statistics operations against the library REST API.

    ``collection`` is a path such as ``"/libros"`` relative to the API base.
    Every call returns the unwrapped response envelope.
    """

    def list_records(self, collection: str, *, limit: Optional[int] = None) -> ApiEnvelope: ...
    def create_record(self, collection: str, payload: Mapping[str, Any]) -> ApiEnvelope: ...
    def update_record(
        self, collection: str, record_id: RecordId, payload: Mapping[str, Any]
    ) -> ApiEnvelope: ...
    def delete_record(self, collection: str, record_id: RecordId) -> ApiEnvelope: ...
    def create_loan(self, user_id: RecordId, book_id: RecordId) -> ApiEnvelope: ...
    def return_loan(self, loan_id: RecordId) -> ApiEnvelope: ...
    def fetch(self, path: str, *, params: Optional[Dict[str, Any]] = None) -> ApiEnvelope: ...
