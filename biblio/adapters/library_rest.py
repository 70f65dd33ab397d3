"""REST adapter implementing ``LibraryPort`` against the library backend."""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

import requests

from biblio.adapters.api_errors import (
    ApiClientError,
    ApiError,
    ApiRejectedError,
    ApiServerError,
    build_error_message,
    error_code,
    error_detail,
    parse_error_payload,
)
from biblio.adapters.http_client import HttpConfig, JsonSession
from biblio.config import AppConfig
from biblio.domain.entities import ApiEnvelope
from biblio.domain.ports import LibraryPort, RecordId

LOGGER = logging.getLogger(__name__)


class LibraryRestAdapter(LibraryPort):
    """HTTP adapter for the ``/api`` resource collections."""

    def __init__(self, base_url: str, *, request_timeout_s: float = 10.0, retries: int = 0) -> None:
        if not str(base_url or "").strip():
            raise ValueError("LibraryRestAdapter requires a base URL")
        self.base_url = str(base_url).strip().rstrip("/")
        self.cfg = HttpConfig(request_timeout_s=request_timeout_s, retries=retries)
        self.session = JsonSession(self.cfg)

    @classmethod
    def from_config(cls, config: AppConfig) -> "LibraryRestAdapter":
        return cls(config.api_base_url, request_timeout_s=config.timeout_s)

    # ------------------------------------------------------------------
    # Managed collections
    # ------------------------------------------------------------------
    def list_records(self, collection: str, *, limit: Optional[int] = None) -> ApiEnvelope:
        params = {"limit": int(limit)} if limit is not None else None
        return self.fetch(collection, params=params)

    def create_record(self, collection: str, payload: Mapping[str, Any]) -> ApiEnvelope:
        url = self._make_url(collection)
        resp = self.session.post(url, json_body=dict(payload))
        return self._envelope(resp, f"POST {collection}")

    def update_record(
        self, collection: str, record_id: RecordId, payload: Mapping[str, Any]
    ) -> ApiEnvelope:
        path = f"{collection}/{int(record_id)}"
        resp = self.session.put(self._make_url(path), json_body=dict(payload))
        return self._envelope(resp, f"PUT {path}")

    def delete_record(self, collection: str, record_id: RecordId) -> ApiEnvelope:
        path = f"{collection}/{int(record_id)}"
        resp = self.session.delete(self._make_url(path))
        return self._envelope(resp, f"DELETE {path}")

    # ------------------------------------------------------------------
    # Loans
    # ------------------------------------------------------------------
    def create_loan(self, user_id: RecordId, book_id: RecordId) -> ApiEnvelope:
        resp = self.session.post(
            self._make_url("/prestamos"),
            json_body={"id_usuario": int(user_id), "id_libro": int(book_id)},
        )
        return self._envelope(resp, "POST /prestamos")

    def return_loan(self, loan_id: RecordId) -> ApiEnvelope:
        path = f"/prestamos/{int(loan_id)}/devolver"
        resp = self.session.put(self._make_url(path))
        return self._envelope(resp, f"PUT {path}")

    # ------------------------------------------------------------------
    # Read-only endpoints
    # ------------------------------------------------------------------
    def fetch(self, path: str, *, params: Optional[Dict[str, Any]] = None) -> ApiEnvelope:
        resp = self.session.get(self._make_url(path), params=params)
        return self._envelope(resp, f"GET {path}")

    # ------------------------------------------------------------------
    def _make_url(self, path: str) -> str:
        if not path.startswith("/"):
            path = f"/{path}"
        return f"{self.base_url}{path}"

    def _envelope(self, resp: requests.Response, ctx: str) -> ApiEnvelope:
        self._ensure_ok(resp, ctx)
        if resp.status_code == 204 or not (resp.text or "").strip():
            LOGGER.debug("%s -> HTTP %s (empty body)", ctx, resp.status_code)
            return ApiEnvelope(success=True)
        payload = self._json_dict(resp, ctx)
        envelope = ApiEnvelope.from_payload(payload)
        if not envelope.success:
            detail = envelope.error or envelope.message or "request rejected"
            raise ApiRejectedError(
                f"{ctx}: {detail}",
                status=resp.status_code,
                payload=payload,
                context=ctx,
            )
        LOGGER.debug("%s -> HTTP %s", ctx, resp.status_code)
        return envelope

    @staticmethod
    def _ensure_ok(resp: requests.Response, ctx: str) -> None:
        """Raise typed adapter errors for non-2xx responses."""
        if 200 <= resp.status_code < 300:
            return
        status = resp.status_code
        payload = parse_error_payload(resp)
        message = build_error_message(ctx, status, payload)
        code = error_code(payload)
        hint = error_detail(payload)
        if 400 <= status < 500:
            raise ApiClientError(
                message,
                status=status,
                code=code,
                hint=hint,
                payload=payload,
                context=ctx,
            )
        if 500 <= status < 600:
            raise ApiServerError(
                message,
                status=status,
                payload=payload,
                context=ctx,
            )
        raise ApiError(message, status=status, payload=payload, context=ctx)

    @staticmethod
    def _json_dict(resp: requests.Response, ctx: str) -> Dict[str, Any]:
        """Parse response JSON and require an object payload."""
        try:
            payload = resp.json()
        except ValueError as exc:
            snippet = getattr(resp, "text", "")[:400]
            raise ApiError(
                f"{ctx}: invalid JSON response: {snippet}",
                status=resp.status_code,
                context=ctx,
            ) from exc
        if not isinstance(payload, dict):
            raise ApiError(
                f"{ctx}: invalid JSON response shape: expected object",
                status=resp.status_code,
                payload=payload,
                context=ctx,
            )
        return dict(payload)


__all__ = ["LibraryRestAdapter"]
