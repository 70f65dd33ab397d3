"""Translate adapter errors into user-facing UseCaseError instances."""

from __future__ import annotations

from typing import Optional

from biblio.adapters.api_errors import (
    ApiClientError,
    ApiError,
    ApiRejectedError,
    ApiServerError,
    ApiTimeoutError,
    error_detail,
)
from biblio.domain.ports import UseCaseError


def map_api_error(
    exc: Exception,
    *,
    default_code: str,
    default_message: Optional[str] = None,
) -> UseCaseError:
    """Map adapter exceptions to stable UseCaseError codes.

    The returned message is diagnostic text for logs; pages show their own
    static per-resource message instead.
    """
    if isinstance(exc, UseCaseError):
        return exc
    if isinstance(exc, ApiTimeoutError):
        return UseCaseError("REQUEST_TIMEOUT", "Request timed out. Check connection.")
    if isinstance(exc, ApiRejectedError):
        return UseCaseError("REJECTED", _compose_error_message("Request rejected", exc.hint))
    if isinstance(exc, ApiClientError):
        status = exc.status or 0
        hint = exc.hint or error_detail(getattr(exc, "payload", None))
        if status == 404:
            return UseCaseError("NOT_FOUND", _compose_error_message("Record not found", hint))
        if status in (400, 409, 422):
            return UseCaseError("INVALID_REQUEST", _compose_error_message("Invalid request", hint))
        label = f"Request failed (HTTP {status})" if status else "Request failed"
        return UseCaseError("REQUEST_FAILED", _compose_error_message(label, hint))
    if isinstance(exc, ApiServerError):
        return UseCaseError("SERVER_ERROR", "Server error, try again.")
    if isinstance(exc, ApiError):
        return UseCaseError("API_ERROR", str(exc))

    message = default_message or str(exc) or "Unexpected error."
    return UseCaseError(default_code, message)


def _compose_error_message(base: str, hint: Optional[str]) -> str:
    hint_text = (hint or "").strip()
    if hint_text:
        return f"{base}: {hint_text}"
    if base.endswith("."):
        return base
    return f"{base}."


__all__ = ["map_api_error"]
