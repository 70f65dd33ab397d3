"""Typed failures raised by the library REST adapter.

The backend answers errors with the same envelope it uses for success,
``{"success": false, "error": "..."}``, occasionally with a ``message`` or a
validator ``errors`` list instead. The helpers below pull one readable line
out of such a body for logs and ``UseCaseError`` hints.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

_DETAIL_KEYS = ("error", "message", "detail", "msg", "errors")
_DETAIL_LIMIT = 200


class ApiError(RuntimeError):
    """Base class for REST adapter failures."""

    def __init__(
        self,
        message: str,
        *,
        status: Optional[int] = None,
        code: Optional[str] = None,
        hint: Optional[str] = None,
        payload: Any = None,
        context: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.code = code
        self.hint = hint
        self.payload = payload
        self.context = context


class ApiClientError(ApiError):
    """HTTP 4xx: the request was wrong (validation, missing record, blocked delete)."""


class ApiServerError(ApiError):
    """HTTP 5xx from the library backend."""


class ApiTimeoutError(ApiError):
    """No response: timeout or connection failure."""


class ApiRejectedError(ApiError):
    """2xx response whose envelope reports ``success: false``."""

    def __init__(self, message: str, *, status: int, payload: Any = None, context: Optional[str] = None) -> None:
        super().__init__(
            message,
            status=status,
            hint=error_detail(payload),
            payload=payload,
            context=context,
        )


def parse_error_payload(resp: Any) -> Any:
    """JSON body of an error response, else a text snippet, else ``None``."""
    try:
        return resp.json()
    except ValueError:
        text = (getattr(resp, "text", "") or "").strip()
        return text[:400] or None


def error_detail(payload: Any) -> Optional[str]:
    """First readable message in an error body, joined when it is a list."""
    if isinstance(payload, str):
        text = payload.strip()
    elif isinstance(payload, Mapping):
        text = ""
        for key in _DETAIL_KEYS:
            text = error_detail(payload.get(key)) or ""
            if text:
                break
    elif isinstance(payload, list):
        parts = [error_detail(item) for item in payload[:3]]
        text = "; ".join(part for part in parts if part)
    else:
        return None
    return text[:_DETAIL_LIMIT] or None


def error_code(payload: Any) -> Optional[str]:
    if not isinstance(payload, Mapping):
        return None
    value = payload.get("code", payload.get("error_code"))
    return None if value is None else str(value)


def build_error_message(ctx: str, status: int, payload: Any) -> str:
    detail = error_detail(payload)
    if detail:
        return f"{ctx}: {detail} (HTTP {status})"
    return f"{ctx}: HTTP {status}"


__all__ = [
    "ApiClientError",
    "ApiError",
    "ApiRejectedError",
    "ApiServerError",
    "ApiTimeoutError",
    "build_error_message",
    "error_code",
    "error_detail",
    "parse_error_payload",
]
