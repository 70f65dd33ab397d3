from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Sequence

import pytest
from requests import exceptions as req_exc

from biblio.adapters.api_errors import (
    ApiClientError,
    ApiError,
    ApiRejectedError,
    ApiServerError,
    ApiTimeoutError,
)
from biblio.adapters.library_rest import LibraryRestAdapter
from biblio.config import AppConfig


class _ResponseStub:
    def __init__(self, payload: Any, status_code: int = 200, text: Optional[str] = None) -> None:
        self._payload = payload
        self.status_code = status_code
        self.text = text if text is not None else json.dumps(payload)

    def json(self) -> Any:
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class _SessionStub:
    """Stands in for ``requests.Session`` and records every call."""

    def __init__(self, responses: Sequence[Any]) -> None:
        self._responses = list(responses)
        self.calls: List[Dict[str, Any]] = []

    def _next(self) -> _ResponseStub:
        if not self._responses:
            raise RuntimeError("No stub response configured")
        item = self._responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def get(self, url: str, *, params=None, headers=None, timeout=None) -> _ResponseStub:
        self.calls.append(
            {"method": "GET", "url": url, "params": params, "headers": dict(headers or {}), "timeout": timeout}
        )
        return self._next()

    def request(self, method: str, url: str, *, data=None, headers=None, timeout=None) -> _ResponseStub:
        self.calls.append(
            {
                "method": method,
                "url": url,
                "body": None if data is None else json.loads(data.decode("utf-8")),
                "headers": dict(headers or {}),
                "timeout": timeout,
            }
        )
        return self._next()


def _adapter(responses: Sequence[Any], **kwargs: Any) -> tuple[LibraryRestAdapter, _SessionStub]:
    adapter = LibraryRestAdapter("http://localhost:3000/api/", **kwargs)
    stub = _SessionStub(responses)
    adapter.session.session = stub  # type: ignore[assignment]
    return adapter, stub


def test_list_records_passes_limit_and_unwraps_envelope() -> None:
    payload = {"success": True, "data": [{"id_libro": 7, "titulo": "Don Quijote"}], "count": 1}
    adapter, stub = _adapter([_ResponseStub(payload)])

    envelope = adapter.list_records("/libros", limit=1000)

    assert envelope.rows() == [{"id_libro": 7, "titulo": "Don Quijote"}]
    assert envelope.total() == 1
    call = stub.calls[0]
    assert call["url"] == "http://localhost:3000/api/libros"
    assert call["params"] == {"limit": 1000}
    assert call["headers"]["Accept"] == "application/json"
    assert call["timeout"] == 10.0


def test_create_record_posts_json_body_once() -> None:
    adapter, stub = _adapter([_ResponseStub({"success": True, "data": {"id_genero": 4}}, status_code=201)])

    envelope = adapter.create_record("/generos", {"nombre_genero": "Ensayo"})

    assert envelope.item() == {"id_genero": 4}
    assert len(stub.calls) == 1
    call = stub.calls[0]
    assert call["method"] == "POST"
    assert call["url"] == "http://localhost:3000/api/generos"
    assert call["body"] == {"nombre_genero": "Ensayo"}
    assert call["headers"]["Content-Type"] == "application/json; charset=utf-8"


def test_update_and_delete_target_record_path() -> None:
    adapter, stub = _adapter(
        [
            _ResponseStub({"success": True, "data": {"id_libro": 7}}),
            _ResponseStub({"success": True, "message": "deleted"}),
        ]
    )

    adapter.update_record("/libros", 7, {"titulo": "Don Quijote", "id_autor": 1, "id_genero": 1})
    adapter.delete_record("/libros", 7)

    assert [(c["method"], c["url"]) for c in stub.calls] == [
        ("PUT", "http://localhost:3000/api/libros/7"),
        ("DELETE", "http://localhost:3000/api/libros/7"),
    ]
    assert stub.calls[1]["body"] is None
    assert "Content-Type" not in stub.calls[1]["headers"]


def test_loan_endpoints() -> None:
    adapter, stub = _adapter(
        [
            _ResponseStub({"success": True, "data": {"id_prestamo": 9}}),
            _ResponseStub({"success": True}),
        ]
    )

    adapter.create_loan(2, 5)
    adapter.return_loan(9)

    assert stub.calls[0]["method"] == "POST"
    assert stub.calls[0]["url"] == "http://localhost:3000/api/prestamos"
    assert stub.calls[0]["body"] == {"id_usuario": 2, "id_libro": 5}
    assert stub.calls[1]["method"] == "PUT"
    assert stub.calls[1]["url"] == "http://localhost:3000/api/prestamos/9/devolver"


def test_success_false_raises_rejected_error() -> None:
    adapter, _ = _adapter([_ResponseStub({"success": False, "error": "Libro no disponible"})])

    with pytest.raises(ApiRejectedError) as info:
        adapter.create_loan(1, 7)

    assert info.value.hint == "Libro no disponible"
    assert info.value.status == 200


def test_client_error_carries_status_and_hint() -> None:
    adapter, _ = _adapter([_ResponseStub({"success": False, "error": "Autor no encontrado"}, status_code=404)])

    with pytest.raises(ApiClientError) as info:
        adapter.delete_record("/autores", 99)

    assert info.value.status == 404
    assert info.value.hint == "Autor no encontrado"
    assert "DELETE /autores/99" in str(info.value)


def test_server_error_is_typed() -> None:
    adapter, _ = _adapter([_ResponseStub({"error": "boom"}, status_code=500)])

    with pytest.raises(ApiServerError):
        adapter.fetch("/estadisticas/dashboard")


def test_invalid_json_raises_api_error() -> None:
    adapter, _ = _adapter([_ResponseStub(ValueError("no json"), text="<html>")])

    with pytest.raises(ApiError) as info:
        adapter.fetch("/libros/aleatorios")

    assert "invalid JSON" in str(info.value)


def test_empty_success_bodies_count_as_success() -> None:
    adapter, stub = _adapter(
        [
            _ResponseStub(ValueError("no body"), status_code=204, text=""),
            _ResponseStub(ValueError("no body"), status_code=200, text="  "),
        ]
    )

    deleted = adapter.delete_record("/libros", 7)
    returned = adapter.return_loan(9)

    assert deleted.success is True
    assert returned.success is True
    assert [c["method"] for c in stub.calls] == ["DELETE", "PUT"]


def test_get_retries_transport_errors_when_configured() -> None:
    adapter, stub = _adapter(
        [req_exc.ConnectionError("down"), _ResponseStub({"success": True, "data": []})],
        retries=1,
    )

    envelope = adapter.fetch("/prestamos/activos")

    assert envelope.rows() == []
    assert len(stub.calls) == 2


def test_get_without_retries_raises_timeout() -> None:
    adapter, stub = _adapter([req_exc.Timeout("slow")])

    with pytest.raises(ApiTimeoutError):
        adapter.fetch("/prestamos/activos")

    assert len(stub.calls) == 1


def test_mutations_are_never_retried() -> None:
    adapter, stub = _adapter([req_exc.Timeout("slow"), _ResponseStub({"success": True})], retries=3)

    with pytest.raises(ApiTimeoutError):
        adapter.create_record("/generos", {"nombre_genero": "Ensayo"})

    assert len(stub.calls) == 1


def test_from_config_uses_timeout_seconds() -> None:
    adapter = LibraryRestAdapter.from_config(AppConfig(api_base_url="http://backend/api", timeout_ms=2500))

    assert adapter.base_url == "http://backend/api"
    assert adapter.cfg.request_timeout_s == 2.5


def test_empty_base_url_rejected() -> None:
    with pytest.raises(ValueError):
        LibraryRestAdapter("  ")


def test_validator_error_list_becomes_hint() -> None:
    body = {"success": False, "errors": [{"msg": "titulo is required"}, {"msg": "id_autor must be numeric"}]}
    adapter, _ = _adapter([_ResponseStub(body, status_code=400)])

    with pytest.raises(ApiClientError) as info:
        adapter.create_record("/libros", {"titulo": ""})

    assert info.value.hint == "titulo is required; id_autor must be numeric"
    assert str(info.value) == "POST /libros: titulo is required; id_autor must be numeric (HTTP 400)"
