"""Shared HTTP transport utilities for the library REST adapter.

This module provides a thin wrapper around ``requests.Session`` so the
adapter shares one timeout policy and one header set.

Dependencies:
    - ``requests`` for network I/O.
    - ``biblio.adapters.api_errors.ApiTimeoutError`` for typed transport failures.

Call context:
    - Constructed by ``biblio/adapters/library_rest.py``.
    - Used only inside adapter methods; use cases interact through ports.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests
from requests import exceptions as req_exc

from biblio.adapters.api_errors import ApiTimeoutError

LOGGER = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json; charset=utf-8"


@dataclass
class HttpConfig:
    """Timeout and retry configuration for adapter HTTP calls.

    Attributes:
        request_timeout_s: Timeout in seconds for every JSON API call.
        retries: Extra attempts for GET requests after a transport failure.
            Mutating requests are always sent exactly once.
    """
    request_timeout_s: float = 10.0
    retries: int = 0


class JsonSession:
    """Shared requests wrapper with JSON headers and a GET retry loop.

    This class is intentionally transport-only. Callers provide endpoint URLs and
    decide how to map non-2xx responses into use-case errors.
    """

    def __init__(self, cfg: HttpConfig) -> None:
        self.session = requests.Session()
        self.cfg = cfg

    @staticmethod
    def _headers(json_body: bool = False) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if json_body:
            headers["Content-Type"] = JSON_CONTENT_TYPE
        return headers

    def get(
        self,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> requests.Response:
        """Send a GET request, retrying on timeout/connectivity failures.

        Raises:
            ApiTimeoutError: If all attempts fail with timeout/connection errors.
        """
        context = f"GET {url}"
        last_err: ApiTimeoutError | None = None
        attempts = max(0, int(self.cfg.retries)) + 1
        for attempt in range(attempts):
            try:
                return self.session.get(
                    url,
                    params=params,
                    headers=self._headers(),
                    timeout=timeout or self.cfg.request_timeout_s,
                )
            except (req_exc.Timeout, req_exc.ConnectionError) as exc:
                LOGGER.debug("%s failed (attempt %d/%d): %s", context, attempt + 1, attempts, exc)
                last_err = ApiTimeoutError(f"Timeout contacting {url}", context=context)
        raise last_err

    def post(self, url: str, *, json_body: Optional[Dict[str, Any]] = None) -> requests.Response:
        return self._send("POST", url, json_body)

    def put(self, url: str, *, json_body: Optional[Dict[str, Any]] = None) -> requests.Response:
        return self._send("PUT", url, json_body)

    def delete(self, url: str) -> requests.Response:
        return self._send("DELETE", url, None)

    def _send(
        self,
        method: str,
        url: str,
        json_body: Optional[Dict[str, Any]],
    ) -> requests.Response:
        """Send one mutating request without retries.

        Side Effects:
            Serializes ``json_body`` with ``json.dumps`` (UTF-8, non-ASCII kept)
            before sending.
        """
        context = f"{method} {url}"
        data = None
        if json_body is not None:
            data = json.dumps(json_body, ensure_ascii=False).encode("utf-8")
        try:
            return self.session.request(
                method,
                url,
                data=data,
                headers=self._headers(json_body=json_body is not None),
                timeout=self.cfg.request_timeout_s,
            )
        except (req_exc.Timeout, req_exc.ConnectionError) as exc:
            raise ApiTimeoutError(f"Timeout contacting {url}", context=context) from exc


__all__ = ["HttpConfig", "JsonSession"]
