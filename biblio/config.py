"""Startup configuration for the dashboard backend connection.

The configuration is resolved exactly once when the process starts. Sources,
highest precedence first:

1. explicit overrides (CLI flags),
2. environment variables ``BIBLIO_API_BASE_URL`` / ``BIBLIO_API_TIMEOUT_MS``,
3. an optional flat JSON file,
4. built-in defaults.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, replace
import json
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

DEFAULT_API_BASE_URL = "http://localhost:3000/api"
DEFAULT_TIMEOUT_MS = 10_000

ENV_BASE_URL = "BIBLIO_API_BASE_URL"
ENV_TIMEOUT_MS = "BIBLIO_API_TIMEOUT_MS"


@dataclass(frozen=True)
class AppConfig:
    """Backend connection settings shared by every page."""

    api_base_url: str = DEFAULT_API_BASE_URL
    timeout_ms: int = DEFAULT_TIMEOUT_MS

    @property
    def timeout_s(self) -> float:
        return self.timeout_ms / 1000.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _coerce_base_url(value: Any) -> str:
    if not isinstance(value, str):
        raise ValueError("api_base_url must be a string.")
    text = value.strip().rstrip("/")
    if not text:
        raise ValueError("api_base_url must not be empty.")
    if not text.startswith(("http://", "https://")):
        raise ValueError(f"api_base_url must be an http(s) URL, got '{text}'.")
    return text


def _coerce_timeout_ms(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError("timeout_ms must be an integer.")
    if isinstance(value, (int, float)):
        coerced = int(value)
    elif isinstance(value, str):
        try:
            coerced = int(value.strip())
        except ValueError as exc:
            raise ValueError("timeout_ms must be an integer.") from exc
    else:
        raise ValueError("timeout_ms must be an integer.")
    if coerced <= 0:
        raise ValueError("timeout_ms must be positive.")
    return coerced


_COERCERS = {
    "api_base_url": _coerce_base_url,
    "timeout_ms": _coerce_timeout_ms,
}


def apply_overrides(config: AppConfig, payload: Mapping[str, Any]) -> AppConfig:
    """Return ``config`` updated with the non-``None`` values of ``payload``."""
    if not isinstance(payload, Mapping):
        raise ValueError("Config payload must be a mapping of flat keys.")
    unknown = set(payload.keys()) - set(_COERCERS)
    if unknown:
        raise ValueError(f"Unsupported config keys: {', '.join(sorted(str(key) for key in unknown))}")
    updates = {
        key: _COERCERS[key](value)
        for key, value in payload.items()
        if value is not None
    }
    return replace(config, **updates) if updates else config


def load_config_file(path: str | Path) -> Dict[str, Any]:
    """Read a flat JSON config file."""
    with open(path, "r", encoding="utf-8") as handle:
        raw = json.load(handle)
    if not isinstance(raw, dict):
        raise ValueError("Config file must contain a JSON object.")
    return raw


def resolve_config(
    *,
    api_base_url: Optional[str] = None,
    timeout_ms: Optional[int] = None,
    config_path: Optional[str | Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> AppConfig:
    env = os.environ if environ is None else environ
    config = AppConfig()
    if config_path:
        config = apply_overrides(config, load_config_file(config_path))
    config = apply_overrides(
        config,
        {
            "api_base_url": env.get(ENV_BASE_URL) or None,
            "timeout_ms": env.get(ENV_TIMEOUT_MS) or None,
        },
    )
    return apply_overrides(
        config,
        {"api_base_url": api_base_url, "timeout_ms": timeout_ms},
    )


__all__ = [
    "AppConfig",
    "DEFAULT_API_BASE_URL",
    "DEFAULT_TIMEOUT_MS",
    "apply_overrides",
    "load_config_file",
    "resolve_config",
]
