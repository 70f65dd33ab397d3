from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from biblio.config import AppConfig, apply_overrides, resolve_config
from biblio.utils import logging as logging_utils


def test_defaults_without_sources() -> None:
    config = resolve_config(environ={})

    assert config == AppConfig(api_base_url="http://localhost:3000/api", timeout_ms=10_000)
    assert config.timeout_s == 10.0


def test_precedence_cli_over_env_over_file(tmp_path: Path) -> None:
    path = tmp_path / "biblio.json"
    path.write_text(json.dumps({"api_base_url": "http://file/api", "timeout_ms": 1000}), encoding="utf-8")
    env = {"BIBLIO_API_BASE_URL": "http://env/api/"}

    from_file_and_env = resolve_config(config_path=path, environ=env)
    with_cli = resolve_config(api_base_url="https://cli/api", config_path=path, environ=env)

    assert from_file_and_env.api_base_url == "http://env/api"
    assert from_file_and_env.timeout_ms == 1000
    assert with_cli.api_base_url == "https://cli/api"


def test_env_timeout_is_coerced() -> None:
    config = resolve_config(environ={"BIBLIO_API_TIMEOUT_MS": " 2500 "})

    assert config.timeout_ms == 2500


@pytest.mark.parametrize(
    "payload",
    [
        {"api_base_url": "ftp://backend"},
        {"api_base_url": ""},
        {"timeout_ms": 0},
        {"timeout_ms": "soon"},
        {"timeout_ms": True},
        {"retries": 3},
    ],
)
def test_invalid_values_rejected(payload: dict) -> None:
    with pytest.raises(ValueError):
        apply_overrides(AppConfig(), payload)


def test_file_must_hold_object(tmp_path: Path) -> None:
    path = tmp_path / "bad.json"
    path.write_text("[1, 2]", encoding="utf-8")

    with pytest.raises(ValueError):
        resolve_config(config_path=path, environ={})


def test_logging_env_level(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BIBLIO_LOG_LEVEL", "warning")
    monkeypatch.delenv("BIBLIO_DEBUG", raising=False)

    level = logging_utils.configure_root()

    assert level == logging.WARNING
    assert logging_utils.level_name(level) == "WARNING"
    assert logging_utils.env_requests_debug() is False


def test_logging_debug_flag(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("BIBLIO_LOG_LEVEL", raising=False)
    monkeypatch.setenv("BIBLIO_DEBUG", "yes")

    assert logging_utils.env_requests_debug() is True
