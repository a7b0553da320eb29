from __future__ import annotations

import json
from pathlib import Path

import allure
import pytest

from todo_sync.config import Settings, SyncSettings

pytestmark = [
    allure.epic("Remote Sync"),
    allure.feature("Configuration"),
]

_ENV_NAMES = (
    "TODO_SYNC_USERNAME",
    "TODO_SYNC_PASSWORD",
    "TODO_SYNC_EMAIL",
    "TODO_SYNC_SERVER",
    "TODO_SYNC_LIST_VIEW_SIZE",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch) -> None:
    for name in _ENV_NAMES:
        monkeypatch.delenv(name, raising=False)


def test_missing_config_file_yields_empty_settings(tmp_path: Path) -> None:
    settings = Settings.load(tmp_path / "config.json")

    assert settings.exchange.username == ""
    assert settings.exchange.password == ""
    assert settings.exchange.email == ""
    assert settings.exchange.server is None
    assert settings.sync.list_view_size == 1000


def test_config_file_values_are_loaded(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps(
            {
                "username": "DOMAIN\\jane",
                "password": "secret",
                "email": "jane@example.com",
                "server": "mail.example.com",
                "list_view_size": 50,
            },
        ),
        encoding="utf-8",
    )

    settings = Settings.load(path)

    assert settings.exchange.username == "DOMAIN\\jane"
    assert settings.exchange.password == "secret"
    assert settings.exchange.email == "jane@example.com"
    assert settings.exchange.server == "mail.example.com"
    assert settings.sync.list_view_size == 50


def test_environment_overrides_config_file(tmp_path: Path, monkeypatch) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"email": "file@example.com"}), encoding="utf-8")
    monkeypatch.setenv("TODO_SYNC_EMAIL", "env@example.com")
    monkeypatch.setenv("TODO_SYNC_LIST_VIEW_SIZE", "25")

    settings = Settings.load(path)

    assert settings.exchange.email == "env@example.com"
    assert settings.sync.list_view_size == 25


def test_config_file_must_hold_object(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text("[1, 2]", encoding="utf-8")

    with pytest.raises(ValueError, match="must contain a JSON object"):
        Settings.load(path)


def test_invalid_json_is_reported(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(ValueError, match="Invalid JSON"):
        Settings.load(path)


def test_invalid_env_integer_names_variable(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("TODO_SYNC_LIST_VIEW_SIZE", "many")

    with pytest.raises(ValueError, match="TODO_SYNC_LIST_VIEW_SIZE"):
        Settings.load(tmp_path / "config.json")


def test_validate_rejects_non_positive_view_size() -> None:
    settings = Settings(sync=SyncSettings(list_view_size=0))

    with pytest.raises(ValueError, match="LIST_VIEW_SIZE"):
        settings.validate()
