"""Runtime configuration: JSON config file with environment overrides."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_CONFIG_PATH = Path("config.json")


@dataclass(slots=True)
class ExchangeSettings:
    """Exchange account and connection settings."""

    username: str = ""
    password: str = ""
    email: str = ""
    server: str | None = None


@dataclass(slots=True)
class SyncSettings:
    """Sync core tuning."""

    list_view_size: int = 1000


@dataclass(slots=True)
class Settings:
    """Application settings grouped by concern."""

    config_path: Path = DEFAULT_CONFIG_PATH
    exchange: ExchangeSettings = field(default_factory=ExchangeSettings)
    sync: SyncSettings = field(default_factory=SyncSettings)

    @classmethod
    def load(cls, config_path: Path | None = None) -> Settings:
        """Load the JSON config file (missing file means empty config), then env overrides."""

        path = config_path or DEFAULT_CONFIG_PATH
        raw = _read_config_file(path)
        return cls(
            config_path=path,
            exchange=ExchangeSettings(
                username=os.getenv("TODO_SYNC_USERNAME", _str_value(raw, "username")),
                password=os.getenv("TODO_SYNC_PASSWORD", _str_value(raw, "password")),
                email=os.getenv("TODO_SYNC_EMAIL", _str_value(raw, "email")),
                server=os.getenv("TODO_SYNC_SERVER", _str_value(raw, "server")) or None,
            ),
            sync=SyncSettings(
                list_view_size=_env_int(
                    "TODO_SYNC_LIST_VIEW_SIZE",
                    default=_int_value(raw, "list_view_size", 1000),
                ),
            ),
        )

    def validate(self) -> None:
        """Raise configuration error for values the sync core cannot work with."""

        if self.sync.list_view_size <= 0:
            raise ValueError("TODO_SYNC_LIST_VIEW_SIZE must be a positive integer.")


def _read_config_file(path: Path) -> dict[str, object]:
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as error:
        raise ValueError(f"Invalid JSON in config file {str(path)!r}: {error}") from error
    if not isinstance(data, dict):
        raise ValueError(f"Config file {str(path)!r} must contain a JSON object.")
    return data


def _str_value(raw: dict[str, object], key: str) -> str:
    value = raw.get(key)
    if value is None:
        return ""
    return str(value)


def _int_value(raw: dict[str, object], key: str, default: int) -> int:
    value = raw.get(key)
    if value is None:
        return default
    try:
        return int(str(value))
    except ValueError as error:
        raise ValueError(f"Invalid integer for config key {key!r}: {value!r}") from error


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError as error:
        raise ValueError(f"Invalid integer value for {name}: {value!r}") from error


