"""Fatal errors raised by the sync core."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class SyncError(Exception):
    """Base error for conditions that end the current action."""

    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(slots=True)
class ListNotFoundError(SyncError):
    """No list matched the requested identifier or name substring."""

    list_ref: str = ""


@dataclass(slots=True)
class InvalidMatchKeyError(SyncError):
    """Match key is not a substring of the task name."""

    name: str = ""
    key: str = ""
