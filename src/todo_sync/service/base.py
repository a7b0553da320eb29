"""Remote task service contract and its failure taxonomy."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from todo_sync.models import ConflictMode, ListRef, MatchKey, TaskRecord


@dataclass(slots=True)
class ServiceError(Exception):
    """Base remote service error."""

    message: str
    code: str = "service_error"

    def __str__(self) -> str:
        return self.message


@dataclass(slots=True)
class ServerBusyError(ServiceError):
    """Transient overload; the server asks to wait ``back_off_ms`` before retrying."""

    back_off_ms: int = 0


@dataclass(slots=True)
class InvalidIdentifierError(ServiceError):
    """Identifier rejected by the service, either malformed or unknown."""

    identifier: str = ""
    malformed: bool = False


class TaskService(Protocol):
    """Operations the sync core needs from the remote task store."""

    def bind_root(self) -> ListRef:
        """Bind the well-known root task container."""
        raise NotImplementedError

    def bind_list(self, list_id: str) -> ListRef:
        """Bind a list by opaque id; raises InvalidIdentifierError."""
        raise NotImplementedError

    def find_lists(
        self,
        parent: ListRef,
        *,
        name_contains: str | None = None,
        limit: int,
    ) -> list[ListRef]:
        """Find sub-lists of ``parent``, optionally by display name substring."""
        raise NotImplementedError

    def find_tasks(
        self,
        parent: ListRef,
        *,
        match: MatchKey | None = None,
        limit: int,
    ) -> list[TaskRecord]:
        """Find tasks in ``parent``; non-task items are never returned."""
        raise NotImplementedError

    def load_task(self, task_id: str) -> TaskRecord:
        """Load the full current field set of a persisted task."""
        raise NotImplementedError

    def save_task(self, task: TaskRecord, parent: ListRef) -> TaskRecord:
        """Persist a draft task into ``parent`` and return it with its new id."""
        raise NotImplementedError

    def update_task(
        self,
        task: TaskRecord,
        *,
        fields: Sequence[str],
        conflict_mode: ConflictMode,
    ) -> None:
        """Write the given ``fields`` of a persisted task."""
        raise NotImplementedError
