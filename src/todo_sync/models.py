"""Domain models for task lists, tasks, and reconciliation results."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum


class Importance(str, Enum):
    """Task importance levels understood by the sync core."""

    NORMAL = "Normal"
    HIGH = "High"


class TaskStatus(str, Enum):
    """Task status values; only COMPLETED is interpreted."""

    NOT_STARTED = "NotStarted"
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"
    WAITING_ON_OTHERS = "WaitingOnOthers"
    DEFERRED = "Deferred"


class OutputFormat(str, Enum):
    """Presentation formats for rendered lists and tasks."""

    CONSOLE = "console"
    MARKDOWN = "markdown"


class ConflictMode(str, Enum):
    """Conflict resolution modes for task updates."""

    ALWAYS_OVERWRITE = "AlwaysOverwrite"
    AUTO_RESOLVE = "AutoResolve"
    NEVER_OVERWRITE = "NeverOverwrite"


class ReconcileAction(str, Enum):
    """Outcome of one create-or-update reconciliation."""

    CREATED = "created"
    UPDATED = "updated"
    NOOP = "noop"
    DUPLICATE_WARNING = "duplicate_warning"


@dataclass(slots=True, frozen=True)
class ListRef:
    """Resolved task list handle."""

    id: str
    display_name: str


@dataclass(slots=True, frozen=True)
class TaskRecord:
    """One task as seen by the sync core.

    A record without ``id`` is a draft; the remote service assigns the id on save.
    """

    subject: str
    id: str | None = None
    body: str = ""
    importance: Importance = Importance.NORMAL
    status: TaskStatus = TaskStatus.NOT_STARTED
    completion_date: date | None = None

    @property
    def is_draft(self) -> bool:
        return self.id is None

    @property
    def is_complete(self) -> bool:
        return self.status == TaskStatus.COMPLETED


@dataclass(slots=True, frozen=True)
class MatchKey:
    """Task lookup constraint: exact incomplete subject, or subject substring."""

    subject_equals: str | None = None
    subject_contains: str | None = None

    def __post_init__(self) -> None:
        if (self.subject_equals is None) == (self.subject_contains is None):
            raise ValueError("MatchKey needs exactly one of subject_equals or subject_contains.")

    @classmethod
    def exact(cls, name: str) -> MatchKey:
        return cls(subject_equals=name)

    @classmethod
    def containing(cls, key: str) -> MatchKey:
        return cls(subject_contains=key)

    @property
    def is_exact(self) -> bool:
        return self.subject_equals is not None


@dataclass(slots=True, frozen=True)
class DesiredTaskFields:
    """Caller-requested task state for create-or-update.

    ``importance`` and ``complete`` are tri-state: ``None`` means the caller
    did not ask for a value, so an update leaves the field alone.
    """

    name: str
    body: str | None = None
    importance: Importance | None = None
    complete: bool | None = None
