"""Per-invocation context shared by the sync components."""

from __future__ import annotations

from dataclasses import dataclass, field

from todo_sync.service.base import TaskService
from todo_sync.sync.retry import RetryExecutor


@dataclass(slots=True, frozen=True)
class SyncContext:
    """Remote session and retry policy for one action."""

    service: TaskService
    executor: RetryExecutor = field(default_factory=RetryExecutor)
    list_view_size: int = 1000
