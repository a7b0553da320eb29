"""Single-candidate task lookup inside one list."""

from __future__ import annotations

from todo_sync.models import ListRef, MatchKey, TaskRecord
from todo_sync.sync.context import SyncContext


class TaskMatcher:
    """Find at most one existing task for a match key.

    Only one result is requested from the service, so when several tasks
    match, the first one the service returns wins. Absence is ``None``.
    """

    def __init__(self, context: SyncContext) -> None:
        self._context = context

    def find_one(self, task_list: ListRef, match: MatchKey) -> TaskRecord | None:
        service = self._context.service
        found = self._context.executor.execute(
            "get existing tasks",
            lambda: service.find_tasks(task_list, match=match, limit=1),
        )
        return found[0] if found else None

    def list_tasks(self, task_list: ListRef) -> list[TaskRecord]:
        service = self._context.service
        return self._context.executor.execute(
            "get tasks",
            lambda: service.find_tasks(task_list, limit=self._context.list_view_size),
        )
