"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace
from datetime import date

import pytest

from todo_sync.models import ConflictMode, ListRef, MatchKey, TaskRecord, TaskStatus
from todo_sync.service.base import InvalidIdentifierError, ServiceError
from todo_sync.sync import RetryExecutor, SyncContext

SERVER_COMPLETION_DATE = date(2024, 3, 1)
_ID_PREFIX = "AAMk"


class InMemoryTaskService:
    """TaskService fake that records calls and can inject failures per operation.

    Ids start with ``AAMk``; any other string passed to ``bind_list`` is
    rejected as malformed, a well-formed unknown id as not found.
    """

    def __init__(self) -> None:
        self.root = ListRef(id=f"{_ID_PREFIX}Root", display_name="Tasks")
        self.lists: list[ListRef] = []
        self.tasks: dict[str, list[TaskRecord]] = {self.root.id: []}
        self.calls: list[str] = []
        self.updates: list[tuple[str, tuple[str, ...], ConflictMode]] = []
        self.closed = False
        self._failures: dict[str, list[Exception]] = {}
        self._next_id = 1

    def fail(self, operation: str, *errors: Exception) -> None:
        self._failures.setdefault(operation, []).extend(errors)

    def add_list(self, display_name: str) -> ListRef:
        task_list = ListRef(id=self._new_id("List"), display_name=display_name)
        self.lists.append(task_list)
        self.tasks[task_list.id] = []
        return task_list

    def add_task(self, task_list: ListRef, subject: str, **fields: object) -> TaskRecord:
        task = _with_server_fields(TaskRecord(subject=subject, id=self._new_id("Task"), **fields))
        self.tasks[task_list.id].append(task)
        return task

    def all_tasks(self, task_list: ListRef) -> list[TaskRecord]:
        return list(self.tasks[task_list.id])

    def bind_root(self) -> ListRef:
        self._call("bind_root")
        return self.root

    def bind_list(self, list_id: str) -> ListRef:
        self._call("bind_list")
        for task_list in self.lists:
            if task_list.id == list_id:
                return task_list
        if not list_id.startswith(_ID_PREFIX):
            raise InvalidIdentifierError(
                message=f"Malformed identifier: {list_id}",
                identifier=list_id,
                malformed=True,
            )
        raise InvalidIdentifierError(
            message=f"Identifier not found: {list_id}",
            identifier=list_id,
            malformed=False,
        )

    def find_lists(
        self,
        parent: ListRef,
        *,
        name_contains: str | None = None,
        limit: int,
    ) -> list[ListRef]:
        self._call("find_lists")
        assert parent == self.root
        found = [
            task_list
            for task_list in self.lists
            if name_contains is None or name_contains in task_list.display_name
        ]
        return found[:limit]

    def find_tasks(
        self,
        parent: ListRef,
        *,
        match: MatchKey | None = None,
        limit: int,
    ) -> list[TaskRecord]:
        self._call("find_tasks")
        found = [task for task in self.tasks[parent.id] if _matches(task, match)]
        return found[:limit]

    def load_task(self, task_id: str) -> TaskRecord:
        self._call("load_task")
        task_list, index = self._locate(task_id)
        return self.tasks[task_list][index]

    def save_task(self, task: TaskRecord, parent: ListRef) -> TaskRecord:
        self._call("save_task")
        assert task.id is None
        saved = replace(task, id=self._new_id("Task"))
        self.tasks[parent.id].append(_with_server_fields(saved))
        return saved

    def update_task(
        self,
        task: TaskRecord,
        *,
        fields: Sequence[str],
        conflict_mode: ConflictMode,
    ) -> None:
        self._call("update_task")
        assert task.id is not None
        task_list, index = self._locate(task.id)
        stored = self.tasks[task_list][index]
        changes = {name: getattr(task, name) for name in fields}
        updated = replace(stored, **changes)
        if "status" in changes and not updated.is_complete:
            updated = replace(updated, completion_date=None)
        self.tasks[task_list][index] = _with_server_fields(updated)
        self.updates.append((task.id, tuple(fields), conflict_mode))

    def close(self) -> None:
        self.closed = True

    def _call(self, operation: str) -> None:
        self.calls.append(operation)
        queued = self._failures.get(operation)
        if queued:
            raise queued.pop(0)

    def _locate(self, task_id: str) -> tuple[str, int]:
        for list_id, tasks in self.tasks.items():
            for index, task in enumerate(tasks):
                if task.id == task_id:
                    return list_id, index
        raise ServiceError(message=f"Unknown task {task_id}", code="not_found")

    def _new_id(self, kind: str) -> str:
        value = f"{_ID_PREFIX}{kind}{self._next_id}"
        self._next_id += 1
        return value


def _matches(task: TaskRecord, match: MatchKey | None) -> bool:
    if match is None:
        return True
    if match.subject_equals is not None:
        return task.subject == match.subject_equals and not task.is_complete
    assert match.subject_contains is not None
    return match.subject_contains in task.subject


def _with_server_fields(task: TaskRecord) -> TaskRecord:
    if task.status == TaskStatus.COMPLETED and task.completion_date is None:
        return replace(task, completion_date=SERVER_COMPLETION_DATE)
    return task


@pytest.fixture()
def service() -> InMemoryTaskService:
    return InMemoryTaskService()


@pytest.fixture()
def sleeps() -> list[float]:
    return []


@pytest.fixture()
def executor(sleeps: list[float]) -> RetryExecutor:
    return RetryExecutor(sleep=sleeps.append)


@pytest.fixture()
def context(service: InMemoryTaskService, executor: RetryExecutor) -> SyncContext:
    return SyncContext(service=service, executor=executor)
