"""Create-or-update reconciliation with field-level diffing."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from todo_sync.models import (
    ConflictMode,
    DesiredTaskFields,
    Importance,
    ListRef,
    MatchKey,
    ReconcileAction,
    TaskRecord,
    TaskStatus,
)
from todo_sync.sync.context import SyncContext
from todo_sync.sync.errors import InvalidMatchKeyError, SyncError
from todo_sync.sync.matcher import TaskMatcher

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class ReconcileResult:
    """Task state after reconciliation and what was done to reach it."""

    task: TaskRecord
    action: ReconcileAction
    changed_fields: tuple[str, ...] = ()


def validate_request(desired: DesiredTaskFields, key: str | None) -> None:
    """Reject bad input before any remote call is made."""

    if not desired.name:
        raise SyncError(message="Task name must not be empty.")
    if key is not None and key not in desired.name:
        raise InvalidMatchKeyError(
            message=f"Match key {key!r} is not part of task name {desired.name!r}",
            name=desired.name,
            key=key,
        )


class TaskReconciler:
    """Decide between create, update, no-op and duplicate warning for one task.

    Without ``key`` the request is a pure create guarded by duplicate
    detection on the exact subject of incomplete tasks. With ``key`` the first
    task whose subject contains ``key`` is edited in place, writing only the
    fields that differ.
    """

    def __init__(self, context: SyncContext, matcher: TaskMatcher | None = None) -> None:
        self._context = context
        self._matcher = matcher or TaskMatcher(context)

    def reconcile(
        self,
        task_list: ListRef,
        desired: DesiredTaskFields,
        *,
        key: str | None = None,
    ) -> ReconcileResult:
        validate_request(desired, key)
        match = MatchKey.exact(desired.name) if key is None else MatchKey.containing(key)
        existing = self._matcher.find_one(task_list, match)

        if existing is None:
            return self._create(task_list, desired)

        if key is None:
            logger.info("Duplicate task %r in %s", existing.subject, task_list.display_name)
            return ReconcileResult(task=existing, action=ReconcileAction.DUPLICATE_WARNING)

        return self._update(existing, desired)

    def _create(self, task_list: ListRef, desired: DesiredTaskFields) -> ReconcileResult:
        service = self._context.service
        executor = self._context.executor
        draft = TaskRecord(
            subject=desired.name,
            body=desired.body or "",
            importance=desired.importance or Importance.NORMAL,
            status=TaskStatus.COMPLETED if desired.complete else TaskStatus.NOT_STARTED,
        )
        saved = executor.execute("save task", lambda: service.save_task(draft, task_list))
        if saved.id is None:
            raise SyncError(message=f"Service did not assign an id to task {draft.subject!r}")
        task_id = saved.id
        loaded = executor.execute("load task", lambda: service.load_task(task_id))
        logger.info("Created task %r in %s", loaded.subject, task_list.display_name)
        return ReconcileResult(task=loaded, action=ReconcileAction.CREATED)

    def _update(self, existing: TaskRecord, desired: DesiredTaskFields) -> ReconcileResult:
        service = self._context.service
        executor = self._context.executor
        task_id = existing.id
        if task_id is None:
            raise SyncError(message=f"Matched task {existing.subject!r} has no id")

        current = executor.execute("load task", lambda: service.load_task(task_id))
        changes = dirty_fields(current, desired)
        if not changes:
            logger.info("Task %r already up to date", current.subject)
            return ReconcileResult(task=current, action=ReconcileAction.NOOP)

        updated = replace(current, **changes)
        executor.execute(
            "update task",
            lambda: service.update_task(
                updated,
                fields=tuple(changes),
                conflict_mode=ConflictMode.ALWAYS_OVERWRITE,
            ),
        )
        reloaded = executor.execute("load task", lambda: service.load_task(task_id))
        logger.info("Updated task %r fields=%s", reloaded.subject, ",".join(changes))
        return ReconcileResult(
            task=reloaded,
            action=ReconcileAction.UPDATED,
            changed_fields=tuple(changes),
        )


def dirty_fields(current: TaskRecord, desired: DesiredTaskFields) -> dict[str, object]:
    """Return the task fields whose desired value differs from ``current``.

    Importance and status are only considered when the caller supplied them.
    """

    changes: dict[str, object] = {}
    if current.subject != desired.name:
        changes["subject"] = desired.name
    if _body_text(current.body) != _body_text(desired.body):
        changes["body"] = desired.body or ""
    if desired.importance is not None and desired.importance != current.importance:
        changes["importance"] = desired.importance
    if desired.complete is not None and desired.complete != current.is_complete:
        changes["status"] = TaskStatus.COMPLETED if desired.complete else TaskStatus.NOT_STARTED
    return changes


def _body_text(value: str | None) -> str:
    return (value or "").replace("\r\n", "\n").rstrip()
