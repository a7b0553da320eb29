"""Controllers for todo-sync CLI commands."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

from todo_sync.config import ExchangeSettings, Settings
from todo_sync.formatting import format_list, format_task
from todo_sync.models import DesiredTaskFields, Importance, ListRef, OutputFormat, ReconcileAction
from todo_sync.service.base import TaskService
from todo_sync.sync import (
    ListResolver,
    ReconcileResult,
    RetryExecutor,
    SyncContext,
    TaskMatcher,
    TaskReconciler,
    validate_request,
)

ServiceFactory = Callable[[ExchangeSettings], TaskService]

_ACTION_PREFIXES = {
    ReconcileAction.CREATED: "Created task in",
    ReconcileAction.UPDATED: "Updated task in",
    ReconcileAction.NOOP: "No changes to task in",
    ReconcileAction.DUPLICATE_WARNING: "WARNING: Duplicate task in",
}


@dataclass(slots=True)
class ListsCommand:
    """CLI inputs for the lists command."""

    config_path: Path | None
    output_format: OutputFormat
    show_ids: bool = False


@dataclass(slots=True)
class TasksCommand:
    """CLI inputs for the tasks command."""

    config_path: Path | None
    output_format: OutputFormat
    list_ref: str


@dataclass(slots=True)
class CreateOrUpdateCommand:
    """CLI inputs for the create-or-update command."""

    config_path: Path | None
    output_format: OutputFormat
    list_ref: str
    name: str
    key: str | None = None
    body: str | None = None
    important: bool | None = None
    complete: bool | None = None

    def desired(self) -> DesiredTaskFields:
        importance = None
        if self.important is not None:
            importance = Importance.HIGH if self.important else Importance.NORMAL
        return DesiredTaskFields(
            name=self.name,
            body=self.body,
            importance=importance,
            complete=self.complete,
        )


class TodoCliController:
    """Coordinates todo-sync command execution against one remote session per call."""

    def __init__(
        self,
        *,
        service_factory: ServiceFactory | None = None,
        executor: RetryExecutor | None = None,
    ) -> None:
        self._service_factory = service_factory or _connect_exchange
        self._executor = executor or RetryExecutor()

    def lists(self, command: ListsCommand) -> list[str]:
        settings = _settings(command.config_path)
        with self._context(settings) as context:
            task_lists = ListResolver(context).all_lists()
        return [
            format_list(task_list, command.output_format, show_ids=command.show_ids)
            for task_list in task_lists
        ]

    def tasks(self, command: TasksCommand) -> list[str]:
        settings = _settings(command.config_path)
        with self._context(settings) as context:
            task_list = ListResolver(context).resolve(command.list_ref)
            tasks = TaskMatcher(context).list_tasks(task_list)
        return [format_task(task, command.output_format) for task in tasks]

    def create_or_update(self, command: CreateOrUpdateCommand) -> list[str]:
        desired = command.desired()
        validate_request(desired, command.key)
        settings = _settings(command.config_path)
        with self._context(settings) as context:
            task_list = ListResolver(context).resolve(command.list_ref, fallback_to_root=True)
            result = TaskReconciler(context).reconcile(task_list, desired, key=command.key)
        return _result_lines(task_list, result, command.output_format)

    @contextmanager
    def _context(self, settings: Settings) -> Iterator[SyncContext]:
        service = self._executor.execute(
            "connect",
            lambda: self._service_factory(settings.exchange),
        )
        try:
            yield SyncContext(
                service=service,
                executor=self._executor,
                list_view_size=settings.sync.list_view_size,
            )
        finally:
            close = getattr(service, "close", None)
            if close is not None:
                close()


def _settings(config_path: Path | None) -> Settings:
    settings = Settings.load(config_path)
    settings.validate()
    return settings


def _connect_exchange(settings: ExchangeSettings) -> TaskService:
    from todo_sync.service.ews import ExchangeTaskService

    return ExchangeTaskService.connect(settings)


def _result_lines(
    task_list: ListRef,
    result: ReconcileResult,
    output_format: OutputFormat,
) -> list[str]:
    prefix = f"{_ACTION_PREFIXES[result.action]} {task_list.display_name}:"
    rendered = format_task(result.task, output_format)
    if output_format == OutputFormat.MARKDOWN:
        return [prefix, *rendered.split("\n")]
    return [f"{prefix} {rendered}"]
