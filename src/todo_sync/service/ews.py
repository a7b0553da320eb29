"""Exchange Web Services task store adapter built on exchangelib."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from dataclasses import replace
from datetime import date, datetime, tzinfo

from exchangelib import DELEGATE, Account, Configuration, Credentials, Folder, Q
from exchangelib import Task as ExchangeTask
from exchangelib.errors import (
    ErrorFolderNotFound,
    ErrorInvalidIdMalformed,
    ErrorItemNotFound,
    ErrorServerBusy,
)
from exchangelib.fields import FieldPath
from exchangelib.folders import SHALLOW, FolderCollection
from exchangelib.properties import Body, ItemId

from todo_sync.config import ExchangeSettings
from todo_sync.models import ConflictMode, Importance, ListRef, MatchKey, TaskRecord, TaskStatus
from todo_sync.service.base import InvalidIdentifierError, ServerBusyError, ServiceError

logger = logging.getLogger(__name__)

# Used when the server signals overload without a back-off hint.
DEFAULT_BACK_OFF_MS = 5_000

_FOLDER_NAME_FIELDS = {FieldPath(field=Folder.get_field_by_fieldname("name"))}


class ExchangeTaskService:
    """TaskService implementation backed by one exchangelib account session.

    Folders and items fetched during the session are kept by id so that
    updates operate on the same server objects (and change keys) that were read.
    """

    def __init__(self, account: Account) -> None:
        self._account = account
        self._folders: dict[str, Folder] = {}
        self._items: dict[str, ExchangeTask] = {}

    @classmethod
    def connect(cls, settings: ExchangeSettings) -> ExchangeTaskService:
        """Authenticate and locate the mailbox, via autodiscover unless a server is set."""

        credentials = Credentials(username=settings.username, password=settings.password)
        with _translate_errors():
            if settings.server:
                account = Account(
                    primary_smtp_address=settings.email,
                    config=Configuration(server=settings.server, credentials=credentials),
                    autodiscover=False,
                    access_type=DELEGATE,
                )
            else:
                account = Account(
                    primary_smtp_address=settings.email,
                    credentials=credentials,
                    autodiscover=True,
                    access_type=DELEGATE,
                )
        logger.debug("Connected to Exchange account %s", settings.email)
        return cls(account)

    def bind_root(self) -> ListRef:
        with _translate_errors():
            folder = self._account.tasks
        return self._remember_folder(folder)

    def bind_list(self, list_id: str) -> ListRef:
        with _translate_errors(list_id):
            resolved = list(
                FolderCollection(
                    account=self._account,
                    folders=[Folder(root=self._account.root, id=list_id)],
                ).resolve(),
            )
            if not resolved:
                raise ErrorFolderNotFound(f"Could not find folder {list_id!r}")
            folder = resolved[0]
            if isinstance(folder, Exception):
                raise folder
        return self._remember_folder(folder)

    def find_lists(
        self,
        parent: ListRef,
        *,
        name_contains: str | None = None,
        limit: int,
    ) -> list[ListRef]:
        """Query direct sub-folders of ``parent``; the name filter runs on the server."""

        folder = self._folder(parent)
        query = Q(name__icontains=name_contains) if name_contains is not None else None
        found: list[ListRef] = []
        with _translate_errors(parent.id):
            children = FolderCollection(account=self._account, folders=[folder]).find_folders(
                q=query,
                depth=SHALLOW,
                additional_fields=_FOLDER_NAME_FIELDS,
                page_size=limit,
                max_items=limit,
            )
            for child in children:
                if isinstance(child, Exception):
                    raise child
                found.append(self._remember_folder(child))
        return found

    def find_tasks(
        self,
        parent: ListRef,
        *,
        match: MatchKey | None = None,
        limit: int,
    ) -> list[TaskRecord]:
        folder = self._folder(parent)
        if match is None:
            queryset = folder.all()
        elif match.is_exact:
            queryset = folder.filter(subject=match.subject_equals).exclude(
                status=TaskStatus.COMPLETED.value,
            )
        else:
            queryset = folder.filter(subject__contains=match.subject_contains)

        records: list[TaskRecord] = []
        with _translate_errors(parent.id):
            for item in queryset[:limit]:
                if not isinstance(item, ExchangeTask):
                    logger.debug("Skipping non-task item %s in %s", item.id, parent.display_name)
                    continue
                records.append(self._remember_item(item))
        return records

    def load_task(self, task_id: str) -> TaskRecord:
        with _translate_errors(task_id):
            item = self._fetch_item(task_id)
        return self._remember_item(item)

    def save_task(self, task: TaskRecord, parent: ListRef) -> TaskRecord:
        folder = self._folder(parent)
        item = ExchangeTask(
            subject=task.subject,
            body=Body(task.body),
            importance=task.importance.value,
            status=task.status.value,
        )
        with _translate_errors(parent.id):
            created = self._account.bulk_create(folder=folder, items=[item])
            if not created:
                raise ServiceError(message=f"Task {task.subject!r} was not created", code="empty")
            result = created[0]
            if isinstance(result, Exception):
                raise result
        return replace(task, id=result.id)

    def update_task(
        self,
        task: TaskRecord,
        *,
        fields: Sequence[str],
        conflict_mode: ConflictMode,
    ) -> None:
        if task.is_draft:
            raise ServiceError(message=f"Cannot update draft task {task.subject!r}", code="draft")
        item = self._items.get(task.id)
        with _translate_errors(task.id):
            if item is None:
                item = self._fetch_item(task.id)
            for name in fields:
                setattr(item, name, _to_exchange_value(task, name))
            results = self._account.bulk_update(
                items=[(item, list(fields))],
                conflict_resolution=conflict_mode.value,
            )
            for result in results:
                if isinstance(result, Exception):
                    raise result
        self._items[task.id] = item

    def close(self) -> None:
        self._account.protocol.close()

    def __enter__(self) -> ExchangeTaskService:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()

    def _folder(self, ref: ListRef) -> Folder:
        folder = self._folders.get(ref.id)
        if folder is None:
            raise ServiceError(message=f"List {ref.display_name!r} was not bound in this session")
        return folder

    def _remember_folder(self, folder: Folder) -> ListRef:
        self._folders[folder.id] = folder
        return ListRef(id=folder.id, display_name=folder.name or "")

    def _fetch_item(self, task_id: str) -> ExchangeTask:
        fetched = list(self._account.fetch(ids=[ItemId(id=task_id)]))
        if not fetched:
            raise ErrorItemNotFound(f"Could not find item {task_id!r}")
        item = fetched[0]
        if isinstance(item, Exception):
            raise item
        if not isinstance(item, ExchangeTask):
            raise ServiceError(message=f"Item {task_id!r} is not a task", code="not_a_task")
        return item

    def _remember_item(self, item: ExchangeTask) -> TaskRecord:
        self._items[item.id] = item
        return _to_record(item, self._account.default_timezone)


def _to_record(item: ExchangeTask, timezone: tzinfo) -> TaskRecord:
    # Tasks written by Outlook or To Do keep an HTML body; the text rendering is read-only.
    body = item.text_body if item.text_body is not None else item.body
    return TaskRecord(
        id=item.id,
        subject=item.subject or "",
        body=str(body) if body is not None else "",
        importance=(
            Importance.HIGH if item.importance == Importance.HIGH.value else Importance.NORMAL
        ),
        status=_to_status(item.status),
        completion_date=_local_date(item.complete_date, timezone),
    )


def _local_date(value: date | None, timezone: tzinfo) -> date | None:
    """Completion timestamps arrive in UTC; report the mailbox's calendar day."""

    if isinstance(value, datetime):
        return value.astimezone(timezone).date()
    return value


def _to_status(value: str | None) -> TaskStatus:
    try:
        return TaskStatus(value)
    except ValueError:
        return TaskStatus.NOT_STARTED


def _to_exchange_value(task: TaskRecord, name: str) -> object:
    value = getattr(task, name)
    if name == "body":
        return Body(value)
    if isinstance(value, Importance | TaskStatus):
        return value.value
    return value


@contextmanager
def _translate_errors(identifier: str = "") -> Iterator[None]:
    """Map exchangelib failures to the service taxonomy; others pass through."""

    try:
        yield
    except ErrorServerBusy as error:
        back_off_ms = (
            int(error.back_off * 1000) if error.back_off is not None else DEFAULT_BACK_OFF_MS
        )
        raise ServerBusyError(
            message=f"Server busy: {error}",
            code="server_busy",
            back_off_ms=back_off_ms,
        ) from error
    except ErrorInvalidIdMalformed as error:
        raise InvalidIdentifierError(
            message=f"Malformed identifier: {identifier}",
            code="id_malformed",
            identifier=identifier,
            malformed=True,
        ) from error
    except (ErrorFolderNotFound, ErrorItemNotFound) as error:
        raise InvalidIdentifierError(
            message=f"Identifier not found: {identifier}",
            code="not_found",
            identifier=identifier,
            malformed=False,
        ) from error
