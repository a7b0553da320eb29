"""Resolve a user-supplied list reference to a concrete list."""

from __future__ import annotations

import logging

from todo_sync.models import ListRef
from todo_sync.service.base import InvalidIdentifierError
from todo_sync.sync.context import SyncContext
from todo_sync.sync.errors import ListNotFoundError

logger = logging.getLogger(__name__)


class ListResolver:
    """Resolve an empty string, list id, or display name substring to a list."""

    def __init__(self, context: SyncContext) -> None:
        self._context = context

    def root(self) -> ListRef:
        return self._context.executor.execute("get tasks folder", self._context.service.bind_root)

    def resolve(self, list_ref: str, *, fallback_to_root: bool = False) -> ListRef:
        """Resolve ``list_ref``.

        Order: empty string means the root container; then ``list_ref`` is tried
        as a list id; a malformed id falls through to a display-name substring
        search among the root's sub-lists, while a well-formed unknown id fails.
        With ``fallback_to_root`` an unmatched substring yields the root.
        """

        service = self._context.service
        executor = self._context.executor
        root = self.root()
        if list_ref == "":
            return root

        try:
            return executor.execute("get list by id", lambda: service.bind_list(list_ref))
        except InvalidIdentifierError as error:
            if not error.malformed:
                raise ListNotFoundError(
                    message=f"No list with id: {list_ref}",
                    list_ref=list_ref,
                ) from error
            logger.debug("List reference %r is not an id, searching by name", list_ref)

        matches = executor.execute(
            "get list",
            lambda: service.find_lists(root, name_contains=list_ref, limit=1),
        )
        if matches:
            return matches[0]
        if fallback_to_root:
            logger.info("No list containing %r, using %s", list_ref, root.display_name)
            return root
        raise ListNotFoundError(message=f"No list containing text: {list_ref}", list_ref=list_ref)

    def all_lists(self) -> list[ListRef]:
        root = self.root()
        return self._context.executor.execute(
            "get lists",
            lambda: self._context.service.find_lists(root, limit=self._context.list_view_size),
        )
