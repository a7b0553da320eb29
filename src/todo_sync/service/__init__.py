"""Remote task service adapters."""

from todo_sync.service.base import (
    InvalidIdentifierError,
    ServerBusyError,
    ServiceError,
    TaskService,
)

__all__ = [
    "InvalidIdentifierError",
    "ServerBusyError",
    "ServiceError",
    "TaskService",
]
