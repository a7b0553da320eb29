"""List resolution, task matching and create-or-update reconciliation."""

from todo_sync.sync.context import SyncContext
from todo_sync.sync.errors import InvalidMatchKeyError, ListNotFoundError, SyncError
from todo_sync.sync.lists import ListResolver
from todo_sync.sync.matcher import TaskMatcher
from todo_sync.sync.reconciler import ReconcileResult, TaskReconciler, validate_request
from todo_sync.sync.retry import RetryExecutor

__all__ = [
    "InvalidMatchKeyError",
    "ListNotFoundError",
    "ListResolver",
    "ReconcileResult",
    "RetryExecutor",
    "SyncContext",
    "SyncError",
    "TaskMatcher",
    "TaskReconciler",
    "validate_request",
]
