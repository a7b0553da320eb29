"""Server-busy retry loop wrapped around every remote call."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from typing import TypeVar

from todo_sync.service.base import ServerBusyError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryExecutor:
    """Run remote operations, backing off for exactly the server-suggested wait.

    There is no attempt cap and no jitter: each ``ServerBusyError`` carries the
    wait the server wants, and the operation is retried after it. Every other
    exception propagates unchanged on the first occurrence.
    """

    def __init__(self, *, sleep: Callable[[float], None] = time.sleep) -> None:
        self._sleep = sleep

    def execute(self, operation_name: str, operation: Callable[[], T]) -> T:
        while True:
            try:
                return operation()
            except ServerBusyError as error:
                _log_retry(operation_name, error)
                self._sleep(error.back_off_ms / 1000)

    async def execute_async(
        self,
        operation_name: str,
        operation: Callable[[], Awaitable[T]],
    ) -> T:
        """Same policy as ``execute`` but waits without blocking the event loop."""

        while True:
            try:
                return await operation()
            except ServerBusyError as error:
                _log_retry(operation_name, error)
                await asyncio.sleep(error.back_off_ms / 1000)


def _log_retry(operation_name: str, error: ServerBusyError) -> None:
    logger.warning(
        "Retry of %s due to server busy (back off for %d ms)",
        operation_name,
        error.back_off_ms,
    )
