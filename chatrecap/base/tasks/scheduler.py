"""Fire-and-forget background work on the running event loop.

Summaries are produced while the user keeps chatting, so their coroutines are
scheduled with :func:`asyncio.create_task` and never awaited by the
foreground call. ``BackgroundTasks`` holds a strong reference to each task
until it finishes (the loop only keeps weak ones) and hands any exception to
an error sink instead of letting it surface as "exception was never
retrieved".
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Coroutine, Optional, Set

from ..errors import BackendError
from ..logging import get_logger, normalized_log_event

ErrorSink = Callable[[BaseException, str], None]


class BackgroundTasks:
    """Tracks background tasks and routes their failures to ``error_sink``."""

    def __init__(self, error_sink: Optional[ErrorSink] = None) -> None:
        self.logger = get_logger("tasks")
        self.error_sink: ErrorSink = error_sink or self._log_error
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return sum(1 for t in self._tasks if not t.done())

    def submit(self, coro: Coroutine[Any, Any, Any], name: str) -> asyncio.Task:
        """Schedule ``coro`` on the running loop and return its task."""
        task = asyncio.create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    async def drain(self) -> None:
        """Wait until every submitted task (including ones they submit) is done."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
            # Done callbacks run on the next loop iteration.
            await asyncio.sleep(0)

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is None:
            return
        try:
            self.error_sink(exc, task.get_name())
        except Exception as sink_exc:  # noqa: BLE001 - a broken sink must not kill the loop
            self._log_error(sink_exc, f"{task.get_name()}.error_sink")

    def _log_error(self, exc: BaseException, name: str) -> None:
        code = exc.code.value if isinstance(exc, BackendError) else None
        normalized_log_event(
            self.logger,
            "task.error",
            phase="background",
            level=logging.ERROR,
            error_code=code,
            task=name,
            error=f"{type(exc).__name__}: {exc}",
        )


__all__ = ["BackgroundTasks", "ErrorSink"]
