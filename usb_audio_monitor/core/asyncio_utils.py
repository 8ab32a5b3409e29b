"""Asyncio helpers for long-running polling tasks."""

from __future__ import annotations

import asyncio
from typing import Any, Coroutine, Optional

from .logging_utils import LoggerLike, ensure_structured_logger


def create_logged_task(
    coro: Coroutine[Any, Any, Any],
    *,
    logger: LoggerLike = None,
    name: Optional[str] = None,
) -> asyncio.Task[Any]:
    """Create a task whose unhandled exception is logged when it finishes."""
    task_logger = ensure_structured_logger(logger, fallback_name="asyncio")
    task = asyncio.get_running_loop().create_task(coro, name=name)
    label = name or "background task"

    def _done(done_task: asyncio.Task[Any]) -> None:
        if done_task.cancelled():
            return
        exc = done_task.exception()
        if exc is not None:
            task_logger.error("Unhandled exception in %s", label, exc_info=exc)

    task.add_done_callback(_done)
    return task


__all__ = ["create_logged_task"]
