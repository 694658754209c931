"""Small helpers for running asynchronous work: spawning, sleeping and timeouts."""

from __future__ import annotations

import asyncio
import datetime
import time
from typing import Any, Awaitable, Callable, Coroutine, Set, TypeVar, Union

T = TypeVar("T")

Duration = Union[int, float, datetime.timedelta]

_background_tasks: Set["asyncio.Task[Any]"] = set()


class Elapsed(Exception):
    """Raised by :func:`timeout` when the deadline passes before the work finishes."""

    def __init__(self, message: str = "deadline has elapsed") -> None:
        super().__init__(message)


def _seconds(duration: Duration) -> float:
    if isinstance(duration, datetime.timedelta):
        return duration.total_seconds()
    return float(duration)


def spawn(coro: Coroutine[Any, Any, Any]) -> "asyncio.Task[Any]":
    """Run ``coro`` in the background on the running event loop."""
    task = asyncio.get_running_loop().create_task(coro)
    # Hold a reference so the task is not collected before it finishes.
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)
    return task


def block_in_place(func: Callable[[], T]) -> T:
    """Run a blocking function and return its result."""
    return func()


async def sleep(duration: Duration) -> None:
    """Sleep for ``duration`` seconds (or a :class:`datetime.timedelta`)."""
    await asyncio.sleep(max(_seconds(duration), 0.0))


async def sleep_until(deadline: float) -> None:
    """Sleep until ``time.monotonic()`` reaches ``deadline``."""
    remaining = deadline - time.monotonic()
    while remaining > 0:
        await asyncio.sleep(remaining)
        remaining = deadline - time.monotonic()


async def timeout(duration: Duration, awaitable: Awaitable[T]) -> T:
    """Await ``awaitable``, raising :class:`Elapsed` if it takes longer than ``duration``."""
    try:
        return await asyncio.wait_for(awaitable, _seconds(duration))
    except asyncio.TimeoutError as exc:
        raise Elapsed() from exc