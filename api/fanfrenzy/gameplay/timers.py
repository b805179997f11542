"""Deferred work for attempts: hint debounce timers and background saves."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Coroutine, Protocol

logger = logging.getLogger(__name__)

DEFAULT_HINT_DEBOUNCE_SECONDS = 0.75


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> Any: ...


class AsyncioScheduler:
    """Scheduler backed by the running event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop
        self._tasks: set[asyncio.Task] = set()

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop or asyncio.get_running_loop()

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return self.loop.call_later(delay, callback)

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        task = self.loop.create_task(coro)
        # Keep a reference until done so the task is not garbage collected.
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task


@dataclass
class _ManualTimer:
    due: float
    callback: Callable[[], None]
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


@dataclass
class ManualScheduler:
    """Deterministic scheduler driven by ``advance()`` and ``drain()``."""

    now: float = 0.0
    timers: list[_ManualTimer] = field(default_factory=list)
    spawned: list[Coroutine[Any, Any, Any]] = field(default_factory=list)

    def call_later(self, delay: float, callback: Callable[[], None]) -> _ManualTimer:
        timer = _ManualTimer(self.now + delay, callback)
        self.timers.append(timer)
        return timer

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> Coroutine[Any, Any, Any]:
        self.spawned.append(coro)
        return coro

    @property
    def pending(self) -> list[_ManualTimer]:
        return [t for t in self.timers if not t.cancelled]

    def advance(self, seconds: float) -> None:
        """Move the clock forward, firing due timers in due order."""
        self.now += seconds
        due = sorted((t for t in self.pending if t.due <= self.now), key=lambda t: t.due)
        for timer in due:
            if timer.cancelled:
                continue
            self.timers.remove(timer)
            timer.callback()

    async def drain(self) -> list[Any]:
        """Await every spawned coroutine, including ones spawned while draining."""
        results = []
        while self.spawned:
            results.append(await self.spawned.pop(0))
        return results


class HintTimers:
    """One cancellable debounce handle per item."""

    def __init__(self, scheduler: Scheduler, delay: float = DEFAULT_HINT_DEBOUNCE_SECONDS) -> None:
        self.scheduler = scheduler
        self.delay = delay
        self._handles: dict[int, TimerHandle] = {}

    def schedule(self, item: int, callback: Callable[[], None]) -> None:
        """Replace any pending timer for ``item``."""
        self.cancel(item)

        def fire() -> None:
            self._handles.pop(item, None)
            callback()

        self._handles[item] = self.scheduler.call_later(self.delay, fire)

    def cancel(self, item: int) -> None:
        handle = self._handles.pop(item, None)
        if handle is not None:
            handle.cancel()

    def cancel_all(self) -> None:
        for item in list(self._handles):
            self.cancel(item)

    def is_pending(self, item: int) -> bool:
        return item in self._handles

    def __len__(self) -> int:
        return len(self._handles)
