"""Isolated, concurrent delivery of events and commands to plugins."""

from __future__ import annotations

import asyncio
import inspect
import logging
import threading
from collections.abc import Callable, Coroutine
from typing import Any

from .errors.handling import log_error
from .irc.models import IRCEvent
from .logs.logger import logger
from .plugins.base import Plugin


def _settle(future: asyncio.Future[Any], result: Any, error: BaseException | None) -> None:
    if future.done():
        return
    if error is not None:
        future.set_exception(error)
    else:
        future.set_result(result)


async def run_in_thread(func: Callable[..., Any], *args: Any, name: str) -> Any:
    """Run ``func(*args)`` on a dedicated daemon thread and await its result.

    Each call gets its own thread, so a hook that blocks forever never holds
    up hooks of other plugins (or the unregister hooks run at shutdown).
    """
    loop = asyncio.get_running_loop()
    future: asyncio.Future[Any] = loop.create_future()

    def runner() -> None:
        result: Any = None
        error: BaseException | None = None
        try:
            result = func(*args)
        except BaseException as e:  # noqa: BLE001 - re-raised on the loop
            error = e
        try:
            loop.call_soon_threadsafe(_settle, future, result, error)
        except RuntimeError:
            # Loop already closed; nobody is waiting any more.
            pass

    threading.Thread(target=runner, name=name, daemon=True).start()
    return await future


async def call_hook(plugin: Plugin, hook_name: str, *args: Any) -> None:
    """Invoke ``plugin.<hook_name>(*args)`` without letting it fail the caller.

    Coroutine hooks are awaited on the loop; plain functions run on their own
    thread (see :func:`run_in_thread`). Exceptions are logged and swallowed.
    """
    hook = getattr(plugin, hook_name)
    try:
        if inspect.iscoroutinefunction(hook):
            await hook(*args)
        else:
            maybe = await run_in_thread(hook, *args, name=f"{plugin.name}-{hook_name}")
            if inspect.isawaitable(maybe):
                await maybe
    except Exception as e:  # noqa: BLE001
        logger.log_event(
            "plugin",
            "hook_error",
            level=logging.ERROR,
            plugin=plugin.name,
            hook=hook_name,
            error=str(e),
            error_type=type(e).__name__,
        )
        log_error(
            f"Plugin {plugin.name} failed in {hook_name}",
            e,
            context={"plugin": plugin.name, "hook": hook_name},
        )


class PluginMailbox:
    """Per-plugin event queue drained by its own worker task.

    Events reach the plugin in the order they were delivered; a slow plugin
    only delays its own mailbox.
    """

    def __init__(self, plugin: Plugin) -> None:
        self.plugin = plugin
        self._queue: asyncio.Queue[IRCEvent | None] = asyncio.Queue()
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(
                self._run(), name=f"plugin-{self.plugin.name}"
            )

    def deliver(self, event: IRCEvent) -> None:
        self._queue.put_nowait(event)

    def close(self) -> None:
        """Stop the worker once already queued events are handled."""
        if self._task is not None:
            self._queue.put_nowait(None)

    async def join(self) -> None:
        if self._task is not None:
            await self._queue.join()

    async def _run(self) -> None:
        while True:
            event = await self._queue.get()
            try:
                if event is None:
                    return
                await call_hook(self.plugin, "process_line", event)
            finally:
                self._queue.task_done()


class TaskTracker:
    """Keeps references to fire-and-forget tasks until they finish."""

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task[Any]] = set()

    def spawn(
        self, factory: Callable[[], Coroutine[Any, Any, Any]], name: str | None = None
    ) -> asyncio.Task[Any]:
        task = asyncio.create_task(factory(), name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def join(self) -> None:
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
