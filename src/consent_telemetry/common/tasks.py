# SPDX-FileCopyrightText: 2025 Knitli Inc.
# SPDX-FileContributor: Adam Poulemanos <adam@knit.li>
#
# SPDX-License-Identifier: MIT OR Apache-2.0
"""Fire-and-forget execution for outbound telemetry calls.

Callers of fire-and-forget operations get the scheduled task back, but the
result may be discarded: failures are logged here and never re-raised.

Synchronous callers (no running event loop) never wait either. Their coroutines
go to a background event loop running in a daemon thread, started on first use.
"""

from __future__ import annotations

import asyncio
import logging
import threading

from collections.abc import Coroutine
from concurrent.futures import Future
from typing import Any


logger = logging.getLogger(__name__)


class BackgroundTasks:
    """Keeps strong references to spawned work until it finishes."""

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task[Any]] = set()
        self._futures: set[Future[Any]] = set()
        self._lock = threading.Lock()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._thread: threading.Thread | None = None

    def __len__(self) -> int:
        with self._lock:
            return len(self._tasks) + len(self._futures)

    def spawn(self, coro: Coroutine[Any, Any, Any], *, name: str) -> asyncio.Task[Any] | None:
        """Schedule `coro` without making the caller wait for it.

        Returns the task when an event loop is running. Without one, the coroutine is
        handed to the background loop thread and None is returned; use `drain` to wait
        for it.
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            future = asyncio.run_coroutine_threadsafe(coro, self._ensure_loop())
            with self._lock:
                self._futures.add(future)
            future.add_done_callback(lambda f: self._on_future_done(f, name))
            return None
        task = loop.create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _ensure_loop(self) -> asyncio.AbstractEventLoop:
        with self._lock:
            if self._loop is None:
                loop = asyncio.new_event_loop()
                thread = threading.Thread(
                    target=loop.run_forever, name="consent-telemetry-tasks", daemon=True
                )
                thread.start()
                self._loop, self._thread = loop, thread
                logger.debug("Started background telemetry loop")
            return self._loop

    def _on_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            logger.debug("Background telemetry call '%s' was cancelled", task.get_name())
            return
        if (exc := task.exception()) is not None:
            logger.error(
                "Background telemetry call '%s' failed", task.get_name(), exc_info=exc
            )

    def _on_future_done(self, future: Future[Any], name: str) -> None:
        # Log before releasing the reference so `drain` returns after the log record.
        if future.cancelled():
            logger.debug("Background telemetry call '%s' was cancelled", name)
        elif (exc := future.exception()) is not None:
            logger.error("Background telemetry call '%s' failed", name, exc_info=exc)
        with self._lock:
            self._futures.discard(future)

    async def drain(self) -> None:
        """Wait for every pending task, including work on the background loop."""
        while True:
            with self._lock:
                pending = [*self._tasks, *(asyncio.wrap_future(f) for f in self._futures)]
            if not pending:
                return
            _ = await asyncio.gather(*pending, return_exceptions=True)

    def close(self) -> None:
        """Stop the background loop thread, if one was started."""
        with self._lock:
            loop, thread = self._loop, self._thread
            self._loop = self._thread = None
        if loop is None or thread is None:
            return
        loop.call_soon_threadsafe(loop.stop)
        thread.join()
        loop.close()


__all__ = ("BackgroundTasks",)
