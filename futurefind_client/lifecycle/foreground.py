"""Foreground (app became active) signal with subscribable callbacks."""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable
from typing import Any

from ..constants import APP_STATE_ACTIVE

ForegroundCallback = Callable[[], Any]


class Subscription:
    """Handle returned by ``ForegroundSignal.subscribe``; ``remove()`` is idempotent."""

    def __init__(self, signal: ForegroundSignal, callback: ForegroundCallback) -> None:
        self._signal = signal
        self._callback = callback
        self.active = True

    def remove(self) -> None:
        if not self.active:
            return
        self.active = False
        self._signal._discard(self._callback)


class ForegroundSignal:
    """Fires registered callbacks when the application returns to the foreground.

    The host reports every state transition through ``notify``; only the
    ``"active"`` state fires callbacks. Callbacks may be plain functions or
    coroutine functions. Coroutines are scheduled fire-and-forget as retained
    tasks and their exceptions are logged.
    """

    def __init__(self) -> None:
        self._callbacks: list[ForegroundCallback] = []
        self._tasks: set[asyncio.Task[Any]] = set()
        self.state: str | None = None

    def subscribe(self, callback: ForegroundCallback) -> Subscription:
        self._callbacks.append(callback)
        return Subscription(self, callback)

    def _discard(self, callback: ForegroundCallback) -> None:
        try:
            self._callbacks.remove(callback)
        except ValueError:
            pass

    @property
    def subscriber_count(self) -> int:
        return len(self._callbacks)

    def notify(self, state: str) -> int:
        """Record an app state transition and fire callbacks on ``"active"``.

        Args:
            state: New app state (e.g. "active", "background", "inactive").

        Returns:
            Number of callbacks invoked.
        """
        previous, self.state = self.state, state
        logging.debug(f"📱 App state {previous} -> {state}")
        if state != APP_STATE_ACTIVE:
            return 0
        fired = 0
        for callback in list(self._callbacks):
            try:
                result = callback()
            except Exception as e:  # noqa: BLE001
                logging.warning(
                    f"⚠️ Foreground callback error type={type(e).__name__} error={str(e)}"
                )
                continue
            fired += 1
            if inspect.isawaitable(result):
                self._retain(result)
        return fired

    def _retain(self, awaitable: Any) -> None:
        task: asyncio.Task[Any] = asyncio.ensure_future(awaitable)
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc:
            logging.debug(
                f"⚠️ Foreground task error error={str(exc)} type={type(exc).__name__}"
            )
