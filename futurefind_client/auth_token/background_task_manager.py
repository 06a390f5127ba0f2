"""Background task management for proactive token refresh."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from ..constants import AUTO_REFRESH_INTERVAL_SECONDS
from ..errors.internal import RefreshCancelled, RefreshFailed
from ..lifecycle.foreground import Subscription
from ..utils import format_duration

if TYPE_CHECKING:
    from .coordinator import RefreshCoordinator


class AutoRefreshScheduler:
    """Owns the periodic refresh task and the foreground subscription.

    Every trigger (initial kick, timer tick, foreground event) calls
    ``RefreshCoordinator.refresh`` and so joins the single-flight episode.
    Failures are logged and never propagated: this is background maintenance.
    """

    def __init__(self, coordinator: RefreshCoordinator) -> None:
        self.coordinator = coordinator
        self.task: asyncio.Task[Any] | None = None
        self.subscription: Subscription | None = None
        self.interval: float | None = None
        self.running = False
        self.tick_count = 0
        # One-shot refresh triggers retained until done so stop() can cancel them.
        self._trigger_tasks: set[asyncio.Task[Any]] = set()

    def start(self, interval: float | None = None) -> None:
        """Start auto refresh; restarts the schedule if already running.

        Args:
            interval: Seconds between periodic refreshes.

        Raises:
            ValueError: If interval is not positive.
            RuntimeError: If called without a running event loop.
        """
        period = AUTO_REFRESH_INTERVAL_SECONDS if interval is None else interval
        if period <= 0:
            raise ValueError("auto refresh interval must be positive")
        self.stop()
        self.interval = period
        self.running = True
        self._spawn_trigger("initial")
        self.task = asyncio.create_task(self._periodic_refresh_loop(period))
        if self.coordinator.foreground is not None:
            self.subscription = self.coordinator.foreground.subscribe(self._on_foreground)
        logging.info(f"▶️ Auto refresh started interval={format_duration(period)}")

    def stop(self) -> None:
        """Cancel the periodic task and remove the foreground listener.

        Safe to call when not started.
        """
        was_running = self.running
        self.running = False
        if self.task:
            self.task.cancel()
            self.task = None
        if self.subscription:
            self.subscription.remove()
            self.subscription = None
        for task in list(self._trigger_tasks):
            task.cancel()
        self._trigger_tasks.clear()
        if was_running:
            logging.info("⏹️ Auto refresh stopped")

    async def _periodic_refresh_loop(self, interval: float) -> None:
        try:
            while self.running:
                await asyncio.sleep(interval)
                if not self.running:
                    break
                self.tick_count += 1
                await self._safe_refresh("scheduled")
        except asyncio.CancelledError:
            logging.debug("Auto refresh loop cancelled")
            raise

    def _on_foreground(self) -> None:
        if self.running:
            self._spawn_trigger("foreground")

    def _spawn_trigger(self, reason: str) -> None:
        task = asyncio.create_task(self._safe_refresh(reason))
        self._trigger_tasks.add(task)
        task.add_done_callback(self._trigger_tasks.discard)

    async def _safe_refresh(self, reason: str) -> None:
        try:
            await self.coordinator.refresh()
        except RefreshCancelled:
            logging.debug(f"{reason.capitalize()} refresh cancelled")
        except RefreshFailed as e:
            logging.warning(f"⚠️ {reason.capitalize()} refresh failed: {str(e)}")
        else:
            logging.debug(f"🔄 {reason.capitalize()} refresh completed")
