"""Single-flight access token refresh coordination."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from ..constants import REFRESH_TIMEOUT_SECONDS
from ..errors.handling import log_error
from ..errors.internal import (
    HttpError,
    NetworkError,
    ParsingError,
    RefreshCancelled,
    RefreshFailed,
)
from ..http_client import HttpTransport
from ..lifecycle.foreground import ForegroundSignal
from .background_task_manager import AutoRefreshScheduler
from .client import RefreshClient
from .store import CredentialStore


class RefreshCoordinator:
    """Guarantees at most one outstanding token refresh at any time.

    Every caller of ``refresh()`` registers a waiter future. The first caller
    of an episode also starts the network refresh task; later callers only
    queue up. When the task finishes the waiter list is swapped out and the
    in-flight flag cleared in the same synchronous step, then every waiter of
    that episode receives the shared outcome. Nothing here awaits between
    checking and setting the in-flight state, so no lock is needed on a single
    event loop.

    Args:
        store: Credential store receiving the refreshed token.
        transport: HTTP transport used for the refresh call.
        refresh_url: Absolute URL of the refresh endpoint.
        foreground: Optional app foreground signal for auto refresh.
        refresh_timeout: Seconds after which a hung refresh counts as failed;
            None disables the bound.
    """

    def __init__(
        self,
        store: CredentialStore,
        transport: HttpTransport,
        refresh_url: str,
        foreground: ForegroundSignal | None = None,
        *,
        refresh_timeout: float | None = REFRESH_TIMEOUT_SECONDS,
    ) -> None:
        self.store = store
        self.client = RefreshClient(transport, refresh_url)
        self.foreground = foreground
        self.refresh_timeout = refresh_timeout
        self._pending_waiters: list[asyncio.Future[str]] = []
        self._current_refresh: asyncio.Task[None] | None = None
        self.episode_count = 0
        self.scheduler = AutoRefreshScheduler(self)

    # ------------------------------------------------------------------ #
    @property
    def in_flight(self) -> bool:
        return self._current_refresh is not None

    def is_refresh_in_progress(self) -> bool:
        return self.in_flight

    def pending_request_count(self) -> int:
        return len(self._pending_waiters)

    # ------------------------------------------------------------------ #
    async def refresh(self) -> str:
        """Obtain a fresh access token, coalescing concurrent callers.

        Returns:
            The new access token (already written to the store).

        Raises:
            RefreshFailed: If the refresh call failed; the store is cleared.
            RefreshCancelled: If ``clear_pending_requests`` dropped this waiter.
        """
        waiter: asyncio.Future[str] = asyncio.get_running_loop().create_future()
        self._pending_waiters.append(waiter)
        if self._current_refresh is None:
            self._current_refresh = asyncio.create_task(self._run_episode())
        else:
            logging.debug(
                f"⏳ Refresh already in progress, queued waiter pending={len(self._pending_waiters)}"
            )
        return await waiter

    async def _run_episode(self) -> None:
        self.episode_count += 1
        episode = self.episode_count
        outcome: str | BaseException
        try:
            outcome = await self._perform_refresh()
        except RefreshFailed as e:
            outcome = e
        except asyncio.CancelledError:
            self._finish_episode(RefreshCancelled("Token refresh cancelled by shutdown"))
            raise
        except Exception as e:  # noqa: BLE001
            log_error("Unexpected token refresh error", e)
            await self._clear_credentials()
            failure = RefreshFailed(f"Token refresh failed: {str(e)}")
            failure.__cause__ = e
            outcome = failure
        self._finish_episode(outcome)
        logging.debug(f"🏁 Refresh episode finished episode={episode}")

    def _finish_episode(self, outcome: str | BaseException) -> None:
        waiters, self._pending_waiters = self._pending_waiters, []
        self._current_refresh = None
        for waiter in waiters:
            if waiter.done():
                continue
            if isinstance(outcome, BaseException):
                waiter.set_exception(outcome)
            else:
                waiter.set_result(outcome)

    async def _perform_refresh(self) -> str:
        try:
            if self.refresh_timeout is None:
                token = await self.client.fetch_token()
            else:
                token = await asyncio.wait_for(
                    self.client.fetch_token(), timeout=self.refresh_timeout
                )
            await self.store.set(token)
        except TimeoutError as e:
            await self._clear_credentials()
            log_error("Token refresh timed out", e, context={"timeout": self.refresh_timeout})
            raise RefreshFailed(
                f"Token refresh failed: timed out after {self.refresh_timeout}s"
            ) from e
        except (NetworkError, HttpError, ParsingError, OSError) as e:
            await self._clear_credentials()
            log_error("Token refresh failed", e)
            raise RefreshFailed(f"Token refresh failed: {str(e)}") from e
        logging.info("✅ Token refreshed and stored successfully")
        return token

    async def _clear_credentials(self) -> None:
        try:
            await self.store.clear()
        except OSError as e:
            log_error("Failed to clear credentials after refresh failure", e)

    # ------------------------------------------------------------------ #
    def clear_pending_requests(self) -> int:
        """Reject every queued waiter with ``RefreshCancelled``.

        An in-flight network refresh keeps running and still updates or
        clears the store when it completes.

        Returns:
            Number of waiters rejected.
        """
        waiters, self._pending_waiters = self._pending_waiters, []
        for waiter in waiters:
            if not waiter.done():
                waiter.set_exception(RefreshCancelled())
        if waiters:
            logging.debug(f"🧹 Cleared pending refresh waiters count={len(waiters)}")
        return len(waiters)

    async def wait_until_idle(self) -> None:
        """Wait for the in-flight refresh, if any, to finish; its outcome is ignored."""
        task = self._current_refresh
        if task is not None and not task.done():
            await asyncio.wait({task})

    def start_auto_refresh(self, interval: float | None = None) -> None:
        """Start periodic and foreground-triggered refreshes (idempotent)."""
        self.scheduler.start(interval)

    def stop_auto_refresh(self) -> None:
        """Stop periodic refreshes and remove the foreground listener."""
        self.scheduler.stop()

    async def shutdown(self) -> None:
        """Release every resource: timer, listener, waiters and in-flight task.

        Cancelling the in-flight refresh leaves the stored credential untouched.
        """
        self.stop_auto_refresh()
        self.clear_pending_requests()
        task = self._current_refresh
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
        finally:
            if self._current_refresh is task:
                self._finish_episode(RefreshCancelled("Token refresh cancelled by shutdown"))

    def get_stats(self) -> dict[str, Any]:
        return {
            "in_flight": self.in_flight,
            "pending_waiters": len(self._pending_waiters),
            "episodes": self.episode_count,
            "network_refreshes": self.client.calls,
            "auto_refresh_running": self.scheduler.running,
        }
