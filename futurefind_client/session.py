"""Authentication session facade: stored credentials plus login/logout lifecycle."""

from __future__ import annotations

import logging
from typing import Any

from .auth_token.coordinator import RefreshCoordinator
from .auth_token.store import CredentialStore


class AuthSession:
    """Stores the token and user profile and drives refresh on login/logout.

    Args:
        store: Credential store; user data helpers are used when it offers them.
        coordinator: Refresh coordinator started on login and stopped on logout.
        auto_refresh_interval: Seconds between proactive refreshes after login.
    """

    def __init__(
        self,
        store: CredentialStore,
        coordinator: RefreshCoordinator,
        auto_refresh_interval: float | None = None,
    ) -> None:
        self.store = store
        self.coordinator = coordinator
        self.auto_refresh_interval = auto_refresh_interval

    async def set_token(self, token: str) -> None:
        if not self.is_valid_token(token):
            raise ValueError("token must be a non-empty string")
        await self.store.set(token)
        logging.debug("🔐 Token stored successfully")

    async def get_token(self) -> str | None:
        return await self.store.get()

    async def set_user_data(self, user_data: dict[str, Any]) -> None:
        setter = getattr(self.store, "set_user_data", None)
        if setter is None:
            raise TypeError(f"{type(self.store).__name__} cannot store user data")
        await setter(user_data)

    async def get_user_data(self) -> dict[str, Any] | None:
        getter = getattr(self.store, "get_user_data", None)
        return await getter() if getter else None

    async def is_authenticated(self) -> bool:
        return self.is_valid_token(await self.get_token())

    @staticmethod
    def is_valid_token(token: str | None) -> bool:
        return bool(token and token.strip())

    async def login(self, token: str, user_data: dict[str, Any] | None = None) -> None:
        """Persist credentials of a fresh login and start background refresh."""
        await self.set_token(token)
        if user_data is not None:
            await self.set_user_data(user_data)
        self.coordinator.start_auto_refresh(self.auto_refresh_interval)
        logging.info("👤 Session started")

    async def logout(self) -> None:
        """Drop queued refresh waiters, stop auto refresh and clear stored data.

        A refresh already on the wire is allowed to finish first so it cannot
        write a token back after the store was cleared.
        """
        self.coordinator.clear_pending_requests()
        self.coordinator.stop_auto_refresh()
        await self.coordinator.wait_until_idle()
        clear_all = getattr(self.store, "clear_all", None)
        if clear_all is not None:
            await clear_all()
        else:
            await self.store.clear()
        logging.info("👋 Logout successful - all data cleared")
