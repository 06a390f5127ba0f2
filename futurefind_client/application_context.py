"""Central application context for shared async resources."""

from __future__ import annotations

import asyncio
import logging

from .api.request_client import AuthenticatedRequestClient
from .api.services import FutureFindAPI
from .auth_token.coordinator import RefreshCoordinator
from .auth_token.store import CredentialStore, FileCredentialStore, MemoryCredentialStore
from .config.model import ClientSettings
from .http_client import AiohttpTransport, HttpTransport, SessionConfig
from .lifecycle.foreground import ForegroundSignal
from .session import AuthSession


class ApplicationContext:
    """Holds the transport, credential store and session machinery.

    Collaborators can be injected (tests, embedding apps); anything omitted is
    built from the settings.
    """

    transport: HttpTransport | None
    store: CredentialStore
    foreground: ForegroundSignal
    coordinator: RefreshCoordinator
    client: AuthenticatedRequestClient
    session: AuthSession
    api: FutureFindAPI
    _started: bool
    _closed: bool
    _lock: asyncio.Lock

    def __init__(
        self,
        settings: ClientSettings,
        transport: HttpTransport,
        store: CredentialStore,
        foreground: ForegroundSignal,
    ) -> None:
        self.settings = settings
        self.transport = transport
        self.store = store
        self.foreground = foreground
        self.coordinator = RefreshCoordinator(
            store,
            transport,
            f"{settings.base_url}{settings.refresh_endpoint}",
            foreground,
            refresh_timeout=settings.refresh_timeout,
        )
        self.client = AuthenticatedRequestClient(
            transport, store, self.coordinator, settings.base_url
        )
        self.session = AuthSession(store, self.coordinator, settings.auto_refresh_interval)
        self.api = FutureFindAPI(self.client)
        self._started = False
        self._closed = False
        self._lock = asyncio.Lock()

    # ------------------------- Construction ------------------------- #
    @classmethod
    def create(
        cls,
        settings: ClientSettings | None = None,
        *,
        transport: HttpTransport | None = None,
        store: CredentialStore | None = None,
        foreground: ForegroundSignal | None = None,
    ) -> ApplicationContext:
        """Create a context, building default collaborators from settings.

        Returns:
            A fully wired ApplicationContext instance.
        """
        settings = settings or ClientSettings()
        logging.debug("🧪 Creating application context")
        if transport is None:
            transport = AiohttpTransport(
                SessionConfig(
                    timeout_total=settings.request_timeout,
                    headers={"User-Agent": settings.user_agent},
                )
            )
        if store is None:
            store = (
                FileCredentialStore(settings.credential_file)
                if settings.credential_file
                else MemoryCredentialStore()
            )
        return cls(settings, transport, store, foreground or ForegroundSignal())

    # --------------------------- Lifecycle -------------------------- #
    async def start(self) -> None:
        """Resume auto refresh when a stored session exists (idempotent)."""
        async with self._lock:
            if self._started:
                return
            if await self.session.is_authenticated():
                self.coordinator.start_auto_refresh(self.settings.auto_refresh_interval)
                logging.info("🚀 Stored session found, auto refresh resumed")
            self._started = True

    async def shutdown(self) -> None:
        """Stop background refresh and close the HTTP transport.

        Stored credentials are left in place so the next start resumes the session.
        """
        async with self._lock:
            if self._closed:
                return
            logging.info("🔻 Application context shutdown initiated")
            await self.coordinator.shutdown()
            await self._close_transport()
            self._started = False
            self._closed = True
            logging.info("✅ Application context shutdown complete")

    async def _close_transport(self) -> None:
        if not self.transport:
            return
        try:
            await self.transport.close()
        except OSError as e:
            logging.error(f"💥 Error closing HTTP transport: {str(e)}")
        finally:
            self.transport = None

    async def __aenter__(self) -> ApplicationContext:
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.shutdown()
