"""FutureFind API client with coordinated access token refresh."""

from .api.request_client import AuthenticatedRequestClient
from .api.services import FutureFindAPI
from .application_context import ApplicationContext
from .auth_token.coordinator import RefreshCoordinator
from .auth_token.store import FileCredentialStore, MemoryCredentialStore
from .config import ClientSettings, load_settings
from .errors import (
    HttpError,
    InternalError,
    NetworkError,
    ParsingError,
    RefreshCancelled,
    RefreshFailed,
)
from .http_client import AiohttpTransport, TransportResponse
from .lifecycle.foreground import ForegroundSignal
from .session import AuthSession

__all__ = [
    "AiohttpTransport",
    "ApplicationContext",
    "AuthSession",
    "AuthenticatedRequestClient",
    "ClientSettings",
    "FileCredentialStore",
    "ForegroundSignal",
    "FutureFindAPI",
    "HttpError",
    "InternalError",
    "MemoryCredentialStore",
    "NetworkError",
    "ParsingError",
    "RefreshCancelled",
    "RefreshCoordinator",
    "RefreshFailed",
    "TransportResponse",
    "load_settings",
]
