"""Access token storage, refresh coordination and auto refresh."""

from .background_task_manager import AutoRefreshScheduler
from .client import RefreshClient
from .coordinator import RefreshCoordinator
from .store import CredentialStore, FileCredentialStore, MemoryCredentialStore

__all__ = [
    "AutoRefreshScheduler",
    "CredentialStore",
    "FileCredentialStore",
    "MemoryCredentialStore",
    "RefreshClient",
    "RefreshCoordinator",
]
