import os

import pytest
import pytest_asyncio

# Keep module-level defaults small so nothing in the suite waits on real intervals
os.environ.setdefault("AUTO_REFRESH_INTERVAL_SECONDS", "3600")
os.environ.setdefault("REFRESH_TIMEOUT_SECONDS", "5")

from futurefind_client.auth_token.coordinator import RefreshCoordinator  # noqa: E402
from futurefind_client.auth_token.store import MemoryCredentialStore  # noqa: E402
from futurefind_client.lifecycle.foreground import ForegroundSignal  # noqa: E402
from futurefind_client.logging_config import error_aggregator  # noqa: E402
from tests.fixtures.transport_fixtures import REFRESH_URL, FakeTransport  # noqa: E402


@pytest.fixture(autouse=True)
def _reset_error_aggregator():
    yield
    error_aggregator.reset()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def store() -> MemoryCredentialStore:
    return MemoryCredentialStore("expired-token")


@pytest.fixture
def foreground() -> ForegroundSignal:
    return ForegroundSignal()


@pytest_asyncio.fixture
async def coordinator(store, transport, foreground):
    coord = RefreshCoordinator(store, transport, REFRESH_URL, foreground, refresh_timeout=5)
    yield coord
    await coord.shutdown()
