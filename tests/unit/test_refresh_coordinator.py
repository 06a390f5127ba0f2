"""
Unit tests for RefreshCoordinator single-flight refresh.
"""

import asyncio

import pytest

from futurefind_client.auth_token.coordinator import RefreshCoordinator
from futurefind_client.auth_token.store import MemoryCredentialStore
from futurefind_client.errors.internal import RefreshCancelled, RefreshFailed
from futurefind_client.http_client import TransportResponse
from tests.fixtures.transport_fixtures import (
    REFRESH_URL,
    FakeTransport,
    json_response,
    network_down,
    settle,
)


@pytest.mark.asyncio
async def test_concurrent_refreshes_share_one_network_call(coordinator, transport, store):
    transport.refresh_gate = asyncio.Event()
    tasks = [asyncio.create_task(coordinator.refresh()) for _ in range(5)]
    await settle()

    assert coordinator.in_flight is True
    assert coordinator.pending_request_count() == 5
    assert transport.refresh_calls == 1

    transport.refresh_gate.set()
    results = await asyncio.gather(*tasks)

    assert results == ["token-1"] * 5
    assert transport.refresh_calls == 1
    assert await store.get() == "token-1"
    assert coordinator.in_flight is False
    assert coordinator.pending_request_count() == 0


@pytest.mark.asyncio
async def test_late_joiner_receives_same_episode_result(coordinator, transport):
    transport.refresh_gate = asyncio.Event()
    first = asyncio.create_task(coordinator.refresh())
    await settle()
    second = asyncio.create_task(coordinator.refresh())
    await settle()
    transport.refresh_gate.set()

    assert await first == await second == "token-1"
    assert coordinator.episode_count == 1


@pytest.mark.asyncio
async def test_call_after_episode_resolves_starts_new_episode(coordinator, transport, store):
    assert await coordinator.refresh() == "token-1"
    assert await coordinator.refresh() == "token-2"

    assert transport.refresh_calls == 2
    assert coordinator.episode_count == 2
    assert await store.get() == "token-2"


@pytest.mark.asyncio
async def test_refresh_called_from_waiter_callback_starts_fresh_episode(coordinator, transport):
    """A caller reacting to one episode's result must not join the drained list."""
    transport.refresh_gate = asyncio.Event()
    follow_up: list[asyncio.Task[str]] = []

    async def refresh_then_again() -> str:
        token = await coordinator.refresh()
        follow_up.append(asyncio.create_task(coordinator.refresh()))
        return token

    task = asyncio.create_task(refresh_then_again())
    await settle()
    transport.refresh_gate.set()
    assert await task == "token-1"
    assert await follow_up[0] == "token-2"
    assert transport.refresh_calls == 2


@pytest.mark.asyncio
async def test_failed_refresh_rejects_all_waiters_and_clears_store(coordinator, transport, store):
    transport.refresh_gate = asyncio.Event()
    transport.refresh_results.append(json_response(401, {"message": "Invalid refresh token"}))
    tasks = [asyncio.create_task(coordinator.refresh()) for _ in range(3)]
    await settle()
    transport.refresh_gate.set()

    results = await asyncio.gather(*tasks, return_exceptions=True)

    assert all(isinstance(r, RefreshFailed) for r in results)
    assert results[0] is results[1] is results[2]
    assert "401" in str(results[0])
    assert await store.get() is None
    assert transport.refresh_calls == 1


@pytest.mark.asyncio
async def test_refresh_without_token_in_body_fails(coordinator, transport, store):
    transport.refresh_results.append(json_response(200, {"data": {}}))

    with pytest.raises(RefreshFailed, match="No access token"):
        await coordinator.refresh()
    assert await store.get() is None


@pytest.mark.asyncio
async def test_refresh_accepts_top_level_access_token(coordinator, transport, store):
    transport.refresh_results.append(json_response(200, {"accessToken": "flat-token"}))

    assert await coordinator.refresh() == "flat-token"
    assert await store.get() == "flat-token"


@pytest.mark.asyncio
async def test_refresh_with_non_json_body_fails(coordinator, transport):
    transport.refresh_results.append(TransportResponse(200, "<html>oops</html>"))

    with pytest.raises(RefreshFailed):
        await coordinator.refresh()


@pytest.mark.asyncio
async def test_network_failure_is_refresh_failed(coordinator, transport, store):
    transport.refresh_results.append(network_down())

    with pytest.raises(RefreshFailed) as exc_info:
        await coordinator.refresh()
    assert "Cannot connect" in str(exc_info.value)
    assert await store.get() is None


@pytest.mark.asyncio
async def test_failure_is_not_retried_automatically(coordinator, transport):
    transport.refresh_results.append(json_response(500, {"message": "boom"}))

    with pytest.raises(RefreshFailed):
        await coordinator.refresh()
    await settle()
    assert transport.refresh_calls == 1

    # Next trigger is an independent attempt
    assert await coordinator.refresh() == "token-1"
    assert transport.refresh_calls == 2


@pytest.mark.asyncio
async def test_clear_pending_requests_rejects_waiters_but_keeps_side_effects(
    coordinator, transport, store
):
    transport.refresh_gate = asyncio.Event()
    tasks = [asyncio.create_task(coordinator.refresh()) for _ in range(3)]
    await settle()

    assert coordinator.clear_pending_requests() == 3
    results = await asyncio.gather(*tasks, return_exceptions=True)
    assert all(isinstance(r, RefreshCancelled) for r in results)
    assert coordinator.in_flight is True

    transport.refresh_gate.set()
    await settle()

    assert coordinator.in_flight is False
    assert await store.get() == "token-1"


@pytest.mark.asyncio
async def test_waiter_joining_after_clear_gets_episode_result(coordinator, transport):
    transport.refresh_gate = asyncio.Event()
    early = asyncio.create_task(coordinator.refresh())
    await settle()
    coordinator.clear_pending_requests()
    late = asyncio.create_task(coordinator.refresh())
    await settle()
    transport.refresh_gate.set()

    with pytest.raises(RefreshCancelled):
        await early
    assert await late == "token-1"
    assert transport.refresh_calls == 1


@pytest.mark.asyncio
async def test_clear_pending_requests_after_completion_is_noop(coordinator):
    token = await coordinator.refresh()

    assert coordinator.clear_pending_requests() == 0
    assert token == "token-1"


@pytest.mark.asyncio
async def test_hung_refresh_times_out(store):
    transport = FakeTransport()
    transport.refresh_gate = asyncio.Event()  # never set
    coord = RefreshCoordinator(store, transport, REFRESH_URL, refresh_timeout=0.05)

    with pytest.raises(RefreshFailed, match="timed out"):
        await coord.refresh()
    assert await store.get() is None
    assert coord.in_flight is False


@pytest.mark.asyncio
async def test_shutdown_cancels_in_flight_refresh_without_touching_store(
    coordinator, transport, store
):
    transport.refresh_gate = asyncio.Event()
    task = asyncio.create_task(coordinator.refresh())
    await settle()

    await coordinator.shutdown()

    with pytest.raises(RefreshCancelled):
        await task
    assert coordinator.in_flight is False
    assert await store.get() == "expired-token"


@pytest.mark.asyncio
async def test_unexpected_store_error_still_resolves_waiters(transport):
    class BrokenStore(MemoryCredentialStore):
        async def set(self, token: str) -> None:
            raise ValueError("disk full")

    broken = BrokenStore("expired-token")
    coord = RefreshCoordinator(broken, transport, REFRESH_URL)

    with pytest.raises(RefreshFailed, match="disk full"):
        await coord.refresh()
    assert await broken.get() is None
    assert coord.in_flight is False


@pytest.mark.asyncio
async def test_cancelled_caller_does_not_break_episode(coordinator, transport):
    transport.refresh_gate = asyncio.Event()
    doomed = asyncio.create_task(coordinator.refresh())
    survivor = asyncio.create_task(coordinator.refresh())
    await settle()
    doomed.cancel()
    await settle()
    transport.refresh_gate.set()

    assert await survivor == "token-1"
    assert doomed.cancelled()


@pytest.mark.asyncio
async def test_get_stats_reports_state(coordinator):
    await coordinator.refresh()

    stats = coordinator.get_stats()

    assert stats["in_flight"] is False
    assert stats["episodes"] == 1
    assert stats["network_refreshes"] == 1
    assert stats["auto_refresh_running"] is False
