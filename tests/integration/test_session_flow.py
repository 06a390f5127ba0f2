"""
End-to-end session flow against a local aiohttp server.

The server issues a short-lived bearer token plus a refresh cookie on login,
rejects stale bearer tokens with 401 and mints new tokens on the refresh
endpoint only when the cookie is presented.
"""

import asyncio

import aiohttp
import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from futurefind_client.application_context import ApplicationContext
from futurefind_client.auth_token.store import MemoryCredentialStore
from futurefind_client.config import ClientSettings
from futurefind_client.errors.internal import HttpError
from futurefind_client.http_client import AiohttpTransport

REFRESH_COOKIE = "refreshToken"


class FakeBackend:
    def __init__(self) -> None:
        self.valid_token: str | None = None
        self.refresh_secret = "r-1"
        self.issued = 0
        self.refresh_calls = 0
        self.refresh_gate: asyncio.Event | None = None
        self.server: TestServer | None = None

    def _issue(self) -> str:
        self.issued += 1
        self.valid_token = f"access-{self.issued}"
        return self.valid_token

    async def login(self, request: web.Request) -> web.Response:
        payload = await request.json()
        if payload.get("password") != "secret":
            return web.json_response({"message": "Invalid email or password"}, status=401)
        response = web.json_response(
            {"data": {"accessToken": self._issue(), "user": {"email": payload["email"]}}}
        )
        response.set_cookie(REFRESH_COOKIE, self.refresh_secret, httponly=True)
        return response

    async def refresh(self, request: web.Request) -> web.Response:
        self.refresh_calls += 1
        if self.refresh_gate is not None:
            await self.refresh_gate.wait()
        if request.cookies.get(REFRESH_COOKIE) != self.refresh_secret:
            return web.json_response({"message": "Refresh token invalid"}, status=401)
        return web.json_response({"data": {"accessToken": self._issue()}})

    async def profile(self, request: web.Request) -> web.Response:
        if request.headers.get("Authorization") != f"Bearer {self.valid_token}":
            return web.json_response({"message": "jwt expired"}, status=401)
        return web.json_response({"data": {"email": "ada@example.com"}})


@pytest_asyncio.fixture
async def backend():
    state = FakeBackend()
    app = web.Application()
    app.router.add_post("/api/v1/users/login", state.login)
    app.router.add_post("/api/v1/users/refresh-token", state.refresh)
    app.router.add_get("/api/v1/users/get-current-user", state.profile)
    server = TestServer(app)
    await server.start_server()
    state.server = server
    yield state
    await server.close()


@pytest_asyncio.fixture
async def ctx(backend):
    # The test server listens on an IP address; the default jar ignores cookies there
    session = aiohttp.ClientSession(cookie_jar=aiohttp.CookieJar(unsafe=True))
    settings = ClientSettings(
        base_url=str(backend.server.make_url("/api/v1")),
        auto_refresh_interval=3600,
        refresh_timeout=5,
    )
    context = ApplicationContext.create(
        settings, transport=AiohttpTransport(session=session), store=MemoryCredentialStore()
    )
    async with context:
        yield context
    await session.close()


async def _login(ctx) -> None:
    result = await ctx.api.auth.login("ada@example.com", "secret")
    await ctx.session.login(result["data"]["accessToken"], result["data"]["user"])
    await asyncio.gather(*list(ctx.coordinator.scheduler._trigger_tasks))


@pytest.mark.asyncio
async def test_login_then_refresh_through_cookie(ctx, backend):
    await _login(ctx)

    # The initial auto refresh already rotated the token once
    assert backend.refresh_calls == 1
    assert await ctx.session.get_token() == "access-2"
    assert await ctx.session.get_user_data() == {"email": "ada@example.com"}
    profile = await ctx.api.user.get_profile()
    assert profile == {"data": {"email": "ada@example.com"}}


@pytest.mark.asyncio
async def test_expired_token_recovered_for_concurrent_calls(ctx, backend):
    await _login(ctx)
    backend.valid_token = "rotated-server-side"
    backend.refresh_gate = asyncio.Event()

    calls = [asyncio.create_task(ctx.api.user.get_profile()) for _ in range(5)]
    for _ in range(200):
        if ctx.coordinator.pending_request_count() == 5:
            break
        await asyncio.sleep(0.01)
    backend.refresh_gate.set()
    results = await asyncio.gather(*calls)

    assert all(r["data"]["email"] == "ada@example.com" for r in results)
    assert backend.refresh_calls == 2
    assert await ctx.session.get_token() == backend.valid_token


@pytest.mark.asyncio
async def test_revoked_refresh_cookie_logs_user_out(ctx, backend):
    await _login(ctx)
    backend.valid_token = "rotated-server-side"
    backend.refresh_secret = "revoked"

    with pytest.raises(HttpError) as exc_info:
        await ctx.api.user.get_profile()

    assert exc_info.value.status == 401
    assert await ctx.session.is_authenticated() is False


@pytest.mark.asyncio
async def test_bad_login_is_plain_http_error(ctx, backend):
    with pytest.raises(HttpError) as exc_info:
        await ctx.api.auth.login("ada@example.com", "wrong")

    assert exc_info.value.status == 401
    assert str(exc_info.value) == "Invalid email or password"
    assert backend.refresh_calls == 0
