"""
Fake HTTP transport emulating the FutureFind API for tests.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from futurefind_client.errors.internal import NetworkError
from futurefind_client.http_client import TransportResponse

BASE_URL = "https://api.test/api/v1"
REFRESH_URL = f"{BASE_URL}/users/refresh-token"

EXPIRED_TOKEN_BODY = {"statusCode": 401, "message": "jwt expired", "success": False}


def json_response(status: int, payload: Any) -> TransportResponse:
    return TransportResponse(status=status, raw_body=json.dumps(payload))


@dataclass
class SentRequest:
    url: str
    method: str
    headers: dict[str, str]
    body: Any

    @property
    def token(self) -> str | None:
        auth = self.headers.get("Authorization", "")
        return auth.removeprefix("Bearer ") if auth.startswith("Bearer ") else None


class FakeTransport:
    """Scriptable transport.

    Refresh requests issue ``token-1``, ``token-2``... unless ``refresh_results``
    holds queued responses/exceptions. Other requests succeed only with the
    currently valid bearer token, unless ``handler`` overrides them.
    ``refresh_gate`` (an asyncio.Event) holds refresh calls until set.
    """

    def __init__(self, valid_token: str | None = None, refresh_url: str = REFRESH_URL) -> None:
        self.refresh_url = refresh_url
        self.valid_token = valid_token
        self.requests: list[SentRequest] = []
        self.refresh_calls = 0
        self.refresh_results: list[TransportResponse | Exception] = []
        self.refresh_gate: asyncio.Event | None = None
        self.handler: Callable[[SentRequest], TransportResponse | Exception] | None = None
        self.closed = False
        self._issued = 0

    def expire(self, new_valid: str | None = None) -> None:
        """Invalidate the current token server side."""
        self.valid_token = new_valid

    def requests_to(self, url: str) -> list[SentRequest]:
        return [r for r in self.requests if r.url == url]

    async def send(
        self, url: str, method: str, headers: dict[str, str], body: Any = None
    ) -> TransportResponse:
        request = SentRequest(url, method, dict(headers), body)
        self.requests.append(request)
        if url == self.refresh_url:
            return await self._refresh()
        await asyncio.sleep(0)
        if self.handler is not None:
            result = self.handler(request)
        elif self.valid_token is not None and request.token == self.valid_token:
            result = json_response(200, {"ok": True, "url": url})
        else:
            result = json_response(401, EXPIRED_TOKEN_BODY)
        if isinstance(result, Exception):
            raise result
        return result

    async def _refresh(self) -> TransportResponse:
        self.refresh_calls += 1
        if self.refresh_gate is not None:
            await self.refresh_gate.wait()
        else:
            await asyncio.sleep(0)
        if self.refresh_results:
            result = self.refresh_results.pop(0)
            if isinstance(result, Exception):
                raise result
            return result
        self._issued += 1
        token = f"token-{self._issued}"
        self.valid_token = token
        return json_response(200, {"data": {"accessToken": token}})

    async def close(self) -> None:
        self.closed = True


def network_down() -> NetworkError:
    return NetworkError("Network error: Cannot connect to host api.test:443")


async def settle(rounds: int = 10) -> None:
    """Let pending tasks run until they block on something real."""
    for _ in range(rounds):
        await asyncio.sleep(0)
