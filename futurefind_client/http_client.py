"""
HTTP transport and session management for the FutureFind client
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Protocol

import aiohttp

from .constants import DEFAULT_USER_AGENT, REQUEST_TIMEOUT_SECONDS
from .errors.internal import NetworkError

APPLICATION_JSON = "application/json"


@dataclass
class TransportResponse:
    """Raw outcome of one HTTP exchange.

    Attributes:
        status: HTTP status code.
        raw_body: Response body decoded as text (never parsed here).
        headers: Response headers.
    """

    status: int
    raw_body: str
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class HttpTransport(Protocol):
    async def send(
        self,
        url: str,
        method: str,
        headers: dict[str, str],
        body: Any = None,
    ) -> TransportResponse: ...

    async def close(self) -> None: ...


@dataclass
class SessionConfig:
    """Configuration for HTTP sessions"""

    timeout_total: float = REQUEST_TIMEOUT_SECONDS
    max_connections: int = 100
    max_connections_per_host: int = 10
    keepalive_timeout: int = 30
    headers: dict[str, str] | None = None


class AiohttpTransport:
    """HTTP transport on a lazily created, pooled aiohttp session.

    The session's cookie jar keeps the server's refresh cookie, so the token
    refresh endpoint needs no request body.
    """

    def __init__(
        self,
        config: SessionConfig | None = None,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        default_headers = {
            "Accept": APPLICATION_JSON,
            "User-Agent": DEFAULT_USER_AGENT,
        }
        self.config = config or SessionConfig()
        if self.config.headers:
            default_headers.update(self.config.headers)
        self.config.headers = default_headers
        self._session = session
        self._owns_session = session is None
        self._lock = asyncio.Lock()
        self._request_count = 0

    async def get_session(self) -> aiohttp.ClientSession:
        """Get or create the HTTP session with connection pooling"""
        async with self._lock:
            if self._session is None or self._session.closed:
                connector = aiohttp.TCPConnector(
                    limit=self.config.max_connections,
                    limit_per_host=self.config.max_connections_per_host,
                    keepalive_timeout=self.config.keepalive_timeout,
                )
                self._session = aiohttp.ClientSession(
                    connector=connector,
                    timeout=aiohttp.ClientTimeout(total=self.config.timeout_total),
                    headers=self.config.headers or {},
                )
                self._owns_session = True
                logging.debug("🔗 Created new HTTP session with connection pooling")
            return self._session

    async def send(
        self,
        url: str,
        method: str,
        headers: dict[str, str],
        body: Any = None,
    ) -> TransportResponse:
        """Send one request and return its status and raw text body.

        Raises:
            NetworkError: If no response could be obtained or read.
        """
        session = await self.get_session()
        self._request_count += 1
        start_time = time.time()
        try:
            async with session.request(method, url, headers=headers, data=body) as resp:
                raw = await resp.read()
                elapsed = time.time() - start_time
                logging.debug(f"🌐 HTTP {method} {url} -> {resp.status} ({elapsed:.3f}s)")
                return TransportResponse(
                    status=resp.status,
                    raw_body=raw.decode("utf-8", errors="replace"),
                    headers=dict(resp.headers),
                )
        except TimeoutError as e:
            elapsed = time.time() - start_time
            logging.warning(f"⏱️ HTTP {method} {url} timed out after {elapsed:.3f}s")
            raise NetworkError(f"Request to {url} timed out", data={"url": url}) from e
        except aiohttp.ClientError as e:
            elapsed = time.time() - start_time
            logging.warning(f"💥 HTTP {method} {url} failed: {e} ({elapsed:.3f}s)")
            raise NetworkError(f"Network error: {e}", data={"url": url}) from e

    def get_stats(self) -> dict[str, Any]:
        return {
            "session_active": self._session is not None and not self._session.closed,
            "request_count": self._request_count,
        }

    async def close(self) -> None:
        """Close the session if this transport created it."""
        if self._session and not self._session.closed and self._owns_session:
            await self._session.close()
            logging.debug("Closed HTTP session")
        self._session = None
