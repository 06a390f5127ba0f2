"""Authenticated request pipeline with one transparent retry after refresh."""

from __future__ import annotations

import asyncio
import io
import json
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import aiohttp
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt

from ..constants import ERROR_TEXT_MAX_LENGTH, MAX_REQUEST_ATTEMPTS
from ..errors.handling import log_error
from ..errors.internal import HttpError, RefreshCancelled, RefreshFailed
from ..http_client import APPLICATION_JSON, HttpTransport, TransportResponse
from ..utils.helpers import truncate_text

if TYPE_CHECKING:
    from ..auth_token.coordinator import RefreshCoordinator
    from ..auth_token.store import CredentialStore

_JSON_BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})
INVALID_CREDENTIALS_MESSAGE = "Invalid credentials. Please check your email and password."


class TokenRefreshed(Exception):
    """Raised after a successful refresh to trigger the single retry."""


@dataclass
class RequestAttempt:
    """Per-call record carried across the (at most two) attempts.

    Attributes:
        endpoint: Endpoint path or absolute URL as given by the caller.
        url: Resolved absolute URL.
        method: Upper-case HTTP method.
        headers: Caller supplied headers.
        body: Encoded request body of the current attempt.
        body_factory: Builds a fresh body for every attempt (multipart uploads).
        token: Bearer token used by the current attempt (None when anonymous).
        attempt: 1 for the original request, 2 for the retry after refresh.
    """

    endpoint: str
    url: str
    method: str
    headers: dict[str, str] = field(default_factory=dict)
    body: Any = None
    body_factory: Callable[[], Any] | None = None
    token: str | None = None
    attempt: int = 1


def is_raw_payload(body: Any) -> bool:
    """True for multipart or binary bodies that carry their own content type."""
    return isinstance(
        body, aiohttp.FormData | bytes | bytearray | memoryview | io.IOBase
    )


class AuthenticatedRequestClient:
    """Issues API requests with the stored bearer token.

    A 401 on a request that carried a token triggers one coordinated refresh
    and exactly one retry with the new token; the retry's outcome is final.
    Transport failures are never retried here.

    Args:
        transport: HTTP transport used for every request.
        store: Credential store the token is read from.
        coordinator: Refresh coordinator shared by all callers.
        base_url: API root prepended to relative endpoints.
    """

    def __init__(
        self,
        transport: HttpTransport,
        store: CredentialStore,
        coordinator: RefreshCoordinator,
        base_url: str,
    ) -> None:
        self.transport = transport
        self.store = store
        self.coordinator = coordinator
        self.base_url = base_url.rstrip("/")

    async def call(
        self,
        endpoint: str,
        *,
        method: str = "GET",
        headers: dict[str, str] | None = None,
        body: Any = None,
        json_body: Any = None,
    ) -> Any:
        """Perform one logical request.

        Args:
            endpoint: Path relative to the base URL, or an absolute URL.
            method: HTTP method.
            headers: Extra headers merged before the computed ones.
            body: Raw body (str, bytes, a file object read up front), a dict/list
                to serialize as JSON, or a zero-argument callable returning the
                body (e.g. a fresh aiohttp.FormData) that is invoked per attempt.
            json_body: Value serialized as JSON; takes precedence over body.

        Returns:
            Parsed JSON body, or an empty dict when the body is empty or not JSON.

        Raises:
            ValueError: If the endpoint is empty or not a string.
            TypeError: If body is an aiohttp.FormData instance; pass a factory
                instead so the retry can rebuild it.
            NetworkError: If no response was received.
            HttpError: On any non-success status that was not recovered.
        """
        if not endpoint or not isinstance(endpoint, str):
            raise ValueError("Invalid endpoint provided")
        request = RequestAttempt(
            endpoint=endpoint,
            url=self._resolve_url(endpoint),
            method=method.upper(),
            headers=dict(headers or {}),
            body=await self._encode_body(body, json_body),
            body_factory=body if json_body is None and callable(body) else None,
            token=await self.store.get(),
        )

        def before_attempt(retry_state) -> None:
            request.attempt = retry_state.attempt_number
            if request.attempt > 1:
                logging.debug(
                    f"🔁 Retrying request with refreshed token endpoint={endpoint} attempt={request.attempt}"
                )

        retrying = AsyncRetrying(
            stop=stop_after_attempt(MAX_REQUEST_ATTEMPTS),
            retry=retry_if_exception_type(TokenRefreshed),
            before=before_attempt,
            reraise=True,
        )
        return await retrying(self._send_once, request)

    async def _send_once(self, request: RequestAttempt) -> Any:
        if request.body_factory is not None:
            request.body = request.body_factory()
        response = await self.transport.send(
            request.url, request.method, self.build_headers(request), request.body
        )
        if response.ok:
            return self.parse_body(response.raw_body)

        if response.status == 401 and request.token and request.attempt == 1:
            logging.info(f"🔑 Token expired, attempting refresh endpoint={request.endpoint}")
            try:
                request.token = await self.coordinator.refresh()
            except (RefreshFailed, RefreshCancelled) as e:
                log_error(
                    "Token refresh failed during request",
                    e,
                    context={"endpoint": request.endpoint},
                    level=logging.WARNING,
                )
                raise self.build_http_error(response) from e
            raise TokenRefreshed()

        raise self.build_http_error(response)

    # ------------------------------------------------------------------ #
    def _resolve_url(self, endpoint: str) -> str:
        if endpoint.startswith(("http://", "https://")):
            return endpoint
        path = endpoint if endpoint.startswith("/") else f"/{endpoint}"
        return f"{self.base_url}{path}"

    @staticmethod
    async def _encode_body(body: Any, json_body: Any) -> Any:
        """Turn the caller's body into one that can be sent on every attempt."""
        if json_body is not None:
            return json.dumps(json_body)
        if isinstance(body, dict | list):
            return json.dumps(body)
        if isinstance(body, aiohttp.FormData):
            # A FormData is consumed by the first send and cannot be replayed
            raise TypeError("Pass a callable returning aiohttp.FormData for multipart bodies")
        if isinstance(body, io.IOBase):
            loop = asyncio.get_running_loop()
            return await loop.run_in_executor(None, body.read)
        if callable(body):
            return None
        return body

    @staticmethod
    def build_headers(request: RequestAttempt) -> dict[str, str]:
        """Merge caller headers, JSON content type and the bearer token."""
        headers = dict(request.headers)
        if request.method in _JSON_BODY_METHODS and not is_raw_payload(request.body):
            headers["Content-Type"] = APPLICATION_JSON
        if request.token:
            headers["Authorization"] = f"Bearer {request.token}"
        return headers

    @staticmethod
    def parse_body(raw_body: str) -> Any:
        """Parse a successful body; empty or non-JSON bodies yield ``{}``."""
        if not raw_body or not raw_body.strip():
            return {}
        try:
            return json.loads(raw_body)
        except json.JSONDecodeError as e:
            logging.debug(f"⚠️ Non-JSON success response ignored: {str(e)}")
            return {}

    @staticmethod
    def build_http_error(response: TransportResponse) -> HttpError:
        """Build an HttpError with the most useful message the body offers."""
        status = response.status
        raw = response.raw_body or ""
        if not raw.strip():
            return HttpError(status)
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            if status == 401:
                return HttpError(status, INVALID_CREDENTIALS_MESSAGE)
            return HttpError(status, truncate_text(raw, ERROR_TEXT_MAX_LENGTH))
        message = data.get("message") if isinstance(data, dict) else None
        if not isinstance(message, str) or not message:
            message = None
        return HttpError(status, message, body=data)
