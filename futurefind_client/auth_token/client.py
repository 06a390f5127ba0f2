"""Token refresh HTTP client."""

from __future__ import annotations

import json
import logging
from typing import Any

from ..errors.internal import HttpError, ParsingError
from ..http_client import HttpTransport


class RefreshClient:
    """Performs the network call against the access token refresh endpoint.

    The endpoint identifies the session through the refresh cookie kept by the
    transport, so the request carries no body and no bearer token.
    """

    def __init__(self, transport: HttpTransport, refresh_url: str) -> None:
        self.transport = transport
        self.refresh_url = refresh_url
        self.calls = 0

    async def fetch_token(self) -> str:
        """Request a new access token.

        Returns:
            The new access token.

        Raises:
            NetworkError: If the refresh endpoint could not be reached.
            HttpError: If the endpoint answered with a non-2xx status.
            ParsingError: If the response carries no usable access token.
        """
        self.calls += 1
        logging.debug(f"🔄 Starting token refresh url={self.refresh_url}")
        response = await self.transport.send(self.refresh_url, "POST", {}, None)
        if not response.ok:
            raise HttpError(
                response.status,
                f"Token refresh failed with status: {response.status}",
            )
        return self._extract_token(response.raw_body)

    @staticmethod
    def _extract_token(raw_body: str) -> str:
        """Pull the access token from ``data.accessToken`` or ``accessToken``."""
        try:
            payload: Any = json.loads(raw_body) if raw_body and raw_body.strip() else {}
        except json.JSONDecodeError as e:
            raise ParsingError("Refresh response is not valid JSON") from e
        if not isinstance(payload, dict):
            raise ParsingError("Refresh response is not a JSON object")
        data = payload.get("data")
        token = data.get("accessToken") if isinstance(data, dict) else None
        token = token or payload.get("accessToken")
        if not isinstance(token, str) or not token.strip():
            raise ParsingError("No access token received from refresh response")
        return token
