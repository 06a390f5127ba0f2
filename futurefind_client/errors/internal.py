"""Centralized internal error hierarchy.

These exceptions provide semantic categories for the request pipeline and the
token refresh coordinator. Only raise these inside application/network
boundaries: never surface raw aiohttp / JSON errors to callers; wrap them instead.

Classes:
  InternalError        – Base for all internal errors.
  NetworkError         – Transport could not complete (no response received).
  HttpError            – Server answered with a non-success status.
  ParsingError         – Response parsing / schema issues.
  RefreshFailed        – The token refresh call failed or returned no token.
  RefreshCancelled     – A refresh waiter was dropped by logout.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any


class InternalError(Exception):
    """Base class for all internal application errors with metadata support.

    Attributes:
        data: Dictionary containing arbitrary structured context data.

    Args:
        message: Descriptive error message.
        data: Optional mapping of additional context data.
    """

    data: dict[str, object]

    def __init__(
        self, message: str, *, data: Mapping[str, object] | None = None
    ) -> None:
        super().__init__(message)
        # Copy into a plain dict to avoid unexpected mutations from caller.
        self.data = dict(data) if data else {}


class NetworkError(InternalError):
    """Exception raised for network or transport layer errors.

    Raised when no response at all was received (connection refused, DNS
    failure, timeout). Never retried through a token refresh.
    """


class HttpError(InternalError):
    """Exception raised when the server responds with a non-success status.

    Attributes:
        status: HTTP status code of the failing response.
        body: Parsed JSON error payload, if the body was JSON.

    Args:
        status: HTTP status code.
        message: Human readable message extracted from the response.
        body: Optional parsed JSON body.
    """

    def __init__(self, status: int, message: str | None = None, body: Any = None) -> None:
        super().__init__(message or f"API Error: {status}", data={"status": status})
        self.status = status
        self.body = body


class ParsingError(InternalError):
    """Exception raised for response parsing or schema validation errors."""


class RefreshFailed(InternalError):
    """Exception raised when the token refresh call fails.

    By the time this is raised the stored credential has already been
    cleared, so the session reports "not authenticated".
    """


class RefreshCancelled(InternalError):
    """Exception raised to waiters dropped by ``clear_pending_requests``."""

    def __init__(self, message: str = "Token refresh cancelled") -> None:
        super().__init__(message)


__all__ = [
    "InternalError",
    "NetworkError",
    "HttpError",
    "ParsingError",
    "RefreshFailed",
    "RefreshCancelled",
]
