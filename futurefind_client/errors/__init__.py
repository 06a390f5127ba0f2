"""Error hierarchy and handling helpers for the client session layer."""

from .internal import (
    HttpError,
    InternalError,
    NetworkError,
    ParsingError,
    RefreshCancelled,
    RefreshFailed,
)

__all__ = [
    "InternalError",
    "NetworkError",
    "HttpError",
    "ParsingError",
    "RefreshFailed",
    "RefreshCancelled",
]
