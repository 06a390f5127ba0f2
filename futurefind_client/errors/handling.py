from __future__ import annotations

import logging

from ..logging_config import log_structured_error
from .internal import (
    HttpError,
    InternalError,
    NetworkError,
    ParsingError,
    RefreshCancelled,
    RefreshFailed,
)


def categorize_error(error: BaseException) -> str:
    """Map an exception onto the error category used in structured logs."""
    if isinstance(error, NetworkError | OSError | ConnectionError):
        return "network"
    if isinstance(error, RefreshCancelled):
        return "cancelled"
    if isinstance(error, RefreshFailed):
        return "auth"
    if isinstance(error, HttpError):
        return "auth" if error.status in (401, 403) else "http"
    if isinstance(error, ParsingError):
        return "parsing"
    if isinstance(error, InternalError):
        return "internal"
    return "unknown"


def log_error(
    message: str,
    error: BaseException,
    context: dict | None = None,
    level: int = logging.ERROR,
) -> None:
    """Logs an error message with the associated exception details.

    Uses structured logging so repeated failures are aggregated by category.

    Args:
        message: A descriptive message about the error context.
        error: The exception instance to be logged.
        context: Optional additional context data for debugging.
        level: Logging level for the record.
    """
    log_structured_error(
        error_type=categorize_error(error),
        message=f"{message}: {str(error)}",
        exception=error,
        context=context,
        level=level,
    )
