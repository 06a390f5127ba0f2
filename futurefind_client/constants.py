"""
Configuration constants for the FutureFind client.

This module contains the defaults used throughout the client session layer.
Each constant can be overridden by setting an environment variable with the same name.
"""

import os


def _get_env_int(name: str, default: int) -> int:
    """Read an int override from the environment, keeping ``default`` on bad input."""
    value = os.getenv(name)
    if value is not None:
        try:
            return int(value)
        except ValueError:
            print(
                f"Warning: Invalid integer value for {name}='{value}', using default {default}"
            )
    return default


def _get_env_float(name: str, default: float) -> float:
    """Float counterpart of ``_get_env_int``."""
    value = os.getenv(name)
    if value is not None:
        try:
            return float(value)
        except ValueError:
            print(
                f"Warning: Invalid float value for {name}='{value}', using default {default}"
            )
    return default


# API location
DEFAULT_BASE_URL = os.getenv(
    "FUTUREFIND_BASE_URL", "https://futurefind-2g38.onrender.com/api/v1"
)
DEFAULT_USER_AGENT = os.getenv("FUTUREFIND_USER_AGENT", "FutureFindClient/1.0")

# Token refresh scheduling
AUTO_REFRESH_INTERVAL_SECONDS = _get_env_float(
    "AUTO_REFRESH_INTERVAL_SECONDS", 9 * 60
)  # 9 minutes so a 15 minute access token never lapses while active
REFRESH_TIMEOUT_SECONDS = _get_env_float(
    "REFRESH_TIMEOUT_SECONDS", 30.0
)  # Upper bound for one refresh episode; waiters are rejected after this
REQUEST_TIMEOUT_SECONDS = _get_env_float(
    "REQUEST_TIMEOUT_SECONDS", 30.0
)  # Total timeout applied by the HTTP transport per request

# Request pipeline
MAX_REQUEST_ATTEMPTS = 2  # Original attempt plus at most one retry after refresh
ERROR_TEXT_MAX_LENGTH = _get_env_int(
    "ERROR_TEXT_MAX_LENGTH", 200
)  # Raw error bodies at or above this length are replaced by a generic message

# Credential storage keys (shared with the mobile app's storage layout)
TOKEN_STORAGE_KEY = "userToken"
USER_DATA_STORAGE_KEY = "userData"

# Foreground state that triggers a refresh
APP_STATE_ACTIVE = "active"
