from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field, field_validator

from ..constants import (
    AUTO_REFRESH_INTERVAL_SECONDS,
    DEFAULT_BASE_URL,
    DEFAULT_USER_AGENT,
    REFRESH_TIMEOUT_SECONDS,
    REQUEST_TIMEOUT_SECONDS,
)


class ClientSettings(BaseModel):
    """Settings for the FutureFind API client.

    Attributes:
        base_url: API root every endpoint path is appended to.
        refresh_endpoint: Path of the access token refresh endpoint.
        auto_refresh_interval: Seconds between proactive token refreshes.
        refresh_timeout: Upper bound in seconds for one refresh episode.
        request_timeout: Total timeout in seconds for each HTTP request.
        credential_file: JSON file for persisted credentials; in-memory when unset.
        user_agent: User-Agent header sent with every request.
    """

    base_url: str = DEFAULT_BASE_URL
    refresh_endpoint: str = "/users/refresh-token"
    auto_refresh_interval: float = Field(default=AUTO_REFRESH_INTERVAL_SECONDS, gt=0)
    refresh_timeout: float | None = Field(default=REFRESH_TIMEOUT_SECONDS, gt=0)
    request_timeout: float = Field(default=REQUEST_TIMEOUT_SECONDS, gt=0)
    credential_file: str | None = None
    user_agent: str = DEFAULT_USER_AGENT

    @field_validator("base_url", mode="before")
    @classmethod
    def validate_base_url(cls, v: Any) -> str:
        """Require an http(s) URL and strip trailing slashes."""
        if not isinstance(v, str) or not v.strip():
            raise ValueError("base_url must be a non-empty string")
        url = v.strip().rstrip("/")
        if not url.startswith(("http://", "https://")):
            raise ValueError("base_url must start with http:// or https://")
        return url

    @field_validator("refresh_endpoint", mode="before")
    @classmethod
    def validate_refresh_endpoint(cls, v: Any) -> str:
        if not isinstance(v, str) or not v.strip():
            raise ValueError("refresh_endpoint must be a non-empty string")
        path = v.strip()
        return path if path.startswith("/") else f"/{path}"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ClientSettings:
        """Create ClientSettings from a dictionary, ignoring unknown keys."""
        known = {k: v for k, v in data.items() if k in cls.model_fields}
        return cls(**known)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump()
