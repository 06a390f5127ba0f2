"""Settings loading from environment variables and an optional JSON file."""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from .model import ClientSettings

ENV_PREFIX = "FUTUREFIND_"
_ENV_FIELDS = {
    "base_url": "BASE_URL",
    "refresh_endpoint": "REFRESH_ENDPOINT",
    "auto_refresh_interval": "AUTO_REFRESH_INTERVAL",
    "refresh_timeout": "REFRESH_TIMEOUT",
    "request_timeout": "REQUEST_TIMEOUT",
    "credential_file": "CREDENTIAL_FILE",
    "user_agent": "USER_AGENT",
}


def load_settings_file(path: str) -> dict[str, Any]:
    """Load raw settings from a JSON file.

    Missing or malformed files are logged and yield an empty mapping.

    Args:
        path: Path to the JSON settings file.

    Returns:
        Dictionary of raw settings values.
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        logging.debug(f"📁 Settings file not found path={path}")
        return {}
    except (OSError, json.JSONDecodeError) as e:
        logging.warning(f"⚠️ Failed to read settings file path={path}: {str(e)}")
        return {}
    if not isinstance(data, dict):
        logging.warning(f"⚠️ Ignoring settings file with non-object root path={path}")
        return {}
    return data


def _env_overrides(environ: Mapping[str, str]) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for field_name, suffix in _ENV_FIELDS.items():
        value = environ.get(f"{ENV_PREFIX}{suffix}")
        if value is not None and value != "":
            overrides[field_name] = value
    return overrides


def load_settings(
    config_file: str | None = None, environ: Mapping[str, str] | None = None
) -> ClientSettings:
    """Build ClientSettings from a JSON file and FUTUREFIND_* environment variables.

    Environment variables take precedence over file values. When the merged
    values fail validation the defaults are used and the problem is logged.

    Args:
        config_file: Optional JSON file; defaults to $FUTUREFIND_CONF_FILE.
        environ: Environment mapping (os.environ when omitted).

    Returns:
        Validated ClientSettings instance.
    """
    env = os.environ if environ is None else environ
    path = config_file or env.get(f"{ENV_PREFIX}CONF_FILE")
    raw: dict[str, Any] = load_settings_file(path) if path else {}
    raw.update(_env_overrides(env))
    try:
        settings = ClientSettings.from_dict(raw)
    except ValidationError as e:
        logging.error(
            f"⚠️ Invalid client settings, falling back to defaults errors={e.error_count()}"
        )
        return ClientSettings()
    logging.debug(f"⚙️ Client settings loaded base_url={settings.base_url}")
    return settings
