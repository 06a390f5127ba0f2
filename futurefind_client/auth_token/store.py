"""Credential storage for the bearer access token."""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
from typing import Any, Protocol

from ..constants import TOKEN_STORAGE_KEY, USER_DATA_STORAGE_KEY


class CredentialStore(Protocol):
    """Durable key/value storage holding the current access token."""

    async def get(self) -> str | None: ...

    async def set(self, token: str) -> None: ...

    async def clear(self) -> None: ...


class MemoryCredentialStore:
    """In-process credential store (tests, short-lived scripts)."""

    def __init__(self, token: str | None = None) -> None:
        self._token = token
        self._user_data: dict[str, Any] | None = None

    async def get(self) -> str | None:
        return self._token

    async def set(self, token: str) -> None:
        self._token = token

    async def clear(self) -> None:
        self._token = None

    async def get_user_data(self) -> dict[str, Any] | None:
        return self._user_data

    async def set_user_data(self, user_data: dict[str, Any]) -> None:
        self._user_data = dict(user_data)

    async def clear_all(self) -> None:
        self._token = None
        self._user_data = None


class FileCredentialStore:
    """JSON file backed credential store.

    The file holds the ``userToken`` and ``userData`` keys. Blocking file I/O
    runs in the default executor and all operations are serialized by one
    asyncio lock; writes go through a temp file and ``os.replace`` so a crash
    never leaves a truncated file behind.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        if not isinstance(path, str | os.PathLike):
            raise TypeError("path must be str or os.PathLike")
        self.path = str(path)
        self._lock = asyncio.Lock()

    def _read_sync(self) -> dict[str, Any]:
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, json.JSONDecodeError) as e:
            logging.warning(f"⚠️ Unreadable credential file path={self.path}: {str(e)}")
            return {}
        return data if isinstance(data, dict) else {}

    def _write_sync(self, data: dict[str, Any]) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".credentials-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f)
                f.flush()
                os.fsync(f.fileno())
            os.chmod(tmp_path, 0o600)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    async def _read(self) -> dict[str, Any]:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._read_sync)

    async def _update(self, **changes: Any) -> None:
        async with self._lock:
            data = await self._read()
            for key, value in changes.items():
                if value is None:
                    data.pop(key, None)
                else:
                    data[key] = value
            loop = asyncio.get_running_loop()
            await loop.run_in_executor(None, self._write_sync, data)

    async def get(self) -> str | None:
        async with self._lock:
            data = await self._read()
        token = data.get(TOKEN_STORAGE_KEY)
        return token if isinstance(token, str) and token else None

    async def set(self, token: str) -> None:
        await self._update(**{TOKEN_STORAGE_KEY: token})
        logging.debug("🔐 Token stored successfully")

    async def clear(self) -> None:
        await self._update(**{TOKEN_STORAGE_KEY: None})

    async def get_user_data(self) -> dict[str, Any] | None:
        async with self._lock:
            data = await self._read()
        user_data = data.get(USER_DATA_STORAGE_KEY)
        return user_data if isinstance(user_data, dict) else None

    async def set_user_data(self, user_data: dict[str, Any]) -> None:
        await self._update(**{USER_DATA_STORAGE_KEY: dict(user_data)})

    async def clear_all(self) -> None:
        await self._update(**{TOKEN_STORAGE_KEY: None, USER_DATA_STORAGE_KEY: None})
