# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Durable storage for the client's token pair."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

from gym_backend.shared.logging import logger
from gym_backend.utils.fs import write_json_atomic

ACCESS_TOKEN_KEY = "accessToken"
REFRESH_TOKEN_KEY = "refreshToken"


@dataclass(slots=True, frozen=True)
class Session:
    access_token: str
    refresh_token: str

    def rotated(self, access_token: str, refresh_token: str | None = None) -> Session:
        return Session(access_token=access_token, refresh_token=refresh_token or self.refresh_token)

    def to_dict(self) -> dict[str, str]:
        return {ACCESS_TOKEN_KEY: self.access_token, REFRESH_TOKEN_KEY: self.refresh_token}

    @classmethod
    def from_dict(cls, data: Any) -> Session | None:
        """Build a session only when both tokens are present and non-empty."""
        if not isinstance(data, dict):
            return None
        access = data.get(ACCESS_TOKEN_KEY)
        refresh = data.get(REFRESH_TOKEN_KEY)
        if not isinstance(access, str) or not isinstance(refresh, str) or not access or not refresh:
            return None
        return cls(access_token=access, refresh_token=refresh)


class TokenStorage(Protocol):
    def load(self) -> Session | None: ...

    def save(self, session: Session) -> None: ...

    def clear(self) -> None: ...


class MemoryTokenStorage:
    def __init__(self, session: Session | None = None) -> None:
        self._data: dict[str, str] = session.to_dict() if session else {}

    def load(self) -> Session | None:
        return Session.from_dict(self._data)

    def save(self, session: Session) -> None:
        self._data = session.to_dict()

    def clear(self) -> None:
        self._data = {}


class FileTokenStorage:
    """JSON file keyed ``accessToken`` / ``refreshToken``, replaced atomically."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        logger.debug(f"FileTokenStorage: initialized path={self._path}")

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Session | None:
        try:
            with open(self._path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return None
        except (OSError, json.JSONDecodeError):
            logger.warning(f"FileTokenStorage: unreadable token file path={self._path}")
            return None

        session = Session.from_dict(data)
        if session is None:
            logger.warning(f"FileTokenStorage: incomplete token file path={self._path}")
        return session

    def save(self, session: Session) -> None:
        # Both tokens land in a single os.replace, never one without the other.
        write_json_atomic(self._path, session.to_dict())

    def clear(self) -> None:
        self._path.unlink(missing_ok=True)
        logger.debug(f"FileTokenStorage: cleared path={self._path}")


__all__ = [
    "ACCESS_TOKEN_KEY",
    "FileTokenStorage",
    "MemoryTokenStorage",
    "REFRESH_TOKEN_KEY",
    "Session",
    "TokenStorage",
]
