# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Callable

from gym_backend.client.storage import Session, TokenStorage
from gym_backend.shared.logging import logger


class SessionManager:
    """Explicit holder of the logged-in state.

    The session is either fully present (both tokens) or absent. Every
    mutation goes through the injected storage first and only then updates
    the in-memory view, so a failed write leaves the previous state intact.
    """

    def __init__(
        self,
        storage: TokenStorage,
        *,
        on_logout: Callable[[str], None] | None = None,
    ) -> None:
        self._storage = storage
        self._on_logout = on_logout
        self._session = storage.load()
        if self._session is None:
            # Drop any half-written leftovers.
            storage.clear()

    @property
    def session(self) -> Session | None:
        return self._session

    @property
    def is_authenticated(self) -> bool:
        return self._session is not None

    @property
    def access_token(self) -> str | None:
        return self._session.access_token if self._session else None

    @property
    def refresh_token(self) -> str | None:
        return self._session.refresh_token if self._session else None

    def start(self, access_token: str, refresh_token: str) -> Session:
        session = Session(access_token=access_token, refresh_token=refresh_token)
        self._storage.save(session)
        self._session = session
        logger.info("session: started")
        return session

    def rotate(self, access_token: str, refresh_token: str | None = None) -> Session:
        if self._session is None:
            raise RuntimeError("Cannot rotate tokens without an active session")
        session = self._session.rotated(access_token, refresh_token)
        self._storage.save(session)
        self._session = session
        logger.info(f"session: tokens refreshed rotated_refresh={refresh_token is not None}")
        return session

    def end(self, reason: str = "logout") -> None:
        self._storage.clear()
        was_active = self._session is not None
        self._session = None
        logger.info(f"session: ended reason={reason} was_active={was_active}")
        if self._on_logout is not None:
            self._on_logout(reason)


__all__ = ["SessionManager"]
