# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import httpx

from gym_backend.client.exceptions import GymClientError, LoginFailedError
from gym_backend.client.session import SessionManager
from gym_backend.client.state_machine import CallEvent, CallState, is_terminal, transition
from gym_backend.client.storage import FileTokenStorage, TokenStorage
from gym_backend.domain.auth.entities import Role
from gym_backend.shared.config import AppConfig, load_config
from gym_backend.shared.logging import logger

# The one 401 the server marks as unrecoverable by refreshing.
MALFORMED_TOKEN_CODE = "token_malformed"


def _error_code(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        code = body.get("error")
        return code if isinstance(code, str) else None
    return None


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.reason_phrase or f"HTTP {response.status_code}"
    if isinstance(body, dict) and isinstance(body.get("message"), str):
        return body["message"]
    return response.reason_phrase or f"HTTP {response.status_code}"


def classify_response(response: httpx.Response) -> CallEvent:
    if response.status_code != 401:
        return CallEvent.RESPONDED
    if _error_code(response) == MALFORMED_TOKEN_CODE:
        return CallEvent.MALFORMED
    return CallEvent.EXPIRED


class GymApiClient:
    """HTTP client that keeps an authenticated session alive.

    Every authenticated call runs through the call state machine: it is sent
    with the current access token, refreshed at most once on a 401, and
    retried once with the new token. A failed refresh, a malformed token or
    a missing session ends the session and the call yields ``None``.
    """

    def __init__(
        self,
        session: SessionManager,
        *,
        role: Role = Role.CLIENT,
        base_url: str = "http://localhost:3001",
        request_timeout: float = 30.0,
        refresh_timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._session = session
        self._role = role
        self._refresh_timeout = refresh_timeout
        self._http = httpx.Client(
            base_url=base_url,
            timeout=request_timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    @classmethod
    def from_config(
        cls,
        config: AppConfig | None = None,
        *,
        role: Role = Role.CLIENT,
        storage: TokenStorage | None = None,
        on_logout: Callable[[str], None] | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> GymApiClient:
        config = config or load_config()
        storage = storage or FileTokenStorage(config.client.token_file)
        return cls(
            SessionManager(storage, on_logout=on_logout),
            role=role,
            base_url=config.client.base_url,
            request_timeout=config.client.request_timeout,
            refresh_timeout=config.client.refresh_timeout,
            transport=transport,
        )

    @property
    def session(self) -> SessionManager:
        return self._session

    @property
    def role(self) -> Role:
        return self._role

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> GymApiClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # Session lifecycle

    def login(self, identifier: str, password: str) -> dict[str, Any]:
        field = "email" if self._role is Role.TRAINER else "name"
        return self._authenticate(
            f"/api/auth/{self._role.value}/login",
            {field: identifier, "password": password},
        )

    def register_trainer(self, name: str, email: str, password: str) -> dict[str, Any]:
        if self._role is not Role.TRAINER:
            raise GymClientError("Only a trainer client can register", error_code="wrong_role")
        return self._authenticate(
            "/api/auth/trainer/register",
            {"name": name, "email": email, "password": password},
        )

    def _authenticate(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        try:
            response = self._http.post(path, json=payload)
        except httpx.HTTPError as exc:
            logger.warning(f"client.auth: transport error path={path} error={exc}")
            raise LoginFailedError(f"Authentication request failed: {exc}") from exc

        if response.is_error:
            logger.info(f"client.auth: rejected path={path} status={response.status_code}")
            raise LoginFailedError(
                _error_message(response),
                status=response.status_code,
                error_code=_error_code(response),
            )

        body = response.json()
        access_token = body.get("accessToken")
        refresh_token = body.get("refreshToken")
        if not access_token or not refresh_token:
            raise LoginFailedError("Server response lacks a token pair", status=response.status_code)

        self._session.start(access_token, refresh_token)
        user = body.get("user") or {}
        logger.info(f"client.auth: session started role={self._role.value} user={user.get('id')}")
        return user

    def refresh(self) -> bool:
        """Exchange the stored refresh token once; True when the session was renewed.

        Any failure ends the session with reason ``refresh_failed``.
        """
        if self._exchange_refresh_token():
            return True
        if self._session.is_authenticated:
            self._session.end("refresh_failed")
        return False

    def _exchange_refresh_token(self) -> bool:
        refresh_token = self._session.refresh_token
        if not refresh_token:
            return False
        try:
            response = self._http.post(
                f"/api/auth/{self._role.value}/refresh-token",
                json={"refreshToken": refresh_token},
                timeout=self._refresh_timeout,
            )
        except httpx.HTTPError as exc:
            logger.warning(f"client.refresh: transport error error={exc}")
            return False

        if response.status_code != 200:
            logger.info(f"client.refresh: rejected status={response.status_code}")
            return False

        try:
            body = response.json()
        except ValueError:
            logger.warning("client.refresh: unreadable response body")
            return False
        access_token = body.get("accessToken") if isinstance(body, dict) else None
        if not access_token:
            logger.warning("client.refresh: response without access token")
            return False

        self._session.rotate(access_token, body.get("refreshToken"))
        return True

    def logout(self) -> None:
        """Revoke the refresh token server side when possible, then always drop local state."""
        refresh_token = self._session.refresh_token
        if refresh_token:
            try:
                self._http.post(
                    "/api/auth/logout",
                    json={"refreshToken": refresh_token},
                    timeout=self._refresh_timeout,
                )
            except httpx.HTTPError as exc:
                logger.warning(f"client.logout: server revoke failed error={exc}")
        self._session.end("logout")

    # Authenticated calls

    def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response | None:
        state = CallState.START
        response: httpx.Response | None = None

        while not is_terminal(state):
            if state is CallState.START:
                event = CallEvent.HAS_TOKEN if self._session.is_authenticated else CallEvent.NO_TOKEN
            elif state is CallState.REFRESHING:
                event = CallEvent.REFRESHED if self.refresh() else CallEvent.REFRESH_FAILED
            else:
                response = self._send(method, url, **kwargs)
                event = classify_response(response)

            next_state = transition(state, event)
            logger.debug(
                f"client.call: {method} {url} {state.value} --{event.value}--> {next_state.value}"
            )
            state = next_state

        if state is CallState.LOGGED_OUT:
            if self._session.is_authenticated:
                self._session.end(f"call:{event.value}")
            return None
        return response

    def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        headers = dict(kwargs.pop("headers", None) or {})
        headers["Authorization"] = f"Bearer {self._session.access_token}"
        return self._http.request(method, url, headers=headers, **kwargs)

    def get(self, url: str, **kwargs: Any) -> httpx.Response | None:
        return self.request("GET", url, **kwargs)

    def post(self, url: str, **kwargs: Any) -> httpx.Response | None:
        return self.request("POST", url, **kwargs)

    def put(self, url: str, **kwargs: Any) -> httpx.Response | None:
        return self.request("PUT", url, **kwargs)

    def delete(self, url: str, **kwargs: Any) -> httpx.Response | None:
        return self.request("DELETE", url, **kwargs)


__all__ = ["GymApiClient", "MALFORMED_TOKEN_CODE", "classify_response"]
