from __future__ import annotations

import json
from collections.abc import Iterator
from datetime import UTC, datetime, timedelta
from pathlib import Path

import httpx
import pytest

from gym_backend.app import create_app
from gym_backend.application.services.token_service import JwtTokenService
from gym_backend.client import (
    FileTokenStorage,
    GymApiClient,
    LoginFailedError,
    MemoryTokenStorage,
    SessionManager,
)
from gym_backend.domain.auth.entities import Role
from gym_backend.shared.config import load_config


class RecordingTransport(httpx.BaseTransport):
    """Delegates to another transport and remembers every request path."""

    def __init__(self, inner: httpx.BaseTransport) -> None:
        self._inner = inner
        self.paths: list[str] = []

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        self.paths.append(request.url.path)
        return self._inner.handle_request(request)


@pytest.fixture()
def transport(reset_database: None) -> RecordingTransport:
    return RecordingTransport(httpx.WSGITransport(app=create_app()))


@pytest.fixture()
def logouts() -> list[str]:
    return []


@pytest.fixture()
def api(transport: RecordingTransport, logouts: list[str]) -> Iterator[GymApiClient]:
    session = SessionManager(MemoryTokenStorage(), on_logout=logouts.append)
    with GymApiClient(
        session,
        role=Role.TRAINER,
        base_url="http://testserver",
        transport=transport,
    ) as client:
        client.register_trainer("Alice", "alice@example.com", "secret123")
        transport.paths.clear()
        yield client


def _expired_access_token(principal_id: str, role: Role) -> str:
    config = load_config()
    past = JwtTokenService(
        secret=config.jwt_secret,
        issuer=config.auth.jwt_issuer,
        access_ttl=timedelta(minutes=1),
        clock=lambda: datetime.now(UTC) - timedelta(hours=1),
    )
    return past.issue_access(principal_id, role).token


def _principal_id(api: GymApiClient) -> str:
    response = api.get("/api/auth/me")
    assert response is not None
    return response.json()["user"]["id"]


def test_authenticated_call_with_valid_token(api: GymApiClient, transport: RecordingTransport) -> None:
    response = api.get("/api/auth/me")

    assert response is not None
    assert response.status_code == 200
    assert response.json()["user"]["email"] == "alice@example.com"
    assert transport.paths == ["/api/auth/me"]


def test_expired_token_is_refreshed_once_and_call_retried(
    api: GymApiClient, transport: RecordingTransport
) -> None:
    principal_id = _principal_id(api)
    old_refresh = api.session.refresh_token
    assert old_refresh is not None
    api.session.start(_expired_access_token(principal_id, Role.TRAINER), old_refresh)
    transport.paths.clear()

    response = api.get("/api/auth/me")

    assert response is not None
    assert response.status_code == 200
    assert transport.paths == [
        "/api/auth/me",
        "/api/auth/trainer/refresh-token",
        "/api/auth/me",
    ]
    assert api.session.refresh_token != old_refresh


def test_failed_refresh_logs_out(
    api: GymApiClient, transport: RecordingTransport, logouts: list[str]
) -> None:
    principal_id = _principal_id(api)
    api.session.start(_expired_access_token(principal_id, Role.TRAINER), "not-a-refresh-token")
    transport.paths.clear()

    response = api.get("/api/auth/me")

    assert response is None
    assert not api.session.is_authenticated
    assert logouts == ["refresh_failed"]
    assert transport.paths == ["/api/auth/me", "/api/auth/trainer/refresh-token"]


def test_direct_refresh_failure_ends_session(
    api: GymApiClient, transport: RecordingTransport, logouts: list[str]
) -> None:
    api.session.start(api.session.access_token or "", "not-a-refresh-token")
    transport.paths.clear()

    assert api.refresh() is False

    assert not api.session.is_authenticated
    assert logouts == ["refresh_failed"]
    assert transport.paths == ["/api/auth/trainer/refresh-token"]
    assert api.get("/api/auth/me") is None
    assert transport.paths == ["/api/auth/trainer/refresh-token"]


def test_malformed_token_logs_out_without_refresh(
    api: GymApiClient, transport: RecordingTransport, logouts: list[str]
) -> None:
    refresh_token = api.session.refresh_token
    assert refresh_token is not None
    api.session.start("garbage", refresh_token)

    response = api.get("/api/auth/me")

    assert response is None
    assert not api.session.is_authenticated
    assert logouts == ["call:malformed"]
    assert transport.paths == ["/api/auth/me"]


def test_no_session_sends_nothing(transport: RecordingTransport) -> None:
    api = GymApiClient(
        SessionManager(MemoryTokenStorage()),
        base_url="http://testserver",
        transport=transport,
    )

    assert api.get("/api/auth/me") is None
    assert transport.paths == []


def test_second_401_is_returned_without_another_refresh() -> None:
    calls: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url.path)
        if request.url.path.endswith("/refresh-token"):
            return httpx.Response(200, json={"accessToken": "a2", "refreshToken": "r2"})
        return httpx.Response(401, json={"error": "token_expired", "message": "expired"})

    storage = MemoryTokenStorage()
    session = SessionManager(storage)
    session.start("a1", "r1")
    api = GymApiClient(session, base_url="http://testserver", transport=httpx.MockTransport(handler))

    response = api.get("/api/things")

    assert response is not None
    assert response.status_code == 401
    assert calls == ["/api/things", "/api/auth/client/refresh-token", "/api/things"]
    assert session.access_token == "a2"


def test_refresh_network_error_logs_out() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/refresh-token"):
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(401, json={"error": "token_expired", "message": "expired"})

    session = SessionManager(MemoryTokenStorage())
    session.start("a1", "r1")
    api = GymApiClient(session, base_url="http://testserver", transport=httpx.MockTransport(handler))

    assert api.get("/api/things") is None
    assert not session.is_authenticated


def test_login_failure_raises_and_keeps_logged_out(transport: RecordingTransport) -> None:
    api = GymApiClient(
        SessionManager(MemoryTokenStorage()),
        role=Role.TRAINER,
        base_url="http://testserver",
        transport=transport,
    )

    with pytest.raises(LoginFailedError) as exc:
        api.login("nobody@example.com", "secret123")

    assert exc.value.status == 401
    assert exc.value.error_code == "invalid_credentials"
    assert not api.session.is_authenticated


def test_logout_revokes_server_side_and_clears(
    api: GymApiClient, transport: RecordingTransport, logouts: list[str]
) -> None:
    refresh_token = api.session.refresh_token

    api.logout()

    assert not api.session.is_authenticated
    assert logouts == ["logout"]
    assert transport.paths == ["/api/auth/logout"]

    replay = httpx.Client(base_url="http://testserver", transport=transport)
    rejected = replay.post("/api/auth/trainer/refresh-token", json={"refreshToken": refresh_token})
    assert rejected.status_code == 401


def test_client_role_login_and_protected_call(api: GymApiClient, transport: RecordingTransport) -> None:
    created = api.post("/api/clients", json={"name": "alex", "password": "correct"})
    assert created is not None and created.status_code == 201

    client_api = GymApiClient(
        SessionManager(MemoryTokenStorage()),
        role=Role.CLIENT,
        base_url="http://testserver",
        transport=transport,
    )
    user = client_api.login("alex", "correct")

    assert user["name"] == "alex"
    assert user["role"] == "client"
    assert "password" not in "".join(user).lower()
    me = client_api.get("/api/auth/me")
    assert me is not None
    assert me.status_code == 200
    assert me.json()["user"]["id"] == user["id"]


def test_rotated_refresh_token_forces_logout_and_later_calls_stay_local(
    api: GymApiClient, transport: RecordingTransport, logouts: list[str]
) -> None:
    principal_id = _principal_id(api)
    rotated_away = api.session.refresh_token
    assert api.refresh() is True
    assert rotated_away is not None
    api.session.start(_expired_access_token(principal_id, Role.TRAINER), rotated_away)
    transport.paths.clear()

    assert api.get("/api/auth/me") is None
    assert not api.session.is_authenticated
    seen = list(transport.paths)

    assert api.get("/api/auth/me") is None
    assert transport.paths == seen
    assert logouts == ["refresh_failed"]


def test_from_config_persists_session_to_file(tmp_path: Path, transport: RecordingTransport) -> None:
    path = tmp_path / "session.json"
    with GymApiClient.from_config(
        role=Role.TRAINER, storage=FileTokenStorage(path), transport=transport
    ) as api:
        api.register_trainer("Alice", "alice@example.com", "secret123")

    stored = json.loads(path.read_text(encoding="utf-8"))
    assert set(stored) == {"accessToken", "refreshToken"}

    with GymApiClient.from_config(
        role=Role.TRAINER, storage=FileTokenStorage(path), transport=transport
    ) as resumed:
        response = resumed.get("/api/auth/me")
    assert response is not None
    assert response.status_code == 200
