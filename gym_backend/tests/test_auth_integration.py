from __future__ import annotations

import threading
from collections.abc import Iterator

import pytest
from flask.testing import FlaskClient

from gym_backend.app import create_app
from gym_backend.infrastructure.db import SessionLocal
from gym_backend.infrastructure.db.models import Client, RefreshToken, Trainer


@pytest.fixture()
def client(reset_database: None) -> Iterator[FlaskClient]:
    app = create_app()
    with app.test_client() as test_client:
        yield test_client


def _register(client: FlaskClient, email: str = "alice@example.com", password: str = "secret123"):
    return client.post(
        "/api/auth/trainer/register",
        json={"name": "Alice", "email": email, "password": password},
    )


def _bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def test_register_login_me_flow(client: FlaskClient) -> None:
    register = _register(client)
    assert register.status_code == 201
    registered = register.get_json()
    assert registered["user"]["email"] == "alice@example.com"
    assert "password" not in str(registered["user"]).lower()

    login = client.post(
        "/api/auth/trainer/login",
        json={"email": "ALICE@example.com", "password": "secret123"},
    )
    assert login.status_code == 200
    body = login.get_json()
    assert set(body) == {"accessToken", "refreshToken", "tokenType", "expiresIn", "user"}
    assert body["user"]["id"] == registered["user"]["id"]

    me = client.get("/api/auth/me", headers=_bearer(body["accessToken"]))
    assert me.status_code == 200
    assert me.get_json()["user"]["role"] == "trainer"


def test_login_failures_are_identical(client: FlaskClient) -> None:
    _register(client)

    unknown = client.post(
        "/api/auth/trainer/login", json={"email": "bob@example.com", "password": "secret123"}
    )
    wrong = client.post(
        "/api/auth/trainer/login", json={"email": "alice@example.com", "password": "nope"}
    )

    assert unknown.status_code == wrong.status_code == 401
    assert unknown.get_json() == wrong.get_json()


def test_register_without_password_writes_nothing(client: FlaskClient) -> None:
    response = client.post(
        "/api/auth/trainer/register",
        json={"name": "Alice", "email": "alice@example.com", "password": ""},
    )

    assert response.status_code == 400
    assert response.get_json()["error"] == "missing_password"
    session = SessionLocal()
    try:
        assert session.query(Trainer).count() == 0
        assert session.query(RefreshToken).count() == 0
    finally:
        session.close()


def test_register_duplicate_email(client: FlaskClient) -> None:
    assert _register(client).status_code == 201

    again = _register(client, email="Alice@Example.com", password="other")

    assert again.status_code == 400
    assert again.get_json()["error"] == "duplicate_registration"


def test_register_rejects_invalid_email(client: FlaskClient) -> None:
    response = client.post(
        "/api/auth/trainer/register",
        json={"name": "Alice", "email": "not-an-email", "password": "secret123"},
    )

    assert response.status_code == 400
    assert response.get_json()["error"] == "validation_error"


def test_login_with_missing_fields_is_invalid_credentials(client: FlaskClient) -> None:
    _register(client)

    no_password = client.post("/api/auth/trainer/login", json={"email": "alice@example.com"})
    empty = client.post("/api/auth/client/login", json={})

    assert no_password.status_code == empty.status_code == 401
    assert no_password.get_json() == empty.get_json()
    assert empty.get_json()["error"] == "invalid_credentials"


def test_refresh_rotation_and_reuse(client: FlaskClient) -> None:
    tokens = _register(client).get_json()

    refreshed = client.post(
        "/api/auth/trainer/refresh-token", json={"refreshToken": tokens["refreshToken"]}
    )
    assert refreshed.status_code == 200
    new_tokens = refreshed.get_json()
    assert new_tokens["refreshToken"] != tokens["refreshToken"]
    me = client.get("/api/auth/me", headers=_bearer(new_tokens["accessToken"]))
    assert me.status_code == 200

    reused = client.post(
        "/api/auth/trainer/refresh-token", json={"refreshToken": tokens["refreshToken"]}
    )
    assert reused.status_code == 401
    assert reused.get_json()["error"] == "refresh_rejected"


def test_concurrent_refresh_with_one_token_succeeds_once(client: FlaskClient) -> None:
    refresh_token = _register(client).get_json()["refreshToken"]
    workers = 8
    barrier = threading.Barrier(workers)
    lock = threading.Lock()
    statuses: list[int] = []

    def _refresh() -> None:
        with client.application.test_client() as own_client:
            barrier.wait()
            response = own_client.post(
                "/api/auth/trainer/refresh-token", json={"refreshToken": refresh_token}
            )
        with lock:
            statuses.append(response.status_code)

    threads = [threading.Thread(target=_refresh) for _ in range(workers)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)

    assert sorted(statuses) == [200] + [401] * (workers - 1)
    session = SessionLocal()
    try:
        assert session.query(RefreshToken).filter(RefreshToken.consumed_at.is_(None)).count() == 1
    finally:
        session.close()


def test_refresh_on_wrong_role_endpoint(client: FlaskClient) -> None:
    tokens = _register(client).get_json()

    response = client.post(
        "/api/auth/client/refresh-token", json={"refreshToken": tokens["refreshToken"]}
    )

    assert response.status_code == 401
    assert response.get_json()["error"] == "refresh_rejected"


def test_logout_revokes_refresh_token(client: FlaskClient) -> None:
    tokens = _register(client).get_json()

    logout = client.post("/api/auth/logout", json={"refreshToken": tokens["refreshToken"]})
    assert logout.status_code == 204

    refresh = client.post(
        "/api/auth/trainer/refresh-token", json={"refreshToken": tokens["refreshToken"]}
    )
    assert refresh.status_code == 401


def test_trainer_creates_client_who_can_log_in(client: FlaskClient) -> None:
    trainer = _register(client).get_json()

    created = client.post(
        "/api/clients",
        json={"name": "bob", "password": "lift-heavy"},
        headers=_bearer(trainer["accessToken"]),
    )
    assert created.status_code == 201
    user = created.get_json()["user"]
    assert user["trainerId"] == trainer["user"]["id"]

    login = client.post("/api/auth/client/login", json={"name": "bob", "password": "lift-heavy"})
    assert login.status_code == 200
    client_tokens = login.get_json()
    assert client_tokens["user"]["role"] == "client"

    forbidden = client.post(
        "/api/clients",
        json={"name": "carol"},
        headers=_bearer(client_tokens["accessToken"]),
    )
    assert forbidden.status_code == 403
    assert forbidden.get_json()["error"] == "forbidden"


def test_change_client_password(client: FlaskClient) -> None:
    trainer = _register(client).get_json()
    other = _register(client, email="eve@example.com").get_json()
    created = client.post(
        "/api/clients", json={"name": "bob"}, headers=_bearer(trainer["accessToken"])
    ).get_json()
    client_id = created["user"]["id"]

    stranger = client.put(
        f"/api/clients/{client_id}/password",
        json={"password": "stolen"},
        headers=_bearer(other["accessToken"]),
    )
    assert stranger.status_code == 404

    changed = client.put(
        f"/api/clients/{client_id}/password",
        json={"password": "fresh-one"},
        headers=_bearer(trainer["accessToken"]),
    )
    assert changed.status_code == 200

    login = client.post("/api/auth/client/login", json={"name": "bob", "password": "fresh-one"})
    assert login.status_code == 200
    session = SessionLocal()
    try:
        stored = session.get(Client, client_id)
        assert stored is not None
        assert stored.password_hash != "fresh-one"
    finally:
        session.close()


def test_health_and_metrics(client: FlaskClient) -> None:
    _register(client)

    health = client.get("/api/health")
    assert health.status_code == 200
    assert health.get_json() == {"status": "ok", "database": True}
    assert health.headers["Cache-Control"] == "no-store"
    assert health.headers["X-Content-Type-Options"] == "nosniff"

    metrics = client.get("/api/metrics")
    assert metrics.status_code == 200
    assert b"gym_auth_events_total" in metrics.data


def test_request_id_is_echoed(client: FlaskClient) -> None:
    response = client.get("/api/health", headers={"X-Request-ID": "req-123"})

    assert response.headers["X-Request-ID"] == "req-123"


def test_second_login_keeps_first_access_token_valid(client: FlaskClient) -> None:
    first = _register(client).get_json()

    second = client.post(
        "/api/auth/trainer/login", json={"email": "alice@example.com", "password": "secret123"}
    )
    assert second.status_code == 200

    me = client.get("/api/auth/me", headers=_bearer(first["accessToken"]))
    assert me.status_code == 200


def test_duplicate_client_name(client: FlaskClient) -> None:
    trainer = _register(client).get_json()
    headers = _bearer(trainer["accessToken"])

    assert client.post("/api/clients", json={"name": "bob"}, headers=headers).status_code == 201
    again = client.post("/api/clients", json={"name": "bob"}, headers=headers)

    assert again.status_code == 400
    assert again.get_json()["error"] == "duplicate_registration"
