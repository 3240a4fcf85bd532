from __future__ import annotations

from datetime import UTC, datetime
from typing import cast
from unittest.mock import MagicMock

import pytest
from flask import Flask

from gym_backend.application.services.token_service import JwtTokenService
from gym_backend.application.use_cases.auth.login import LoginUseCase
from gym_backend.domain.auth.entities import AuthResult, Principal, Role, TokenPair
from gym_backend.domain.auth.exceptions import InvalidCredentialsError
from gym_backend.infrastructure.auth import TOKEN_SERVICE_EXTENSION
from gym_backend.interfaces.http.controllers.auth_controller import AuthController
from gym_backend.shared.middleware.error_handler import configure_error_handling

SECRET = "unit-test-secret-unit-test-secret"


@pytest.fixture()
def flask_app() -> Flask:
    app = Flask(__name__)
    app.extensions[TOKEN_SERVICE_EXTENSION] = JwtTokenService(secret=SECRET)
    configure_error_handling(app)
    return app


def _controller(**overrides: object) -> AuthController:
    kwargs: dict[str, object] = {
        "login_use_case": MagicMock(),
        "register_use_case": MagicMock(),
        "refresh_use_case": MagicMock(),
        "logout_use_case": MagicMock(),
        "principals": MagicMock(),
    }
    kwargs.update(overrides)
    return AuthController(**kwargs)  # type: ignore[arg-type]


def test_client_login_returns_tokens_and_public_user(flask_app: Flask) -> None:
    login_called: dict[str, tuple[Role, str, str]] = {}

    class StubLogin:
        def execute(self, role: Role, identifier: str, password: str) -> AuthResult:
            login_called["args"] = (role, identifier, password)
            return AuthResult(
                principal=Principal(
                    id="client-1",
                    role=Role.CLIENT,
                    name=identifier,
                    password_hash="hash",
                    created_at=datetime.now(UTC),
                    trainer_id="trainer-1",
                ),
                tokens=TokenPair(access_token="access", refresh_token="refresh", expires_in=900),
            )

    controller = _controller(login_use_case=cast(LoginUseCase, StubLogin()))
    flask_app.register_blueprint(controller.as_blueprint())

    with flask_app.test_client() as client:
        response = client.post(
            "/api/auth/client/login", json={"name": " bob ", "password": "secret123"}
        )

    assert response.status_code == 200
    assert login_called["args"] == (Role.CLIENT, "bob", "secret123")
    payload = response.get_json()
    assert payload["accessToken"] == "access"
    assert payload["refreshToken"] == "refresh"
    assert payload["tokenType"] == "Bearer"
    assert payload["user"] == {
        "id": "client-1",
        "name": "bob",
        "role": "client",
        "trainerId": "trainer-1",
    }


def test_login_with_missing_password_is_invalid_credentials(flask_app: Flask) -> None:
    login = MagicMock()
    login.execute.side_effect = InvalidCredentialsError()
    flask_app.register_blueprint(_controller(login_use_case=login).as_blueprint())

    with flask_app.test_client() as client:
        response = client.post("/api/auth/trainer/login", json={"email": "a@b.co"})

    assert response.status_code == 401
    assert response.get_json()["error"] == "invalid_credentials"
    login.execute.assert_called_once_with(Role.TRAINER, "a@b.co", "")


def test_login_with_unusable_payload_skips_use_case(flask_app: Flask) -> None:
    login = MagicMock()
    flask_app.register_blueprint(_controller(login_use_case=login).as_blueprint())

    with flask_app.test_client() as client:
        response = client.post("/api/auth/client/login", json={"name": 42, "password": ["x"]})

    assert response.status_code == 401
    assert response.get_json()["error"] == "invalid_credentials"
    login.execute.assert_not_called()


def test_register_checks_password_before_other_fields(flask_app: Flask) -> None:
    register = MagicMock()
    flask_app.register_blueprint(_controller(register_use_case=register).as_blueprint())

    with flask_app.test_client() as client:
        response = client.post("/api/auth/trainer/register", json={"email": "broken"})

    assert response.status_code == 400
    assert response.get_json()["error"] == "missing_password"
    register.execute.assert_not_called()


def test_register_field_errors_are_400(flask_app: Flask) -> None:
    register = MagicMock()
    flask_app.register_blueprint(_controller(register_use_case=register).as_blueprint())

    with flask_app.test_client() as client:
        response = client.post(
            "/api/auth/trainer/register",
            json={"name": "Alice", "email": "broken", "password": "secret123"},
        )

    assert response.status_code == 400
    payload = response.get_json()
    assert payload["error"] == "validation_error"
    register.execute.assert_not_called()


def test_refresh_with_unusable_payload_is_rejected(flask_app: Flask) -> None:
    refresh = MagicMock()
    flask_app.register_blueprint(_controller(refresh_use_case=refresh).as_blueprint())

    with flask_app.test_client() as client:
        response = client.post("/api/auth/client/refresh-token", json={"refreshToken": 7})

    assert response.status_code == 401
    assert response.get_json()["error"] == "refresh_rejected"
    refresh.execute.assert_not_called()


def test_login_failure_is_401_with_challenge(flask_app: Flask) -> None:
    login = MagicMock()
    login.execute.side_effect = InvalidCredentialsError()
    flask_app.register_blueprint(_controller(login_use_case=login).as_blueprint())

    with flask_app.test_client() as client:
        response = client.post(
            "/api/auth/trainer/login", json={"email": "a@b.co", "password": "x"}
        )

    assert response.status_code == 401
    assert response.get_json() == {"error": "invalid_credentials", "message": "Invalid credentials"}
    assert response.headers["WWW-Authenticate"] == 'Bearer error="invalid_credentials"'


def test_me_without_token_is_401(flask_app: Flask) -> None:
    flask_app.register_blueprint(_controller().as_blueprint())

    with flask_app.test_client() as client:
        response = client.get("/api/auth/me")

    assert response.status_code == 401
    assert response.get_json()["error"] == "missing_token"


def test_me_with_garbage_token_is_malformed(flask_app: Flask) -> None:
    flask_app.register_blueprint(_controller().as_blueprint())

    with flask_app.test_client() as client:
        response = client.get("/api/auth/me", headers={"Authorization": "Bearer nope"})

    assert response.status_code == 401
    assert response.get_json()["error"] == "token_malformed"


def test_logout_always_returns_204(flask_app: Flask) -> None:
    logout = MagicMock()
    logout.execute.return_value = False
    flask_app.register_blueprint(_controller(logout_use_case=logout).as_blueprint())

    with flask_app.test_client() as client:
        response = client.post("/api/auth/logout", json={"refreshToken": "whatever"})

    assert response.status_code == 204
    logout.execute.assert_called_once_with("whatever")


def test_logout_without_body_still_returns_204(flask_app: Flask) -> None:
    logout = MagicMock()
    logout.execute.return_value = False
    flask_app.register_blueprint(_controller(logout_use_case=logout).as_blueprint())

    with flask_app.test_client() as client:
        response = client.post("/api/auth/logout", data="not json")

    assert response.status_code == 204
    logout.execute.assert_called_once_with(None)
