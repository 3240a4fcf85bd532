# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from http import HTTPStatus
from typing import Any, TypeVar

from flask import Blueprint, Response, jsonify, request
from pydantic import BaseModel, ValidationError

from gym_backend.application.use_cases.auth.login import LoginUseCase
from gym_backend.application.use_cases.auth.logout import LogoutUseCase
from gym_backend.application.use_cases.auth.refresh_token import RefreshTokenUseCase
from gym_backend.application.use_cases.auth.register_trainer import RegisterTrainerUseCase
from gym_backend.domain.auth.entities import Role
from gym_backend.domain.auth.exceptions import (
    DuplicateRegistrationError,
    InvalidCredentialsError,
    MissingPasswordError,
    PrincipalNotFoundError,
    RefreshRejectedError,
)
from gym_backend.domain.auth.repositories import PrincipalRepository
from gym_backend.infrastructure.audit import AuditAction, audit_log
from gym_backend.infrastructure.auth import auth_required, current_claims
from gym_backend.infrastructure.observability import record_auth_event
from gym_backend.interfaces.http.dto.auth import (
    ClientLoginRequestDTO,
    RefreshRequestDTO,
    RegisterTrainerRequestDTO,
    TrainerLoginRequestDTO,
)
from gym_backend.shared.errors import AppError
from gym_backend.shared.errors.validation import raise_validation_error
from gym_backend.shared.logging import logger

DTO = TypeVar("DTO", bound=BaseModel)


def _get_client_ip() -> str | None:
    ip_address = request.headers.get("X-Forwarded-For", request.remote_addr)
    if ip_address and "," in ip_address:
        ip_address = ip_address.split(",")[0].strip()
    return ip_address


def _json_body() -> dict[str, Any]:
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


def _parse(
    dto_type: type[DTO],
    payload: dict[str, Any] | None = None,
    *,
    on_invalid: AppError | None = None,
    invalid_status: HTTPStatus = HTTPStatus.UNPROCESSABLE_ENTITY,
) -> DTO:
    try:
        return dto_type.model_validate(_json_body() if payload is None else payload)
    except ValidationError as exc:
        if on_invalid is not None:
            raise on_invalid from exc
        raise_validation_error(exc, status=invalid_status)


class AuthController:
    def __init__(
        self,
        *,
        login_use_case: LoginUseCase,
        register_use_case: RegisterTrainerUseCase,
        refresh_use_case: RefreshTokenUseCase,
        logout_use_case: LogoutUseCase,
        principals: PrincipalRepository,
    ) -> None:
        self._login_use_case = login_use_case
        self._register_use_case = register_use_case
        self._refresh_use_case = refresh_use_case
        self._logout_use_case = logout_use_case
        self._principals = principals

    def client_login(self) -> tuple[Response, int]:
        return self._login(Role.CLIENT, ClientLoginRequestDTO, "name")

    def trainer_login(self) -> tuple[Response, int]:
        return self._login(Role.TRAINER, TrainerLoginRequestDTO, "email")

    def _login(
        self,
        role: Role,
        dto_type: type[ClientLoginRequestDTO] | type[TrainerLoginRequestDTO],
        identifier_field: str,
    ) -> tuple[Response, int]:
        ip_address = _get_client_ip()
        identifier: str | None = None
        try:
            # Unusable payloads fail exactly like wrong credentials.
            dto = _parse(dto_type, on_invalid=InvalidCredentialsError())
            identifier = getattr(dto, identifier_field)
            result = self._login_use_case.execute(role, identifier, dto.password)
        except InvalidCredentialsError:
            record_auth_event("login_failed", role.value)
            audit_log(
                AuditAction.LOGIN_FAILED,
                ip_address=ip_address,
                details={"role": role.value, "identifier": identifier},
                success=False,
            )
            raise

        record_auth_event("login", role.value)
        audit_log(
            AuditAction.LOGIN_SUCCESS,
            principal_id=result.principal.id,
            ip_address=ip_address,
            details={"role": role.value},
        )
        logger.info(f"auth.login: ok principal={result.principal.id} role={role.value}")
        return jsonify(result.to_dict()), 200

    def trainer_register(self) -> tuple[Response, int]:
        payload = _json_body()
        ip_address = _get_client_ip()
        try:
            # A missing password outranks every other payload problem.
            if not payload.get("password"):
                raise MissingPasswordError()
            dto = _parse(
                RegisterTrainerRequestDTO, payload, invalid_status=HTTPStatus.BAD_REQUEST
            )
            result = self._register_use_case.execute(dto.name, dto.email, dto.password)
        except (MissingPasswordError, DuplicateRegistrationError) as exc:
            record_auth_event("register_failed", Role.TRAINER.value)
            audit_log(
                AuditAction.REGISTER_FAILED,
                ip_address=ip_address,
                details={"email": payload.get("email"), "error": exc.code},
                success=False,
            )
            raise

        record_auth_event("register", Role.TRAINER.value)
        audit_log(
            AuditAction.REGISTER,
            principal_id=result.principal.id,
            ip_address=ip_address,
            details={"email": dto.email},
        )
        logger.info(f"auth.register: ok principal={result.principal.id}")
        return jsonify(result.to_dict()), 201

    def client_refresh(self) -> tuple[Response, int]:
        return self._refresh(Role.CLIENT)

    def trainer_refresh(self) -> tuple[Response, int]:
        return self._refresh(Role.TRAINER)

    def _refresh(self, role: Role) -> tuple[Response, int]:
        ip_address = _get_client_ip()
        try:
            dto = _parse(
                RefreshRequestDTO,
                on_invalid=RefreshRejectedError(context={"reason": "malformed"}),
            )
            pair = self._refresh_use_case.execute(dto.refresh_token or "", role)
        except RefreshRejectedError as exc:
            record_auth_event("refresh_rejected", role.value)
            audit_log(
                AuditAction.TOKEN_REFRESH_REJECTED,
                ip_address=ip_address,
                details={"role": role.value, **dict(exc.context or {})},
                success=False,
            )
            raise

        record_auth_event("refresh", role.value)
        audit_log(AuditAction.TOKEN_REFRESHED, ip_address=ip_address, details={"role": role.value})
        return jsonify(pair.to_dict()), 200

    def logout(self) -> tuple[Response, int]:
        refresh_token = _json_body().get("refreshToken")
        revoked = self._logout_use_case.execute(
            refresh_token if isinstance(refresh_token, str) else None
        )
        audit_log(
            AuditAction.LOGOUT,
            ip_address=_get_client_ip(),
            details={"revoked": revoked},
        )
        logger.info(f"auth.logout: ok revoked={revoked}")
        return Response(status=204), 204

    @auth_required
    def me(self) -> tuple[Response, int]:
        claims = current_claims()
        principal = self._principals.find_by_id(claims.role, claims.principal_id)
        if principal is None:
            raise PrincipalNotFoundError()
        payload: dict[str, Any] = {"user": principal.public_view()}
        return jsonify(payload), 200

    def as_blueprint(self) -> Blueprint:
        bp = Blueprint("auth", __name__, url_prefix="/api/auth")
        bp.add_url_rule("/client/login", view_func=self.client_login, methods=["POST"])
        bp.add_url_rule("/trainer/login", view_func=self.trainer_login, methods=["POST"])
        bp.add_url_rule("/trainer/register", view_func=self.trainer_register, methods=["POST"])
        bp.add_url_rule("/client/refresh-token", view_func=self.client_refresh, methods=["POST"])
        bp.add_url_rule("/trainer/refresh-token", view_func=self.trainer_refresh, methods=["POST"])
        bp.add_url_rule("/logout", view_func=self.logout, methods=["POST"])
        bp.add_url_rule("/me", view_func=self.me, methods=["GET"])
        return bp
