# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from flask import Blueprint, Response, jsonify, request
from pydantic import ValidationError

from gym_backend.application.use_cases.auth.change_password import ChangeClientPasswordUseCase
from gym_backend.application.use_cases.auth.create_client import CreateClientUseCase
from gym_backend.domain.auth.entities import Role
from gym_backend.infrastructure.audit import AuditAction, audit_log
from gym_backend.infrastructure.auth import current_claims, role_required
from gym_backend.interfaces.http.dto.auth import ChangePasswordRequestDTO, CreateClientRequestDTO
from gym_backend.shared.errors.validation import raise_validation_error
from gym_backend.shared.logging import logger


class ClientsController:
    def __init__(
        self,
        *,
        create_client_use_case: CreateClientUseCase,
        change_password_use_case: ChangeClientPasswordUseCase,
    ) -> None:
        self._create_client_use_case = create_client_use_case
        self._change_password_use_case = change_password_use_case

    @role_required(Role.TRAINER)
    def create_client(self) -> tuple[Response, int]:
        try:
            dto = CreateClientRequestDTO.model_validate(request.get_json(silent=True) or {})
        except ValidationError as exc:
            raise_validation_error(exc)

        trainer_id = current_claims().principal_id
        client = self._create_client_use_case.execute(
            trainer_id, dto.name, password=dto.password, email=dto.email
        )
        audit_log(
            AuditAction.CLIENT_CREATED,
            principal_id=trainer_id,
            ip_address=request.remote_addr,
            details={"client_id": client.id, "with_password": bool(dto.password)},
        )
        logger.info(f"clients.create: ok client={client.id} trainer={trainer_id}")
        return jsonify({"user": client.public_view()}), 201

    @role_required(Role.TRAINER)
    def change_password(self, client_id: str) -> tuple[Response, int]:
        try:
            dto = ChangePasswordRequestDTO.model_validate(request.get_json(silent=True) or {})
        except ValidationError as exc:
            raise_validation_error(exc)

        trainer_id = current_claims().principal_id
        client = self._change_password_use_case.execute(trainer_id, client_id, dto.password)
        audit_log(
            AuditAction.PASSWORD_CHANGED,
            principal_id=trainer_id,
            ip_address=request.remote_addr,
            details={"client_id": client.id},
        )
        return jsonify({"user": client.public_view()}), 200

    def as_blueprint(self) -> Blueprint:
        bp = Blueprint("clients", __name__, url_prefix="/api/clients")
        bp.add_url_rule("", view_func=self.create_client, methods=["POST"])
        bp.add_url_rule(
            "/<client_id>/password", view_func=self.change_password, methods=["PUT"]
        )
        return bp
