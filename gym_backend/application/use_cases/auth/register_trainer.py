# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import uuid
from collections.abc import Callable
from datetime import UTC, datetime

from gym_backend.application.services.token_pairs import TokenPairIssuer
from gym_backend.domain.auth.entities import AuthResult, Principal, Role
from gym_backend.domain.auth.exceptions import MissingPasswordError
from gym_backend.domain.auth.repositories import PasswordHasher, PrincipalRepository


class RegisterTrainerUseCase:
    def __init__(
        self,
        *,
        principals: PrincipalRepository,
        password_hasher: PasswordHasher,
        issuer: TokenPairIssuer,
        id_factory: Callable[[], str] = lambda: f"trainer-{uuid.uuid4()}",
    ) -> None:
        self._principals = principals
        self._password_hasher = password_hasher
        self._issuer = issuer
        self._id_factory = id_factory

    def execute(self, name: str, email: str, password: str | None) -> AuthResult:
        if not password:
            raise MissingPasswordError()

        trainer = Principal(
            id=self._id_factory(),
            role=Role.TRAINER,
            name=name,
            email=email,
            password_hash=self._password_hasher.hash(password),
            created_at=datetime.now(UTC),
        )
        # The store enforces e-mail uniqueness; add() raises DuplicateRegistrationError.
        persisted = self._principals.add(trainer)
        tokens = self._issuer.issue(persisted.id, persisted.role)
        return AuthResult(principal=persisted, tokens=tokens)
