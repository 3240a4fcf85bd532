# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from gym_backend.application.services.token_pairs import TokenPairIssuer
from gym_backend.domain.auth.entities import AuthResult, Role
from gym_backend.domain.auth.exceptions import InvalidCredentialsError
from gym_backend.domain.auth.repositories import PasswordHasher, PrincipalRepository
from gym_backend.shared.logging import logger


class LoginUseCase:
    def __init__(
        self,
        *,
        principals: PrincipalRepository,
        password_hasher: PasswordHasher,
        issuer: TokenPairIssuer,
    ) -> None:
        self._principals = principals
        self._password_hasher = password_hasher
        self._issuer = issuer

    def execute(self, role: Role, identifier: str, password: str) -> AuthResult:
        principal = self._principals.find_by_login(role, identifier) if identifier else None
        stored_hash = principal.password_hash if principal else None
        password_valid = self._password_hasher.verify(password or "", stored_hash)

        if principal is None or not password_valid:
            logger.info(
                f"auth.login: rejected role={role.value} "
                f"reason={'unknown_identifier' if principal is None else 'bad_password'}"
            )
            raise InvalidCredentialsError()

        tokens = self._issuer.issue(principal.id, principal.role)
        return AuthResult(principal=principal, tokens=tokens)
