# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from gym_backend.domain.auth.entities import Principal, Role
from gym_backend.domain.auth.exceptions import MissingPasswordError, PrincipalNotFoundError
from gym_backend.domain.auth.repositories import PasswordHasher, PrincipalRepository


class ChangeClientPasswordUseCase:
    def __init__(
        self,
        *,
        principals: PrincipalRepository,
        password_hasher: PasswordHasher,
    ) -> None:
        self._principals = principals
        self._password_hasher = password_hasher

    def execute(self, trainer_id: str, client_id: str, password: str | None) -> Principal:
        if not password:
            raise MissingPasswordError()

        client = self._principals.find_by_id(Role.CLIENT, client_id)
        # Another trainer's client is reported exactly like a missing one.
        if client is None or client.trainer_id != trainer_id:
            raise PrincipalNotFoundError(context={"id": client_id})

        updated = self._principals.update_password_hash(
            Role.CLIENT, client_id, self._password_hasher.hash(password)
        )
        if updated is None:
            raise PrincipalNotFoundError(context={"id": client_id})
        return updated
