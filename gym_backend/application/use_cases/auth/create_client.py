# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import uuid
from collections.abc import Callable
from datetime import UTC, datetime

from gym_backend.domain.auth.entities import Principal, Role
from gym_backend.domain.auth.repositories import PasswordHasher, PrincipalRepository


class CreateClientUseCase:
    """A trainer creates a client principal; the password is optional."""

    def __init__(
        self,
        *,
        principals: PrincipalRepository,
        password_hasher: PasswordHasher,
        id_factory: Callable[[], str] = lambda: f"client-{uuid.uuid4()}",
    ) -> None:
        self._principals = principals
        self._password_hasher = password_hasher
        self._id_factory = id_factory

    def execute(
        self,
        trainer_id: str,
        name: str,
        password: str | None = None,
        email: str | None = None,
    ) -> Principal:
        client = Principal(
            id=self._id_factory(),
            role=Role.CLIENT,
            name=name,
            email=email,
            password_hash=self._password_hasher.hash(password) if password else None,
            created_at=datetime.now(UTC),
            trainer_id=trainer_id,
        )
        return self._principals.add(client)
