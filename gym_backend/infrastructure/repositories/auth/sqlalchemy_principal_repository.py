# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""SQLAlchemy-backed credential store for trainers and clients."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import AbstractContextManager, contextmanager
from datetime import UTC, datetime

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from gym_backend.domain.auth.entities import Principal, RefreshTokenRecord, Role
from gym_backend.domain.auth.exceptions import DuplicateRegistrationError, StoreUnavailableError
from gym_backend.domain.auth.repositories import PrincipalRepository, RefreshTokenRepository
from gym_backend.infrastructure.db.models import Client, RefreshToken, Trainer
from gym_backend.infrastructure.db.session import session_scope
from gym_backend.shared.logging import logger

SessionScope = Callable[[], AbstractContextManager[Session]]


def _aware(value: datetime | None) -> datetime | None:
    # SQLite hands back naive datetimes even for timezone-aware columns.
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


@contextmanager
def _store_scope(scope: SessionScope = session_scope) -> Iterator[Session]:
    try:
        with scope() as session:
            yield session
    except OperationalError as exc:
        logger.error(f"store: unavailable ({type(exc.orig).__name__ if exc.orig else 'unknown'})")
        raise StoreUnavailableError() from exc


def _trainer_to_domain(row: Trainer) -> Principal:
    return Principal(
        id=row.id,
        role=Role.TRAINER,
        name=row.name,
        email=row.email,
        password_hash=row.password_hash,
        created_at=_aware(row.created_at) or datetime.now(UTC),
    )


def _client_to_domain(row: Client) -> Principal:
    return Principal(
        id=row.id,
        role=Role.CLIENT,
        name=row.name,
        email=row.email,
        password_hash=row.password_hash,
        created_at=_aware(row.created_at) or datetime.now(UTC),
        trainer_id=row.trainer_id,
    )


class SqlAlchemyPrincipalRepository(PrincipalRepository):
    def __init__(self, scope: SessionScope = session_scope) -> None:
        self._scope = scope

    def find_by_login(self, role: Role, identifier: str) -> Principal | None:
        with _store_scope(self._scope) as session:
            if role is Role.TRAINER:
                trainer = session.scalars(select(Trainer).where(Trainer.email == identifier)).first()
                return _trainer_to_domain(trainer) if trainer else None
            client = session.scalars(select(Client).where(Client.name == identifier)).first()
            return _client_to_domain(client) if client else None

    def find_by_id(self, role: Role, principal_id: str) -> Principal | None:
        with _store_scope(self._scope) as session:
            if role is Role.TRAINER:
                trainer = session.get(Trainer, principal_id)
                return _trainer_to_domain(trainer) if trainer else None
            client = session.get(Client, principal_id)
            return _client_to_domain(client) if client else None

    def add(self, principal: Principal) -> Principal:
        with _store_scope(self._scope) as session:
            row: Trainer | Client
            if principal.role is Role.TRAINER:
                row = Trainer(
                    id=principal.id,
                    name=principal.name,
                    email=principal.email,
                    password_hash=principal.password_hash,
                    created_at=principal.created_at,
                )
            else:
                row = Client(
                    id=principal.id,
                    trainer_id=principal.trainer_id,
                    name=principal.name,
                    email=principal.email,
                    password_hash=principal.password_hash,
                    created_at=principal.created_at,
                )
            session.add(row)
            try:
                session.flush()
            except IntegrityError as exc:
                logger.info(f"principals.add: duplicate role={principal.role.value}")
                raise DuplicateRegistrationError() from exc
            logger.info(f"principals.add: ok id={principal.id} role={principal.role.value}")
            return principal

    def update_password_hash(
        self, role: Role, principal_id: str, password_hash: str
    ) -> Principal | None:
        model = Trainer if role is Role.TRAINER else Client
        with _store_scope(self._scope) as session:
            result = session.execute(
                update(model).where(model.id == principal_id).values(password_hash=password_hash)
            )
            if result.rowcount == 0:
                return None
            row = session.get(model, principal_id)
            session.refresh(row)
            logger.info(f"principals.password: replaced id={principal_id} role={role.value}")
            if isinstance(row, Trainer):
                return _trainer_to_domain(row)
            return _client_to_domain(row)


class SqlAlchemyRefreshTokenRepository(RefreshTokenRepository):
    def __init__(self, scope: SessionScope = session_scope) -> None:
        self._scope = scope

    def add(self, record: RefreshTokenRecord) -> None:
        with _store_scope(self._scope) as session:
            session.add(
                RefreshToken(
                    jti=record.jti,
                    principal_id=record.principal_id,
                    role=record.role.value,
                    expires_at=record.expires_at,
                    consumed_at=record.consumed_at,
                )
            )

    def get(self, jti: str) -> RefreshTokenRecord | None:
        with _store_scope(self._scope) as session:
            row = session.get(RefreshToken, jti)
            if row is None:
                return None
            return RefreshTokenRecord(
                jti=row.jti,
                principal_id=row.principal_id,
                role=Role(row.role),
                expires_at=_aware(row.expires_at) or datetime.now(UTC),
                consumed_at=_aware(row.consumed_at),
            )

    def consume(self, jti: str, now: datetime) -> bool:
        # Compare-and-swap: only the caller that flips consumed_at from NULL wins.
        with _store_scope(self._scope) as session:
            result = session.execute(
                update(RefreshToken)
                .where(RefreshToken.jti == jti, RefreshToken.consumed_at.is_(None))
                .values(consumed_at=now)
            )
            consumed = result.rowcount == 1
            logger.debug(f"refresh_tokens.consume: jti={jti[:8]}… won={consumed}")
            return consumed
