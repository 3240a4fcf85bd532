# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, scoped_session, sessionmaker
from sqlalchemy.pool import StaticPool

from gym_backend.shared.config import load_config
from gym_backend.shared.config.settings import DatabaseConfig
from gym_backend.shared.errors.base import AppError
from gym_backend.shared.logging import logger

_config = load_config()


class Base(DeclarativeBase):
    pass


def _engine_kwargs(database: DatabaseConfig) -> dict[str, Any]:
    if not database.url.startswith("sqlite"):
        return {
            "pool_size": database.pool_size,
            "max_overflow": database.max_overflow,
            "pool_timeout": database.pool_timeout,
        }

    kwargs: dict[str, Any] = {
        "connect_args": {
            "check_same_thread": False,
            "timeout": int(database.pool_timeout),
        }
    }
    if database.url in ("sqlite://", "sqlite:///:memory:"):
        # A private in-memory database exists only on its one connection.
        kwargs["poolclass"] = StaticPool
    else:
        kwargs.update(
            pool_size=database.pool_size,
            max_overflow=database.max_overflow,
            pool_timeout=database.pool_timeout,
        )
    return kwargs


ENGINE: Engine = create_engine(
    _config.database.url,
    echo=False,
    future=True,
    pool_pre_ping=True,
    **_engine_kwargs(_config.database),
)

if ENGINE.dialect.name == "sqlite":

    @event.listens_for(ENGINE, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, _record) -> None:
        # Client rows cascade with their trainer only when SQLite enforces FKs.
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


SessionLocal = scoped_session(
    sessionmaker(bind=ENGINE, autoflush=False, autocommit=False, expire_on_commit=False)
)


@contextmanager
def session_scope() -> Iterator[Session]:
    """One unit of work: commit on success, roll back on any error."""
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except AppError as exc:
        # Expected outcomes such as duplicate registration.
        logger.debug(f"db.session: rolled back on {exc.code}")
        session.rollback()
        raise
    except Exception:
        logger.exception("db.session: error, rolling back")
        session.rollback()
        raise
    finally:
        session.close()
        SessionLocal.remove()


def init_db() -> None:
    from gym_backend.infrastructure.db import models  # noqa: F401

    Base.metadata.create_all(bind=ENGINE)
    logger.info(f"db: schema ensured dialect={ENGINE.dialect.name}")
