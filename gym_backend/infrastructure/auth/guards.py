# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Callable
from functools import wraps
from typing import Any, cast

from flask import current_app, g, request

from gym_backend.domain.auth.entities import Role, TokenClaims, TokenType
from gym_backend.domain.auth.exceptions import (
    ForbiddenRoleError,
    MissingTokenError,
    TokenRejectedError,
)
from gym_backend.domain.auth.repositories import TokenService
from gym_backend.shared.logging import logger, set_principal

TOKEN_SERVICE_EXTENSION = "gym_token_service"


def bearer_token() -> str:
    auth = request.headers.get("Authorization", "")
    scheme, _, value = auth.partition(" ")
    if scheme.lower() != "bearer":
        return ""
    return value.strip()


def _token_service() -> TokenService:
    return cast(TokenService, current_app.extensions[TOKEN_SERVICE_EXTENSION])


def current_claims() -> TokenClaims:
    """Claims of the access token that authenticated the current request."""
    return cast(TokenClaims, g.claims)


def auth_required(f: Callable[..., Any]) -> Callable[..., Any]:
    @wraps(f)
    def inner(*a, **kw):
        token = bearer_token()
        if not token:
            logger.warning(
                f"No Authorization header on {request.method} {request.path} "
                f"from {request.headers.get('X-Forwarded-For', request.remote_addr)}"
            )
            raise MissingTokenError()

        try:
            claims = _token_service().verify(token, TokenType.ACCESS)
        except TokenRejectedError as exc:
            logger.warning(
                f"Auth failed ({exc.reason.value}) on {request.method} {request.path}"
            )
            raise

        g.claims = claims
        g.principal_id = claims.principal_id
        set_principal(claims.principal_id, claims.role.value)
        logger.debug(
            f"Auth OK: principal={claims.principal_id} role={claims.role.value} "
            f"{request.method} {request.path}"
        )
        return f(*a, **kw)

    return inner


def role_required(*roles: Role) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    allowed = frozenset(roles)

    def decorator(f: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(f)
        def inner(*a, **kw):
            claims = current_claims()
            if claims.role not in allowed:
                logger.warning(
                    f"Forbidden: principal={claims.principal_id} role={claims.role.value} "
                    f"on {request.method} {request.path}"
                )
                raise ForbiddenRoleError()
            return f(*a, **kw)

        return auth_required(inner)

    return decorator
