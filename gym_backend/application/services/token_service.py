# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""JWT issuing and verification for access and refresh tokens."""

from __future__ import annotations

import secrets
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt

from gym_backend.domain.auth.entities import IssuedToken, Role, TokenClaims, TokenType
from gym_backend.domain.auth.exceptions import TokenExpiredError, TokenMalformedError
from gym_backend.shared.config import AppConfig
from gym_backend.shared.logging import logger

_REQUIRED_CLAIMS = ["sub", "role", "type", "iat", "exp", "iss"]


def _utcnow() -> datetime:
    return datetime.now(UTC)


class JwtTokenService:
    """Mints and validates signed, time-bounded tokens.

    Access tokens are stateless: signature and ``exp`` alone decide their
    validity. Refresh tokens additionally carry a ``jti`` so the store can
    track single use.
    """

    def __init__(
        self,
        *,
        secret: str,
        algorithm: str = "HS256",
        issuer: str = "gym-backend",
        access_ttl: timedelta = timedelta(minutes=15),
        refresh_ttl: timedelta = timedelta(days=7),
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if not secret:
            raise ValueError("JWT secret must not be empty")
        self._secret = secret
        self._algorithm = algorithm
        self._issuer = issuer
        self._access_ttl = access_ttl
        self._refresh_ttl = refresh_ttl
        self._clock = clock

    @classmethod
    def from_config(cls, config: AppConfig) -> JwtTokenService:
        return cls(
            secret=config.jwt_secret,
            algorithm=config.auth.jwt_algorithm,
            issuer=config.auth.jwt_issuer,
            access_ttl=timedelta(minutes=config.auth.access_token_ttl_minutes),
            refresh_ttl=timedelta(days=config.auth.refresh_token_ttl_days),
        )

    @property
    def access_ttl_seconds(self) -> int:
        return int(self._access_ttl.total_seconds())

    def issue_access(self, principal_id: str, role: Role) -> IssuedToken:
        return self._issue(principal_id, role, TokenType.ACCESS, self._access_ttl)

    def issue_refresh(self, principal_id: str, role: Role) -> IssuedToken:
        return self._issue(
            principal_id, role, TokenType.REFRESH, self._refresh_ttl, jti=secrets.token_urlsafe(24)
        )

    def verify(self, token: str, expected_type: TokenType = TokenType.ACCESS) -> TokenClaims:
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                issuer=self._issuer,
                options={"require": _REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError as exc:
            logger.debug(f"tokens.verify: expired type={expected_type.value}")
            raise TokenExpiredError() from exc
        except jwt.InvalidTokenError as exc:
            logger.info(f"tokens.verify: rejected type={expected_type.value} reason={type(exc).__name__}")
            raise TokenMalformedError() from exc

        if payload.get("type") != expected_type.value:
            logger.info(
                f"tokens.verify: wrong type got={payload.get('type')} want={expected_type.value}"
            )
            raise TokenMalformedError()

        try:
            role = Role(payload["role"])
        except ValueError as exc:
            raise TokenMalformedError() from exc

        jti = payload.get("jti")
        if expected_type is TokenType.REFRESH and not jti:
            raise TokenMalformedError()

        return TokenClaims(
            principal_id=str(payload["sub"]),
            role=role,
            token_type=expected_type,
            issued_at=datetime.fromtimestamp(payload["iat"], UTC),
            expires_at=datetime.fromtimestamp(payload["exp"], UTC),
            jti=jti,
        )

    def _issue(
        self,
        principal_id: str,
        role: Role,
        token_type: TokenType,
        ttl: timedelta,
        *,
        jti: str | None = None,
    ) -> IssuedToken:
        # JWT timestamps have second resolution.
        issued_at = self._clock().replace(microsecond=0)
        expires_at = issued_at + ttl
        payload: dict[str, Any] = {
            "sub": principal_id,
            "role": role.value,
            "type": token_type.value,
            "iat": issued_at,
            "exp": expires_at,
            "iss": self._issuer,
        }
        if jti is not None:
            payload["jti"] = jti
        token = jwt.encode(payload, self._secret, algorithm=self._algorithm)
        claims = TokenClaims(
            principal_id=principal_id,
            role=role,
            token_type=token_type,
            issued_at=issued_at,
            expires_at=expires_at,
            jti=jti,
        )
        return IssuedToken(token=token, claims=claims)


__all__ = ["JwtTokenService"]
