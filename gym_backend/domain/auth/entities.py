# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any


class Role(str, Enum):
    TRAINER = "trainer"
    CLIENT = "client"


class TokenType(str, Enum):
    ACCESS = "access"
    REFRESH = "refresh"


@dataclass(slots=True, frozen=True)
class Principal:
    """A trainer or client identity together with its stored credential."""

    id: str
    role: Role
    name: str
    password_hash: str | None
    created_at: datetime
    email: str | None = None
    trainer_id: str | None = None

    def public_view(self) -> dict[str, Any]:
        """Outward representation; the password hash is never part of it."""
        payload: dict[str, Any] = {"id": self.id, "name": self.name, "role": self.role.value}
        if self.email is not None:
            payload["email"] = self.email
        if self.trainer_id is not None:
            payload["trainerId"] = self.trainer_id
        return payload


@dataclass(slots=True, frozen=True)
class TokenClaims:
    principal_id: str
    role: Role
    token_type: TokenType
    issued_at: datetime
    expires_at: datetime
    jti: str | None = None


@dataclass(slots=True, frozen=True)
class IssuedToken:
    token: str
    claims: TokenClaims


@dataclass(slots=True, frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str | None
    expires_in: int

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "accessToken": self.access_token,
            "tokenType": "Bearer",
            "expiresIn": self.expires_in,
        }
        if self.refresh_token is not None:
            payload["refreshToken"] = self.refresh_token
        return payload


@dataclass(slots=True, frozen=True)
class RefreshTokenRecord:
    jti: str
    principal_id: str
    role: Role
    expires_at: datetime
    consumed_at: datetime | None = None


@dataclass(slots=True, frozen=True)
class AuthResult:
    principal: Principal
    tokens: TokenPair

    def to_dict(self) -> dict[str, Any]:
        payload = self.tokens.to_dict()
        payload["user"] = self.principal.public_view()
        return payload
