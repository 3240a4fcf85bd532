# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from .entities import IssuedToken, Principal, RefreshTokenRecord, Role, TokenClaims, TokenType


class PrincipalRepository(Protocol):
    def find_by_login(self, role: Role, identifier: str) -> Principal | None: ...
    def find_by_id(self, role: Role, principal_id: str) -> Principal | None: ...
    def add(self, principal: Principal) -> Principal: ...
    def update_password_hash(
        self, role: Role, principal_id: str, password_hash: str
    ) -> Principal | None: ...


class RefreshTokenRepository(Protocol):
    def add(self, record: RefreshTokenRecord) -> None: ...
    def get(self, jti: str) -> RefreshTokenRecord | None: ...
    def consume(self, jti: str, now: datetime) -> bool: ...


class PasswordHasher(Protocol):
    def hash(self, password: str) -> str: ...
    def verify(self, password: str, hashed: str | None) -> bool: ...


class TokenService(Protocol):
    @property
    def access_ttl_seconds(self) -> int: ...
    def issue_access(self, principal_id: str, role: Role) -> IssuedToken: ...
    def issue_refresh(self, principal_id: str, role: Role) -> IssuedToken: ...
    def verify(self, token: str, expected_type: TokenType = TokenType.ACCESS) -> TokenClaims: ...
