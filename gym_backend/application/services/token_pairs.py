# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from gym_backend.domain.auth.entities import RefreshTokenRecord, Role, TokenPair
from gym_backend.domain.auth.exceptions import TokenMalformedError
from gym_backend.domain.auth.repositories import RefreshTokenRepository, TokenService
from gym_backend.shared.logging import logger


class TokenPairIssuer:
    """Mints an access/refresh pair and records the refresh token for single use."""

    def __init__(self, *, tokens: TokenService, refresh_tokens: RefreshTokenRepository) -> None:
        self._tokens = tokens
        self._refresh_tokens = refresh_tokens

    def issue(self, principal_id: str, role: Role) -> TokenPair:
        access = self._tokens.issue_access(principal_id, role)
        refresh = self._tokens.issue_refresh(principal_id, role)
        if not refresh.claims.jti:
            raise TokenMalformedError(context={"reason": "refresh_without_jti"})
        self._refresh_tokens.add(
            RefreshTokenRecord(
                jti=refresh.claims.jti,
                principal_id=principal_id,
                role=role,
                expires_at=refresh.claims.expires_at,
            )
        )
        logger.debug(
            f"tokens.issue: pair for principal={principal_id} role={role.value} "
            f"access_exp={access.claims.expires_at.isoformat()}"
        )
        return TokenPair(
            access_token=access.token,
            refresh_token=refresh.token,
            expires_in=self._tokens.access_ttl_seconds,
        )

    def issue_access_only(self, principal_id: str, role: Role) -> TokenPair:
        access = self._tokens.issue_access(principal_id, role)
        return TokenPair(
            access_token=access.token,
            refresh_token=None,
            expires_in=self._tokens.access_ttl_seconds,
        )


__all__ = ["TokenPairIssuer"]
