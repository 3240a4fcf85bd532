# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Exchange of a refresh token for a new access token."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

from gym_backend.application.services.token_pairs import TokenPairIssuer
from gym_backend.domain.auth.entities import Role, TokenPair, TokenType
from gym_backend.domain.auth.exceptions import RefreshRejectedError, TokenRejectedError
from gym_backend.domain.auth.repositories import (
    PrincipalRepository,
    RefreshTokenRepository,
    TokenService,
)
from gym_backend.shared.logging import logger


class RefreshTokenUseCase:
    """Validate a refresh token and mint a new access token.

    With rotation enabled the presented token is consumed through a
    conditional update, so of two concurrent refreshes with the same token
    only one succeeds, and the response carries a replacement refresh token.
    Without rotation the token stays usable until it expires and only a new
    access token is returned.
    """

    def __init__(
        self,
        *,
        tokens: TokenService,
        refresh_tokens: RefreshTokenRepository,
        principals: PrincipalRepository,
        issuer: TokenPairIssuer,
        rotate: bool = True,
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
    ) -> None:
        self._tokens = tokens
        self._refresh_tokens = refresh_tokens
        self._principals = principals
        self._issuer = issuer
        self._rotate = rotate
        self._clock = clock

    def execute(self, refresh_token: str, role: Role) -> TokenPair:
        if not refresh_token:
            raise RefreshRejectedError(context={"reason": "missing"})

        try:
            claims = self._tokens.verify(refresh_token, TokenType.REFRESH)
        except TokenRejectedError as exc:
            raise RefreshRejectedError(context={"reason": exc.reason.value}) from exc

        if claims.role is not role:
            logger.warning(
                f"auth.refresh: role mismatch principal={claims.principal_id} "
                f"token_role={claims.role.value} endpoint_role={role.value}"
            )
            raise RefreshRejectedError(context={"reason": "role_mismatch"})

        if not claims.jti:
            raise RefreshRejectedError(context={"reason": "malformed"})
        record = self._refresh_tokens.get(claims.jti)
        if record is None or record.principal_id != claims.principal_id or record.role is not role:
            raise RefreshRejectedError(context={"reason": "unknown"})

        if self._principals.find_by_id(role, claims.principal_id) is None:
            raise RefreshRejectedError(context={"reason": "principal_gone"})

        if self._rotate:
            if not self._refresh_tokens.consume(claims.jti, self._clock()):
                logger.warning(
                    f"auth.refresh: reuse of consumed token principal={claims.principal_id}"
                )
                raise RefreshRejectedError(context={"reason": "consumed"})
            return self._issuer.issue(claims.principal_id, role)

        if record.consumed_at is not None:
            raise RefreshRejectedError(context={"reason": "consumed"})
        return self._issuer.issue_access_only(claims.principal_id, role)
