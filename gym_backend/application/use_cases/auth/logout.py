"""Use-case for revoking a refresh token on logout."""

from __future__ import annotations

from datetime import UTC, datetime

from gym_backend.domain.auth.entities import TokenType
from gym_backend.domain.auth.exceptions import TokenRejectedError
from gym_backend.domain.auth.repositories import RefreshTokenRepository, TokenService
from gym_backend.shared.logging import logger


class LogoutUseCase:
    def __init__(self, *, tokens: TokenService, refresh_tokens: RefreshTokenRepository) -> None:
        self._tokens = tokens
        self._refresh_tokens = refresh_tokens

    def execute(self, refresh_token: str | None) -> bool:
        if not refresh_token:
            return False
        try:
            claims = self._tokens.verify(refresh_token, TokenType.REFRESH)
        except TokenRejectedError as exc:
            logger.debug(f"auth.logout: ignoring unusable token reason={exc.reason.value}")
            return False
        if not claims.jti:
            return False
        return self._refresh_tokens.consume(claims.jti, datetime.now(UTC))
