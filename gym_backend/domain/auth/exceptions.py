# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from enum import Enum
from http import HTTPStatus

from gym_backend.shared.errors.base import DomainError, InfrastructureError


class RejectionReason(str, Enum):
    MALFORMED = "malformed"
    EXPIRED = "expired"


class InvalidCredentialsError(DomainError):
    # Shared by "unknown identifier" and "wrong password".
    code = "invalid_credentials"
    status = HTTPStatus.UNAUTHORIZED
    message = "Invalid credentials"


class MissingPasswordError(DomainError):
    code = "missing_password"
    message = "Password is required"


class DuplicateRegistrationError(DomainError):
    code = "duplicate_registration"
    message = "This identifier is already registered"


class MissingTokenError(DomainError):
    code = "missing_token"
    status = HTTPStatus.UNAUTHORIZED
    message = "Authentication required"


class TokenRejectedError(DomainError):
    status = HTTPStatus.UNAUTHORIZED
    reason: RejectionReason


class TokenMalformedError(TokenRejectedError):
    code = "token_malformed"
    message = "Token is invalid"
    reason = RejectionReason.MALFORMED


class TokenExpiredError(TokenRejectedError):
    code = "token_expired"
    message = "Token has expired"
    reason = RejectionReason.EXPIRED


class RefreshRejectedError(DomainError):
    code = "refresh_rejected"
    status = HTTPStatus.UNAUTHORIZED
    message = "Refresh token rejected, please log in again"


class ForbiddenRoleError(DomainError):
    code = "forbidden"
    status = HTTPStatus.FORBIDDEN
    message = "Not allowed for this role"


class PrincipalNotFoundError(DomainError):
    code = "not_found"
    status = HTTPStatus.NOT_FOUND
    message = "Principal not found"


class StoreUnavailableError(InfrastructureError):
    def __init__(self) -> None:
        super().__init__("store_unavailable", message="Internal server error")
