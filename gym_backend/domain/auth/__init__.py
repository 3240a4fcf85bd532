# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .entities import (
    AuthResult,
    IssuedToken,
    Principal,
    RefreshTokenRecord,
    Role,
    TokenClaims,
    TokenPair,
    TokenType,
)
from .exceptions import (
    DuplicateRegistrationError,
    ForbiddenRoleError,
    InvalidCredentialsError,
    MissingPasswordError,
    MissingTokenError,
    PrincipalNotFoundError,
    RefreshRejectedError,
    RejectionReason,
    StoreUnavailableError,
    TokenExpiredError,
    TokenMalformedError,
    TokenRejectedError,
)

__all__ = [
    "AuthResult",
    "DuplicateRegistrationError",
    "ForbiddenRoleError",
    "InvalidCredentialsError",
    "IssuedToken",
    "MissingPasswordError",
    "MissingTokenError",
    "Principal",
    "PrincipalNotFoundError",
    "RefreshRejectedError",
    "RefreshTokenRecord",
    "RejectionReason",
    "Role",
    "StoreUnavailableError",
    "TokenClaims",
    "TokenExpiredError",
    "TokenMalformedError",
    "TokenPair",
    "TokenRejectedError",
    "TokenType",
]
