# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .auth import (
    AuthResult,
    Principal,
    Role,
    TokenClaims,
    TokenPair,
    TokenType,
)

__all__ = [
    "AuthResult",
    "Principal",
    "Role",
    "TokenClaims",
    "TokenPair",
    "TokenType",
]
