# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .services.password_hashing import WerkzeugPasswordHasher
from .services.token_pairs import TokenPairIssuer
from .services.token_service import JwtTokenService

__all__ = [
    "JwtTokenService",
    "TokenPairIssuer",
    "WerkzeugPasswordHasher",
]
