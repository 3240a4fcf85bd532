# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .guards import (
    TOKEN_SERVICE_EXTENSION,
    auth_required,
    bearer_token,
    current_claims,
    role_required,
)

__all__ = [
    "TOKEN_SERVICE_EXTENSION",
    "auth_required",
    "bearer_token",
    "current_claims",
    "role_required",
]
