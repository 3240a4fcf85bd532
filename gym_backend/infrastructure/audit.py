# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Audit trail for authentication events.

Entries go through the regular logger with ``audit=True`` bound, so a sink
can route them separately. Credential-looking detail keys are redacted
before anything is written.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from gym_backend.shared.logging import logger


class AuditAction(str, Enum):
    # Authentication
    LOGIN_SUCCESS = "login_success"
    LOGIN_FAILED = "login_failed"
    LOGOUT = "logout"
    REGISTER = "register"
    REGISTER_FAILED = "register_failed"

    # Token lifecycle
    TOKEN_REFRESHED = "token_refreshed"
    TOKEN_REFRESH_REJECTED = "token_refresh_rejected"

    # Clients
    CLIENT_CREATED = "client_created"
    PASSWORD_CHANGED = "password_changed"


SENSITIVE_KEYS = frozenset({"password", "token", "secret", "key", "hash"})


def _redact(details: dict[str, Any]) -> dict[str, Any]:
    return {
        key: "***REDACTED***" if any(s in key.lower() for s in SENSITIVE_KEYS) else value
        for key, value in details.items()
    }


def audit_log(
    action: AuditAction,
    principal_id: str | None = None,
    ip_address: str | None = None,
    details: dict[str, Any] | None = None,
    success: bool = True,
) -> None:
    safe_details = _redact(details) if details else {}
    parts = [f"AUDIT: {action.value}", f"principal={principal_id or '-'}", f"ip={ip_address or '-'}"]
    if not success:
        parts.append("outcome=denied")
    if safe_details:
        parts.append(" ".join(f"{key}={value}" for key, value in sorted(safe_details.items())))

    bound = logger.bind(audit=True, audit_action=action.value, audit_success=success)
    if success:
        bound.info(" | ".join(parts))
    else:
        bound.warning(" | ".join(parts))


__all__ = ["AuditAction", "audit_log"]
