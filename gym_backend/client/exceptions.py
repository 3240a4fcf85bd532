# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from typing import Any


class GymClientError(Exception):
    def __init__(self, message: str, error_code: str | None = None, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or {}


class LoginFailedError(GymClientError):
    def __init__(self, message: str, *, status: int | None = None, error_code: str | None = None):
        super().__init__(message, error_code=error_code, context={"status": status})
        self.status = status


class InvalidTransitionError(GymClientError):
    def __init__(self, state: str, event: str):
        super().__init__(
            message=f"No transition from {state} on {event}",
            error_code="invalid_transition",
            context={"state": state, "event": event},
        )
