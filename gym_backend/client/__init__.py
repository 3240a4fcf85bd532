# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .api_client import GymApiClient, classify_response
from .exceptions import GymClientError, InvalidTransitionError, LoginFailedError
from .session import SessionManager
from .state_machine import CallEvent, CallState, transition
from .storage import FileTokenStorage, MemoryTokenStorage, Session, TokenStorage

__all__ = [
    "CallEvent",
    "CallState",
    "FileTokenStorage",
    "GymApiClient",
    "GymClientError",
    "InvalidTransitionError",
    "LoginFailedError",
    "MemoryTokenStorage",
    "Session",
    "SessionManager",
    "TokenStorage",
    "classify_response",
    "transition",
]
