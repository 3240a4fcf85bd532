# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Lifecycle of one authenticated call.

START -> ATTEMPT_1 -> (COMPLETED | REFRESHING | LOGGED_OUT)
REFRESHING -> (ATTEMPT_2 | LOGGED_OUT)
ATTEMPT_2 -> COMPLETED

There is no edge back into REFRESHING from ATTEMPT_2, so a call refreshes
at most once.
"""

from __future__ import annotations

from enum import Enum

from gym_backend.client.exceptions import InvalidTransitionError


class CallState(str, Enum):
    START = "start"
    ATTEMPT_1 = "attempt_1"
    REFRESHING = "refreshing"
    ATTEMPT_2 = "attempt_2"
    COMPLETED = "completed"
    LOGGED_OUT = "logged_out"


class CallEvent(str, Enum):
    NO_TOKEN = "no_token"
    HAS_TOKEN = "has_token"
    RESPONDED = "responded"
    EXPIRED = "expired"
    MALFORMED = "malformed"
    REFRESHED = "refreshed"
    REFRESH_FAILED = "refresh_failed"


TERMINAL_STATES = frozenset({CallState.COMPLETED, CallState.LOGGED_OUT})

_TRANSITIONS: dict[tuple[CallState, CallEvent], CallState] = {
    (CallState.START, CallEvent.NO_TOKEN): CallState.LOGGED_OUT,
    (CallState.START, CallEvent.HAS_TOKEN): CallState.ATTEMPT_1,
    (CallState.ATTEMPT_1, CallEvent.RESPONDED): CallState.COMPLETED,
    (CallState.ATTEMPT_1, CallEvent.EXPIRED): CallState.REFRESHING,
    (CallState.ATTEMPT_1, CallEvent.MALFORMED): CallState.LOGGED_OUT,
    (CallState.REFRESHING, CallEvent.REFRESHED): CallState.ATTEMPT_2,
    (CallState.REFRESHING, CallEvent.REFRESH_FAILED): CallState.LOGGED_OUT,
    # The second attempt's response is final, whatever its status.
    (CallState.ATTEMPT_2, CallEvent.RESPONDED): CallState.COMPLETED,
    (CallState.ATTEMPT_2, CallEvent.EXPIRED): CallState.COMPLETED,
    (CallState.ATTEMPT_2, CallEvent.MALFORMED): CallState.COMPLETED,
}


def transition(state: CallState, event: CallEvent) -> CallState:
    try:
        return _TRANSITIONS[(state, event)]
    except KeyError:
        raise InvalidTransitionError(state.value, event.value) from None


def is_terminal(state: CallState) -> bool:
    return state in TERMINAL_STATES


__all__ = ["CallEvent", "CallState", "TERMINAL_STATES", "is_terminal", "transition"]
