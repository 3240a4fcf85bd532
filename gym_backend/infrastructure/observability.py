# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from prometheus_client import CONTENT_TYPE_LATEST, Counter, generate_latest

from gym_backend.shared.config import load_config

_config = load_config()

AUTH_EVENTS = Counter(
    "gym_auth_events_total",
    "Authentication events by outcome",
    labelnames=("event", "role"),
)


def record_auth_event(event: str, role: str = "unknown") -> None:
    if not _config.observability.metrics_enabled:
        return
    AUTH_EVENTS.labels(event=event, role=role).inc()


def render_metrics() -> tuple[bytes, str]:
    return generate_latest(), CONTENT_TYPE_LATEST


__all__ = [
    "AUTH_EVENTS",
    "record_auth_event",
    "render_metrics",
]
