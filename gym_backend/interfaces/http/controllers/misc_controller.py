# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from flask import Blueprint, Response, jsonify

from gym_backend.infrastructure.health import check_database
from gym_backend.infrastructure.observability import render_metrics


class MiscController:
    def as_blueprint(self) -> Blueprint:
        bp = Blueprint("misc", __name__)
        bp.add_url_rule("/api/health", view_func=self.health, methods=["GET"])
        bp.add_url_rule("/api/metrics", view_func=self.metrics, methods=["GET"])
        return bp

    def health(self):
        database_ok = check_database()
        status = {"status": "ok" if database_ok else "degraded", "database": database_ok}
        return jsonify(status), 200 if database_ok else 503

    def metrics(self) -> Response:
        body, content_type = render_metrics()
        return Response(body, content_type=content_type)
