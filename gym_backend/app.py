# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

import os

from flask import Flask
from flask_cors import CORS

from gym_backend.infrastructure.auth import TOKEN_SERVICE_EXTENSION
from gym_backend.infrastructure.container import Container, container as default_container
from gym_backend.infrastructure.db import init_db
from gym_backend.shared.config import load_config
from gym_backend.shared.logging import logger, setup_logging
from gym_backend.shared.middleware.error_handler import configure_error_handling
from gym_backend.shared.middleware.request_logger import configure_request_logging
from gym_backend.shared.middleware.security_headers import configure_security_headers

_config = load_config()


def create_app(container: Container | None = None) -> Flask:
    container = container or default_container
    setup_logging(debug_mode=_config.debug_logging)
    init_db()

    app = Flask(__name__)
    app.config.update(
        SECRET_KEY=_config.secret_key,
        MAX_CONTENT_LENGTH=5 * 1024 * 1024,
    )
    app.json.sort_keys = False  # type: ignore[attr-defined]
    app.extensions[TOKEN_SERVICE_EXTENSION] = container.token_service

    configure_error_handling(app)
    configure_request_logging(app)
    configure_security_headers(app)

    cors_kwargs: dict[str, object] = {
        "resources": {r"/api/*": {"origins": _config.security.allowed_origins}},
        "expose_headers": ["WWW-Authenticate"],
    }
    CORS(app, **cors_kwargs)

    app.register_blueprint(container.misc_controller.as_blueprint())
    app.register_blueprint(container.auth_controller.as_blueprint())
    app.register_blueprint(container.clients_controller.as_blueprint())

    logger.info(
        f"Flask app initialized env={_config.app_env} "
        f"access_ttl={_config.auth.access_token_ttl_minutes}m "
        f"rotation={_config.auth.rotate_refresh_tokens}"
    )
    return app


def main() -> None:
    app = create_app()
    port = int(os.environ.get("PORT", "3001"))
    app.run(host="0.0.0.0", port=port, debug=not _config.is_production())


if __name__ == "__main__":
    main()
