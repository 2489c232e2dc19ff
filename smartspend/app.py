# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

import importlib
from typing import Any, Protocol, cast

from flask import Flask

from smartspend.container import Container
from smartspend.infrastructure.auth import TOKEN_SERVICE_EXTENSION
from smartspend.infrastructure.db import init_db
from smartspend.shared.config import AppConfig, load_config
from smartspend.shared.logging import logger, setup_logging
from smartspend.shared.middleware import configure_error_handling, configure_request_logging


class _CORSCallable(Protocol):
    def __call__(self, app: Flask, **kwargs: Any) -> Any: ...


_flask_cors = importlib.import_module("flask_cors")
CORS = cast(_CORSCallable, _flask_cors.CORS)

CONTAINER_EXTENSION = "smartspend.container"


def create_app(config: AppConfig | None = None) -> Flask:
    config = config or load_config()
    setup_logging(debug_mode=config.debug_logging)

    container = Container(config)
    init_db(container.engine)

    app = Flask(__name__)
    configure_error_handling(app, debug_mode=config.debug_logging)
    configure_request_logging(app, debug_mode=config.debug_logging)

    app.config.update(
        SECRET_KEY=config.secret_key,
        RATE_LIMIT_ENABLED=config.security.enable_rate_limit,
    )
    app.extensions[CONTAINER_EXTENSION] = container
    app.extensions[TOKEN_SERVICE_EXTENSION] = container.token_service

    cors_kwargs: dict[str, object] = {
        "resources": {r"/api/*": {"origins": config.security.allowed_origins}},
        "allow_headers": ["Authorization", "Content-Type", "X-Request-ID"],
    }
    CORS(app, **cors_kwargs)
    app.register_blueprint(container.misc_controller.as_blueprint())
    app.register_blueprint(container.auth_controller.as_blueprint())
    app.register_blueprint(container.expenses_controller.as_blueprint())

    @app.teardown_appcontext
    def _remove_session(_exc):
        container.session_factory.remove()

    @app.after_request
    def _add_security_headers(resp):
        resp.headers.setdefault("X-Frame-Options", "DENY")

        resp.headers.setdefault("Referrer-Policy", "no-referrer")

        resp.headers.setdefault("X-Content-Type-Options", "nosniff")

        resp.headers.setdefault("Cache-Control", "no-store")

        if config.security.enable_hsts:
            resp.headers.setdefault(
                "Strict-Transport-Security",
                "max-age=31536000; includeSubDomains; preload",
            )

        return resp

    logger.info("Flask app initialized")
    return app


def main() -> None:
    create_app().run(host="0.0.0.0", port=5000)


if __name__ == "__main__":
    main()
