# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""JSON rendering for every failure the API can produce."""

from __future__ import annotations

from http import HTTPStatus

from flask import Flask, Response, jsonify, request
from werkzeug.exceptions import HTTPException

from smartspend.shared.logging import logger

from .base import AppError, RateLimitedError


def handle_app_error(error: AppError) -> tuple[Response, int]:
    response = jsonify(error.to_dict())
    if isinstance(error, RateLimitedError) and error.context:
        response.headers["Retry-After"] = str(max(1, round(error.context["retry_after_seconds"])))
    return response, int(error.status)


def _http_error_code(exc: HTTPException) -> str:
    return (exc.name or "http_error").lower().replace(" ", "_")


def register_error_handler(app: Flask, *, debug_mode: bool = False) -> None:
    """Map ``AppError`` to its own status, werkzeug errors to theirs, anything else to 500."""

    @app.errorhandler(AppError)
    def _on_app_error(exc: AppError):
        where = f"{request.method} {request.path}"
        if exc.is_client_error:
            logger.info(f"error: {exc.code} ({int(exc.status)}) on {where}")
        else:
            logger.error(f"error: {exc.code} ({int(exc.status)}) on {where}")
        return handle_app_error(exc)

    @app.errorhandler(HTTPException)
    def _on_http_error(exc: HTTPException):
        return jsonify({"error": _http_error_code(exc)}), exc.code or HTTPStatus.INTERNAL_SERVER_ERROR

    @app.errorhandler(Exception)
    def _on_crash(exc: Exception):
        if debug_mode:
            logger.exception(f"crash: {request.method} {request.path}")
        else:
            logger.error(f"crash: {type(exc).__name__} on {request.method} {request.path}")
        return jsonify({"error": "internal_error"}), HTTPStatus.INTERNAL_SERVER_ERROR
