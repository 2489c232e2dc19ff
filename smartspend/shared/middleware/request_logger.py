# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Per-request correlation ids and one access line per response."""

from __future__ import annotations

import re
import secrets
import time

from flask import Flask, Response, g, request

from smartspend.shared.logging import clear_correlation_id, logger, set_correlation_id

REQUEST_ID_HEADER = "X-Request-ID"

_REQUEST_ID_RE = re.compile(r"^[\w.-]{1,64}$")
_HIDDEN_HEADERS = frozenset({"authorization", "cookie", "x-api-key"})


def _client_ip() -> str:
    forwarded = request.headers.get("X-Forwarded-For", "")
    return forwarded.split(",")[0].strip() or request.remote_addr or "unknown"


def _incoming_request_id() -> str:
    """Reuse the caller's id when it looks sane so client and server logs join up."""
    candidate = request.headers.get(REQUEST_ID_HEADER, "")
    if _REQUEST_ID_RE.match(candidate):
        return candidate
    return secrets.token_hex(6)


def _visible_headers() -> dict[str, str]:
    return {
        key: ("<hidden>" if key.lower() in _HIDDEN_HEADERS else value)
        for key, value in request.headers.items()
    }


def configure_request_logging(app: Flask, *, debug_mode: bool = False) -> None:

    @app.before_request
    def _start() -> None:
        g.correlation_id = _incoming_request_id()
        g.request_started = time.perf_counter()
        set_correlation_id(g.correlation_id)
        if debug_mode:
            logger.debug(
                f"--> {request.method} {request.path} ip={_client_ip()} "
                f"bytes={request.content_length or 0} headers={_visible_headers()}"
            )

    @app.after_request
    def _finish(response: Response) -> Response:
        elapsed_ms = (time.perf_counter() - getattr(g, "request_started", time.perf_counter())) * 1000
        user_id = getattr(g, "user_id", None) or "-"
        line = f"<-- {request.method} {request.path} {response.status_code} {elapsed_ms:.1f}ms user={user_id}"
        if response.status_code >= 500:
            logger.error(line)
        elif response.status_code >= 400:
            logger.warning(line)
        else:
            logger.info(line)
        response.headers[REQUEST_ID_HEADER] = getattr(g, "correlation_id", "-")
        return response

    @app.teardown_request
    def _teardown(exc: BaseException | None) -> None:
        if exc is not None:
            logger.error(f"unhandled {type(exc).__name__} on {request.method} {request.path}")
        clear_correlation_id()


__all__ = ["REQUEST_ID_HEADER", "configure_request_logging"]
