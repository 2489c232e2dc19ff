# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Bearer-token guard for protected views."""

from __future__ import annotations

from functools import wraps
from typing import cast

from flask import current_app, g, request

from smartspend.domain.users.entities import SessionIdentity
from smartspend.domain.users.exceptions import InvalidTokenError
from smartspend.domain.users.repositories import TokenService
from smartspend.shared.logging import logger

TOKEN_SERVICE_EXTENSION = "smartspend.tokens"


def bearer_token() -> str:
    auth = request.headers.get("Authorization", "")
    scheme, _, token = auth.partition(" ")
    if scheme.lower() != "bearer":
        return ""
    return token.strip()


def token_service() -> TokenService:
    return cast(TokenService, current_app.extensions[TOKEN_SERVICE_EXTENSION])


def authed_identity() -> SessionIdentity:
    """Return the identity verified for the current request."""
    return cast(SessionIdentity, g.identity)


def auth_required(f):
    @wraps(f)
    def inner(*a, **kw):
        token = bearer_token()
        if not token:
            logger.warning(
                f"No bearer token on {request.method} {request.path} "
                f"from {request.headers.get('X-Forwarded-For', request.remote_addr)}"
            )
            raise InvalidTokenError()

        try:
            identity = token_service().verify(token)
        except InvalidTokenError:
            logger.warning(f"Auth failed (token invalid/expired) on {request.method} {request.path}")
            raise

        g.identity = identity
        g.user_id = identity.user_id
        logger.debug(f"Auth OK: user={identity.user_id} {request.method} {request.path}")
        return f(*a, **kw)

    return inner


__all__ = [
    "TOKEN_SERVICE_EXTENSION",
    "auth_required",
    "authed_identity",
    "bearer_token",
    "token_service",
]
