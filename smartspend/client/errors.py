# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from http import HTTPStatus
from typing import Any

# Registers the expense error codes.
import smartspend.domain.expenses.exceptions  # noqa: F401
from smartspend.domain.users.exceptions import InvalidTokenError
from smartspend.shared.errors.base import AppError, RateLimitedError, error_from_payload


class NetworkFailure(Exception):
    """The server could not be reached or answered with a transient failure."""

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


def error_from_response(status: int, body: Any) -> AppError:
    if status == HTTPStatus.UNAUTHORIZED:
        context = body.get("context") if isinstance(body, dict) else None
        body = {"error": InvalidTokenError.error_code, "context": context}
    return error_from_payload(status, body)


def is_rejection(exc: BaseException) -> bool:
    """True for a definitive refusal the outbox should not replay."""
    if not isinstance(exc, AppError) or isinstance(exc, InvalidTokenError | RateLimitedError):
        return False
    return exc.is_client_error and exc.status != HTTPStatus.UNAUTHORIZED


__all__ = ["NetworkFailure", "error_from_response", "is_rejection"]
