# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Error types shared by the API and its client.

Every error carries a stable wire code. Subclasses that declare
``error_code`` are registered so a JSON error body can be turned back into
the matching type on the client side.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any, cast

_ERROR_TYPES: dict[str, type[AppError]] = {}


@dataclass(slots=True)
class AppError(Exception):
    code: str
    status: HTTPStatus
    context: Mapping[str, Any] | None = None

    def __post_init__(self) -> None:
        Exception.__init__(self, self.code)

    def __init_subclass__(cls, **kwargs: Any) -> None:
        code = cls.__dict__.get("error_code")
        if code:
            _ERROR_TYPES[code] = cls

    @property
    def is_client_error(self) -> bool:
        return 400 <= int(self.status) < 500

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.code}
        if self.context:
            payload["context"] = dict(self.context)
        return payload


class DomainError(AppError):
    def __init__(
        self,
        *,
        code: str | None = None,
        status: HTTPStatus | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        resolved_code = code or cast(str, getattr(type(self), "error_code", "domain_error"))
        resolved_status = status or cast(
            HTTPStatus, getattr(type(self), "error_status", HTTPStatus.BAD_REQUEST)
        )
        super().__init__(code=resolved_code, status=resolved_status, context=context)


class ValidationError(DomainError):
    error_code = "validation_error"
    error_status = HTTPStatus.UNPROCESSABLE_ENTITY


class RateLimitedError(DomainError):
    error_code = "rate_limited"
    error_status = HTTPStatus.TOO_MANY_REQUESTS

    def __init__(self, retry_after: float | None = None) -> None:
        context = None
        if retry_after is not None:
            context = {"retry_after_seconds": round(retry_after, 1)}
        super().__init__(context=context)


def error_from_payload(status: int, payload: Any) -> AppError:
    """Rebuild an error from an API error body such as ``{"error": ..., "context": ...}``."""
    code = "remote_error"
    context: Mapping[str, Any] | None = None
    if isinstance(payload, Mapping):
        code = str(payload.get("error") or code)
        if isinstance(payload.get("context"), Mapping):
            context = payload["context"]

    try:
        resolved_status = HTTPStatus(status)
    except ValueError:
        resolved_status = HTTPStatus.BAD_REQUEST

    error_type = _ERROR_TYPES.get(code, AppError)
    error = error_type.__new__(error_type)
    AppError.__init__(error, code=code, status=resolved_status, context=context)
    return error
