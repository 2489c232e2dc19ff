# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Turning pydantic failures into the API's ``validation_error`` body."""

from __future__ import annotations

from enum import Enum
from typing import Any, NoReturn

from pydantic import ValidationError as PydanticValidationError
from pydantic_core import PydanticCustomError

from .base import ValidationError


class FieldProblem(str, Enum):
    """Error types raised by our own validators, on top of pydantic's built-in ones."""

    MISSING = "missing"
    EMAIL_INVALID = "email_invalid"
    NAME_BLANK = "name_blank"


def field_problem(kind: FieldProblem, message: str) -> PydanticCustomError:
    return PydanticCustomError(kind.value, message)


def format_pydantic_errors(exc: PydanticValidationError) -> dict[str, Any]:
    """Collapse pydantic's error list to ``{"fields": {"amount": "greater_than_equal", ...}}``.

    Only the first problem per field is kept; inputs are never echoed back
    since they may hold a password.
    """
    fields: dict[str, str] = {}
    for error in exc.errors(include_url=False, include_input=False):
        path = ".".join(str(part) for part in error.get("loc", ()) if part is not None)
        fields.setdefault(path or "body", error.get("type", "value_error"))
    return {"fields": fields}


def raise_validation_error(exc: PydanticValidationError) -> NoReturn:
    raise ValidationError(context=format_pydantic_errors(exc)) from exc


__all__ = [
    "FieldProblem",
    "field_problem",
    "format_pydantic_errors",
    "raise_validation_error",
]
