# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .base import (
    AppError,
    DomainError,
    RateLimitedError,
    ValidationError,
    error_from_payload,
)
from .http import handle_app_error, register_error_handler

__all__ = [
    "AppError",
    "DomainError",
    "RateLimitedError",
    "ValidationError",
    "error_from_payload",
    "handle_app_error",
    "register_error_handler",
]
