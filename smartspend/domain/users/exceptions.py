# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from http import HTTPStatus

from smartspend.shared.errors.base import DomainError


class DuplicateEmailError(DomainError):
    error_code = "duplicate_email"


class InvalidCredentialsError(DomainError):
    """Raised for an unknown email and for a wrong password alike."""

    error_code = "invalid_credentials"


class InvalidTokenError(DomainError):
    error_code = "invalid_token"
    error_status = HTTPStatus.UNAUTHORIZED
