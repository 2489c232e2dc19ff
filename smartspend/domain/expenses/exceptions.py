# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from http import HTTPStatus

from smartspend.shared.errors.base import DomainError


class ExpenseNotFoundError(DomainError):
    """No expense with this id belongs to the requesting owner."""

    error_code = "expense_not_found"
    error_status = HTTPStatus.NOT_FOUND

    def __init__(self, expense_id: str) -> None:
        super().__init__(context={"expense_id": expense_id})
