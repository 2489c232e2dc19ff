# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from smartspend.domain.expenses.exceptions import ExpenseNotFoundError
from smartspend.domain.expenses.repositories import ExpenseRepository


class DeleteExpenseUseCase:
    def __init__(self, *, expenses: ExpenseRepository) -> None:
        self._expenses = expenses

    def execute(self, owner_id: str, expense_id: str) -> None:
        if not self._expenses.delete(owner_id, expense_id):
            raise ExpenseNotFoundError(expense_id)
