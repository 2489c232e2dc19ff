# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from smartspend.domain.expenses.entities import Expense, ExpenseFields
from smartspend.domain.expenses.exceptions import ExpenseNotFoundError
from smartspend.domain.expenses.repositories import ExpenseRepository


class UpdateExpenseUseCase:
    def __init__(self, *, expenses: ExpenseRepository) -> None:
        self._expenses = expenses

    def execute(self, owner_id: str, expense_id: str, fields: ExpenseFields) -> Expense:
        updated = self._expenses.update(owner_id, expense_id, fields)
        if updated is None:
            raise ExpenseNotFoundError(expense_id)
        return updated
