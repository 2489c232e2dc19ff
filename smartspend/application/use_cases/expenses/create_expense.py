# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from smartspend.domain.expenses.entities import Expense, ExpenseFields
from smartspend.domain.expenses.repositories import ExpenseRepository


class CreateExpenseUseCase:
    def __init__(self, *, expenses: ExpenseRepository) -> None:
        self._expenses = expenses

    def execute(self, owner_id: str, fields: ExpenseFields) -> Expense:
        return self._expenses.add(owner_id, fields)
