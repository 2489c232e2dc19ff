# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Sequence

from smartspend.domain.expenses.entities import Expense
from smartspend.domain.expenses.repositories import ExpenseRepository


class ListExpensesUseCase:
    def __init__(self, *, expenses: ExpenseRepository) -> None:
        self._expenses = expenses

    def execute(self, owner_id: str) -> Sequence[Expense]:
        return list(self._expenses.list_for_owner(owner_id))
