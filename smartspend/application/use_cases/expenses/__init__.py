# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .create_expense import CreateExpenseUseCase
from .delete_expense import DeleteExpenseUseCase
from .list_expenses import ListExpensesUseCase
from .update_expense import UpdateExpenseUseCase

__all__ = [
    "CreateExpenseUseCase",
    "DeleteExpenseUseCase",
    "ListExpensesUseCase",
    "UpdateExpenseUseCase",
]
