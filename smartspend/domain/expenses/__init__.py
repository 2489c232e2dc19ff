# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .categories import CATEGORY_LABELS, Category, category_label
from .entities import Expense, ExpenseFields, normalize_amount
from .exceptions import ExpenseNotFoundError
from .repositories import ExpenseRepository

__all__ = [
    "CATEGORY_LABELS",
    "Category",
    "Expense",
    "ExpenseFields",
    "ExpenseNotFoundError",
    "ExpenseRepository",
    "category_label",
    "normalize_amount",
]
