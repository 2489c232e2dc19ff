# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from .entities import Expense, ExpenseFields


class ExpenseRepository(Protocol):
    """Owner-scoped expense persistence.

    ``update`` and ``delete`` return ``None``/``False`` when the record does
    not exist or belongs to another owner; the two cases are not told apart.
    """

    def list_for_owner(self, owner_id: str) -> Sequence[Expense]: ...
    def add(self, owner_id: str, fields: ExpenseFields) -> Expense: ...
    def update(self, owner_id: str, expense_id: str, fields: ExpenseFields) -> Expense | None: ...
    def delete(self, owner_id: str, expense_id: str) -> bool: ...
