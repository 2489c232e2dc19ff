# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Expense records and the editable field set shared by create and update."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from smartspend.domain.exceptions import InvariantViolation

from .categories import Category

_CENTS = Decimal("0.01")


def normalize_amount(value: Decimal | int | float | str) -> Decimal:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise InvariantViolation("amount must be a decimal number", field="amount") from None
    if not amount.is_finite():
        raise InvariantViolation("amount must be finite", field="amount")
    if amount < 0:
        raise InvariantViolation("amount must be non-negative", field="amount")
    return amount.quantize(_CENTS, rounding=ROUND_HALF_UP)


@dataclass(slots=True, frozen=True)
class ExpenseFields:
    """Editable part of an expense; an update replaces all of it."""

    amount: Decimal
    category: Category
    date: date
    note: str = ""
    description: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", normalize_amount(self.amount))
        object.__setattr__(self, "category", Category.parse(self.category))
        if not isinstance(self.date, date):
            raise InvariantViolation("date must be a calendar date", field="date")
        object.__setattr__(self, "note", self.note or "")
        object.__setattr__(self, "description", self.description or "")


@dataclass(slots=True, frozen=True)
class Expense:
    """Stored expense, bound to exactly one owner."""

    id: str
    owner_id: str
    fields: ExpenseFields

    def __post_init__(self) -> None:
        if not self.id:
            raise InvariantViolation("expense id is required", field="id")
        if not self.owner_id:
            raise InvariantViolation("owner id is required", field="owner_id")

    @property
    def amount(self) -> Decimal:
        return self.fields.amount

    @property
    def category(self) -> Category:
        return self.fields.category

    @property
    def date(self) -> date:
        return self.fields.date

    @property
    def note(self) -> str:
        return self.fields.note

    @property
    def description(self) -> str:
        return self.fields.description

    def with_fields(self, fields: ExpenseFields) -> Expense:
        return replace(self, fields=fields)
