# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Wire shapes for expense CRUD."""

from __future__ import annotations

import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from smartspend.domain.expenses.categories import Category
from smartspend.domain.expenses.entities import Expense, ExpenseFields


class ExpenseInputDTO(BaseModel):
    """Body of POST and PUT. Unknown keys (an echoed ``id``) are ignored."""

    model_config = ConfigDict(extra="ignore")

    amount: Decimal = Field(ge=0, max_digits=12, decimal_places=2, allow_inf_nan=False)
    category: Category
    date: dt.date
    note: str | None = Field(default="", max_length=2000)
    description: str | None = Field(default="", max_length=200)

    @field_validator("category", mode="before")
    @classmethod
    def normalize_category(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    def to_fields(self) -> ExpenseFields:
        return ExpenseFields(
            amount=self.amount,
            category=self.category,
            date=self.date,
            note=self.note or "",
            description=self.description or "",
        )


class ExpenseDTO(BaseModel):
    id: str
    amount: Decimal
    category: Category
    date: dt.date
    note: str
    description: str

    @field_serializer("amount")
    def serialize_amount(self, value: Decimal) -> float:
        return float(value)

    @classmethod
    def from_domain(cls, expense: Expense) -> ExpenseDTO:
        return cls(
            id=expense.id,
            amount=expense.amount,
            category=expense.category,
            date=expense.date,
            note=expense.note,
            description=expense.description,
        )


class ExpenseListDTO(BaseModel):
    expenses: list[ExpenseDTO]


class ExpenseEnvelopeDTO(BaseModel):
    expense: ExpenseDTO


class DeleteResultDTO(BaseModel):
    success: bool = True
