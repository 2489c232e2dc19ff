# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Canonical expense categories and their display labels."""

from __future__ import annotations

from enum import Enum

from smartspend.domain.exceptions import InvariantViolation


class Category(str, Enum):
    FOOD = "food"
    TRANSPORT = "transport"
    BILLS = "bills"
    SHOPPING = "shopping"
    ENTERTAINMENT = "entertainment"
    HEALTH = "health"
    EDUCATION = "education"
    OTHER = "other"

    @classmethod
    def parse(cls, value: str | Category) -> Category:
        if isinstance(value, Category):
            return value
        normalized = str(value or "").strip().lower()
        try:
            return cls(normalized)
        except ValueError:
            raise InvariantViolation(
                f"unknown category {value!r}", field="category"
            ) from None


# Presentation mapping only; the stored value is always the enum value.
CATEGORY_LABELS: dict[Category, str] = {
    Category.FOOD: "Food & Dining",
    Category.TRANSPORT: "Transportation",
    Category.BILLS: "Bills & Utilities",
    Category.SHOPPING: "Shopping",
    Category.ENTERTAINMENT: "Entertainment",
    Category.HEALTH: "Healthcare",
    Category.EDUCATION: "Education",
    Category.OTHER: "Other",
}


def category_label(category: str | Category) -> str:
    return CATEGORY_LABELS[Category.parse(category)]
