from datetime import date
from decimal import Decimal

import pytest

from smartspend.domain import InvariantViolation
from smartspend.domain.expenses import (
    Category,
    Expense,
    ExpenseFields,
    category_label,
    normalize_amount,
)


def test_expense_fields_normalize_amount_and_category() -> None:
    fields = ExpenseFields(amount=Decimal("12.345"), category="Food", date=date(2024, 3, 1))

    assert fields.amount == Decimal("12.35")
    assert fields.category is Category.FOOD
    assert fields.note == ""
    assert fields.description == ""


def test_expense_fields_accept_zero_amount() -> None:
    fields = ExpenseFields(amount=0, category=Category.OTHER, date=date(2024, 1, 1))
    assert fields.amount == Decimal("0.00")


@pytest.mark.parametrize("amount", ["-0.01", "NaN", "Infinity", "abc"])
def test_normalize_amount_rejects_bad_values(amount: str) -> None:
    with pytest.raises(InvariantViolation) as exc_info:
        normalize_amount(amount)
    assert exc_info.value.field == "amount"


def test_unknown_category_is_rejected() -> None:
    with pytest.raises(InvariantViolation) as exc_info:
        ExpenseFields(amount=1, category="groceries", date=date(2024, 1, 1))
    assert exc_info.value.field == "category"


def test_date_must_be_calendar_date() -> None:
    with pytest.raises(InvariantViolation):
        ExpenseFields(amount=1, category="food", date="2024-01-01")  # type: ignore[arg-type]


def test_expense_requires_owner() -> None:
    fields = ExpenseFields(amount=5, category="bills", date=date(2024, 2, 2))
    with pytest.raises(InvariantViolation):
        Expense(id="abc", owner_id="", fields=fields)


def test_with_fields_keeps_identity() -> None:
    original = Expense(
        id="e1",
        owner_id="u1",
        fields=ExpenseFields(amount=5, category="bills", date=date(2024, 2, 2)),
    )
    changed = original.with_fields(
        ExpenseFields(amount=7, category="health", date=date(2024, 2, 3), note="pharmacy")
    )

    assert changed.id == "e1"
    assert changed.owner_id == "u1"
    assert changed.amount == Decimal("7.00")
    assert changed.note == "pharmacy"
    assert original.amount == Decimal("5.00")


def test_category_labels_are_presentation_only() -> None:
    assert category_label("food") == "Food & Dining"
    assert category_label(Category.TRANSPORT) == "Transportation"
    assert Category.parse(" HEALTH ") is Category.HEALTH
