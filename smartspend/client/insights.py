# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Aggregations computed client-side from the cached expense set."""

from __future__ import annotations

import datetime as dt
from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from smartspend.client.models import BudgetPeriod, CategoryBudget, ExpenseData
from smartspend.domain.expenses.categories import Category

ZERO = Decimal("0.00")


def month_key(day: dt.date) -> str:
    return f"{day.year:04d}-{day.month:02d}"


def normalize_month(month: str) -> str:
    """Canonical "YYYY-MM" for inputs like "2024-3"; raises ValueError otherwise."""
    return month_key(dt.datetime.strptime(month.strip(), "%Y-%m").date())


def total(expenses: Iterable[ExpenseData]) -> Decimal:
    return sum((expense.amount for expense in expenses), ZERO)


def by_category(expenses: Iterable[ExpenseData]) -> dict[Category, Decimal]:
    """Totals per category, largest first."""
    totals: dict[Category, Decimal] = {}
    for expense in expenses:
        totals[expense.category] = totals.get(expense.category, ZERO) + expense.amount
    return dict(sorted(totals.items(), key=lambda item: item[1], reverse=True))


def by_month(expenses: Iterable[ExpenseData]) -> dict[str, Decimal]:
    """Totals per "YYYY-MM", oldest month first."""
    totals: dict[str, Decimal] = {}
    for expense in expenses:
        key = month_key(expense.date)
        totals[key] = totals.get(key, ZERO) + expense.amount
    return dict(sorted(totals.items()))


def filter_expenses(
    expenses: Iterable[ExpenseData],
    *,
    search: str | None = None,
    category: Category | str | None = None,
    min_amount: Decimal | None = None,
    max_amount: Decimal | None = None,
    start: dt.date | None = None,
    end: dt.date | None = None,
    month: str | None = None,
) -> list[ExpenseData]:
    needle = (search or "").strip().lower()
    month = normalize_month(month) if month else None
    wanted = Category.parse(category) if category else None

    def keep(expense: ExpenseData) -> bool:
        if needle and needle not in expense.note.lower() and needle not in expense.description.lower():
            return False
        if wanted is not None and expense.category is not wanted:
            return False
        if min_amount is not None and expense.amount < min_amount:
            return False
        if max_amount is not None and expense.amount > max_amount:
            return False
        if start is not None and expense.date < start:
            return False
        if end is not None and expense.date > end:
            return False
        return month is None or month_key(expense.date) == month

    return [expense for expense in expenses if keep(expense)]


@dataclass(slots=True, frozen=True)
class BudgetProgress:
    category: Category
    budget: Decimal
    spent: Decimal
    period: BudgetPeriod

    @property
    def remaining(self) -> Decimal:
        return self.budget - self.spent

    @property
    def percent(self) -> float:
        if self.budget <= 0:
            return 100.0 if self.spent > 0 else 0.0
        return float(self.spent / self.budget * 100)

    @property
    def over_budget(self) -> bool:
        return self.spent > self.budget


def budget_progress(
    expenses: Iterable[ExpenseData],
    budgets: Iterable[CategoryBudget],
    *,
    today: dt.date | None = None,
) -> list[BudgetProgress]:
    """Spending against each category budget.

    Monthly budgets count the calendar month containing ``today``; weekly
    budgets count the trailing seven days ending on ``today``.
    """
    today = today or dt.date.today()
    expenses = list(expenses)
    week_start = today - dt.timedelta(days=6)
    results = []
    for budget in budgets:
        if budget.period is BudgetPeriod.WEEKLY:
            window = filter_expenses(expenses, category=budget.category, start=week_start, end=today)
        else:
            window = filter_expenses(expenses, category=budget.category, month=month_key(today))
        results.append(
            BudgetProgress(
                category=budget.category,
                budget=budget.amount,
                spent=total(window),
                period=budget.period,
            )
        )
    return results


def month_remaining(
    expenses: Iterable[ExpenseData], monthly_budget: Decimal | None, month: str
) -> Decimal | None:
    if monthly_budget is None:
        return None
    return monthly_budget - total(filter_expenses(expenses, month=month))


__all__ = [
    "BudgetProgress",
    "budget_progress",
    "by_category",
    "by_month",
    "filter_expenses",
    "month_key",
    "month_remaining",
    "normalize_month",
    "total",
]
