# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Callable, Sequence

from sqlalchemy.orm import Session

from smartspend.domain.expenses.entities import Expense as DomainExpense
from smartspend.domain.expenses.entities import ExpenseFields
from smartspend.domain.expenses.repositories import ExpenseRepository
from smartspend.infrastructure.db import session_scope
from smartspend.infrastructure.db.models import Expense
from smartspend.shared.logging import logger


def _to_domain(row: Expense) -> DomainExpense:
    return DomainExpense(
        id=row.public_id,
        owner_id=row.owner_id,
        fields=ExpenseFields(
            amount=row.amount,
            category=row.category,
            date=row.date,
            note=row.note or "",
            description=row.description or "",
        ),
    )


def _apply(row: Expense, fields: ExpenseFields) -> None:
    row.amount = fields.amount
    row.category = fields.category.value
    row.date = fields.date
    row.note = fields.note
    row.description = fields.description


class SqlAlchemyExpenseRepository(ExpenseRepository):
    """Every query is filtered by owner; other owners' rows are invisible."""

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    @staticmethod
    def _owned(session: Session, owner_id: str, expense_id: str) -> Expense | None:
        return (
            session.query(Expense)
            .filter(Expense.public_id == expense_id, Expense.owner_id == owner_id)
            .first()
        )

    def list_for_owner(self, owner_id: str) -> Sequence[DomainExpense]:
        with session_scope(self._session_factory) as session:
            rows = (
                session.query(Expense)
                .filter(Expense.owner_id == owner_id)
                .order_by(Expense.pk.asc())
                .all()
            )
            return [_to_domain(row) for row in rows]

    def add(self, owner_id: str, fields: ExpenseFields) -> DomainExpense:
        with session_scope(self._session_factory) as session:
            row = Expense(owner_id=owner_id)
            _apply(row, fields)
            session.add(row)
            session.flush()
            logger.debug(f"expenses.add: owner_id={owner_id} id={row.public_id}")
            return _to_domain(row)

    def update(
        self, owner_id: str, expense_id: str, fields: ExpenseFields
    ) -> DomainExpense | None:
        with session_scope(self._session_factory) as session:
            row = self._owned(session, owner_id, expense_id)
            if row is None:
                return None
            _apply(row, fields)
            session.flush()
            return _to_domain(row)

    def delete(self, owner_id: str, expense_id: str) -> bool:
        with session_scope(self._session_factory) as session:
            row = self._owned(session, owner_id, expense_id)
            if row is None:
                return False
            session.delete(row)
            return True
