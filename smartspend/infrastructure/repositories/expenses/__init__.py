# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .sqlalchemy_expense_repository import SqlAlchemyExpenseRepository

__all__ = ["SqlAlchemyExpenseRepository"]
