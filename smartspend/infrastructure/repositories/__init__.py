# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .expenses import SqlAlchemyExpenseRepository
from .users import SqlAlchemyUserRepository

__all__ = ["SqlAlchemyExpenseRepository", "SqlAlchemyUserRepository"]
