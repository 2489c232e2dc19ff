# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .auth_controller import AuthController
from .expenses_controller import ExpensesController
from .misc_controller import MiscController

__all__ = ["AuthController", "ExpensesController", "MiscController"]
