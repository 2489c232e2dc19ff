# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .login_user import LoginUserUseCase
from .register_user import RegisterUserUseCase
from .verify_session import RefreshSessionUseCase, VerifySessionUseCase

__all__ = [
    "LoginUserUseCase",
    "RefreshSessionUseCase",
    "RegisterUserUseCase",
    "VerifySessionUseCase",
]
