# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .entities import IssuedToken, SessionIdentity, User
from .exceptions import DuplicateEmailError, InvalidCredentialsError, InvalidTokenError
from .repositories import PasswordHasher, TokenService, UserRepository

__all__ = [
    "DuplicateEmailError",
    "InvalidCredentialsError",
    "InvalidTokenError",
    "IssuedToken",
    "PasswordHasher",
    "SessionIdentity",
    "TokenService",
    "User",
    "UserRepository",
]
