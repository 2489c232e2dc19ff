# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from typing import Protocol

from .entities import IssuedToken, SessionIdentity, User


class UserRepository(Protocol):
    def find_by_email(self, email: str) -> User | None: ...
    def find_by_id(self, user_id: str) -> User | None: ...
    def add(self, user: User) -> User: ...


class TokenService(Protocol):
    def issue(self, identity: SessionIdentity) -> IssuedToken: ...
    def verify(self, token: str) -> SessionIdentity: ...


class PasswordHasher(Protocol):
    def hash(self, password: str) -> str: ...
    def verify(self, password: str, hashed: str) -> bool: ...
    def burn(self, password: str) -> None:
        """Spend one verification worth of work without a stored hash."""
        ...
