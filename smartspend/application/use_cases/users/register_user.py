# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from smartspend.domain.users.entities import IssuedToken, SessionIdentity, User
from smartspend.domain.users.exceptions import DuplicateEmailError
from smartspend.domain.users.repositories import PasswordHasher, TokenService, UserRepository


class RegisterUserUseCase:
    """Create an account and sign it in straight away."""

    def __init__(
        self,
        *,
        users: UserRepository,
        tokens: TokenService,
        password_hasher: PasswordHasher,
    ) -> None:
        self._users = users
        self._tokens = tokens
        self._password_hasher = password_hasher

    def execute(self, name: str, email: str, password: str) -> tuple[User, IssuedToken]:
        existing = self._users.find_by_email(email)
        if existing:
            raise DuplicateEmailError()
        hashed = self._password_hasher.hash(password)
        user = User(
            id=uuid.uuid4().hex,
            name=name,
            email=email,
            password_hash=hashed,
            created_at=datetime.now(UTC),
        )
        persisted = self._users.add(user)
        issued = self._tokens.issue(SessionIdentity.for_user(persisted))
        return persisted, issued
