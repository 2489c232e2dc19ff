# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from smartspend.domain.users.entities import IssuedToken, SessionIdentity
from smartspend.domain.users.exceptions import InvalidCredentialsError
from smartspend.domain.users.repositories import PasswordHasher, TokenService, UserRepository


class LoginUserUseCase:
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

    def execute(self, email: str, password: str) -> IssuedToken:
        user = self._users.find_by_email(email)
        if user is None:
            self._password_hasher.burn(password)
            raise InvalidCredentialsError()

        if not self._password_hasher.verify(password, user.password_hash):
            raise InvalidCredentialsError()

        return self._tokens.issue(SessionIdentity.for_user(user))
