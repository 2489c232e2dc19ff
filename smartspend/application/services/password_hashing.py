# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Password hashing strategies."""

from __future__ import annotations

from werkzeug.security import check_password_hash, generate_password_hash

from smartspend.domain.users.repositories import PasswordHasher


class WerkzeugPasswordHasher(PasswordHasher):
    """Salted, deliberately slow hashing backed by werkzeug (scrypt by default)."""

    def __init__(self, method: str | None = None) -> None:
        self._method = method
        self._dummy_hash: str | None = None

    def hash(self, password: str) -> str:
        if self._method:
            return str(generate_password_hash(password, method=self._method))
        return str(generate_password_hash(password))

    def verify(self, password: str, hashed: str) -> bool:
        return bool(check_password_hash(hashed, password))

    def burn(self, password: str) -> None:
        """Spend one verification worth of work against a throwaway hash.

        Used when the account does not exist so an unknown email costs the
        same as a wrong password.
        """

        if self._dummy_hash is None:
            self._dummy_hash = self.hash("smartspend-dummy-password")
        check_password_hash(self._dummy_hash, password)
