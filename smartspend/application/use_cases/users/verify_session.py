# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Use-cases for restoring and extending a session from a presented token."""

from __future__ import annotations

from smartspend.domain.users.entities import IssuedToken, SessionIdentity
from smartspend.domain.users.repositories import TokenService


class VerifySessionUseCase:
    def __init__(self, *, tokens: TokenService) -> None:
        self._tokens = tokens

    def execute(self, token: str) -> SessionIdentity:
        return self._tokens.verify(token)


class RefreshSessionUseCase:
    def __init__(self, *, tokens: TokenService) -> None:
        self._tokens = tokens

    def execute(self, token: str) -> IssuedToken:
        identity = self._tokens.verify(token)
        return self._tokens.issue(identity)
