# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(slots=True, frozen=True)
class User:

    id: str
    name: str
    email: str
    password_hash: str
    created_at: datetime


@dataclass(slots=True, frozen=True)
class SessionIdentity:
    """Identity asserted by a verified session token."""

    user_id: str
    email: str
    name: str
    expires_at: datetime | None = None

    @classmethod
    def for_user(cls, user: User) -> SessionIdentity:
        return cls(user_id=user.id, email=user.email, name=user.name)

    def to_public(self) -> dict[str, str]:
        return {"id": self.user_id, "email": self.email, "name": self.name}


@dataclass(slots=True, frozen=True)
class IssuedToken:

    token: str
    identity: SessionIdentity
    expires_at: datetime
