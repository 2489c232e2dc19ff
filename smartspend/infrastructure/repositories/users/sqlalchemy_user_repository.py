# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from smartspend.domain.users.entities import User as DomainUser
from smartspend.domain.users.exceptions import DuplicateEmailError
from smartspend.domain.users.repositories import UserRepository
from smartspend.infrastructure.db import session_scope
from smartspend.infrastructure.db.models import User


def _to_domain(row: User) -> DomainUser:
    created_at = row.created_at
    if created_at is not None and created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=UTC)
    return DomainUser(
        id=row.id,
        name=row.name,
        email=row.email,
        password_hash=row.password_hash,
        created_at=created_at,
    )


class SqlAlchemyUserRepository(UserRepository):
    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    def find_by_email(self, email: str) -> DomainUser | None:
        with session_scope(self._session_factory) as session:
            row = session.query(User).filter(User.email == email).first()
            return _to_domain(row) if row else None

    def find_by_id(self, user_id: str) -> DomainUser | None:
        with session_scope(self._session_factory) as session:
            row = session.get(User, user_id)
            return _to_domain(row) if row else None

    def add(self, user: DomainUser) -> DomainUser:
        try:
            with session_scope(self._session_factory) as session:
                row = User(
                    id=user.id,
                    name=user.name,
                    email=user.email,
                    password_hash=user.password_hash,
                    created_at=user.created_at,
                )
                session.add(row)
                session.flush()
                return _to_domain(row)
        except IntegrityError as exc:
            # Lost a race with a concurrent signup for the same email.
            raise DuplicateEmailError() from exc
