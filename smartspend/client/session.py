# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Explicit session object owning the token and the per-user cache."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

from smartspend.client.api import ExpenseApiClient
from smartspend.client.cache import SyncCache
from smartspend.client.errors import NetworkFailure
from smartspend.client.local_store import LocalMirror, SessionStore
from smartspend.client.models import AuthResult, SessionUser, StoredSession
from smartspend.domain.users.exceptions import InvalidTokenError
from smartspend.shared.config import ClientConfig
from smartspend.shared.logging import get_logger

logger = get_logger("client")


class SessionContext:
    def __init__(
        self,
        api: ExpenseApiClient,
        config: ClientConfig,
        *,
        on_notice: Callable[[str], None] | None = None,
    ) -> None:
        self._api = api
        self._config = config
        self._on_notice = on_notice
        self._store = SessionStore(Path(config.cache_dir))
        self._token: str | None = None
        self._user: SessionUser | None = None
        self._cache: SyncCache | None = None
        self.offline = False

    @property
    def user(self) -> SessionUser | None:
        return self._user

    @property
    def token(self) -> str | None:
        return self._token

    @property
    def is_authenticated(self) -> bool:
        return self._token is not None and self._user is not None

    @property
    def cache(self) -> SyncCache:
        if not self.is_authenticated:
            raise InvalidTokenError(context={"reason": "not_signed_in"})
        if self._cache is None:
            assert self._user is not None
            mirror = LocalMirror(Path(self._config.cache_dir), self._user.id)
            self._cache = SyncCache(
                self._api,
                mirror,
                lambda: self._token,
                config=self._config,
                on_notice=self._on_notice,
            )
        return self._cache

    async def restore(self) -> SessionUser | None:
        """Resume a stored session, verifying and refreshing its token.

        When the server cannot be reached the stored identity is trusted so
        the local mirror stays usable; an explicitly rejected token is
        discarded.
        """
        stored = self._store.load()
        if stored is None:
            return None

        try:
            user = await self._api.verify(stored.token)
        except InvalidTokenError:
            logger.info("session: stored token rejected, signing out")
            self._store.clear()
            return None
        except NetworkFailure:
            logger.warning("session: server unreachable, restoring offline")
            self._set(stored.token, stored.user, persist=False)
            self.offline = True
            return stored.user

        self._set(stored.token, user)
        self.offline = False
        try:
            await self.refresh()
        except NetworkFailure:
            logger.warning("session: token refresh skipped, server unreachable")
        return self._user

    async def signup(self, name: str, email: str, password: str) -> SessionUser:
        result = await self._api.signup(name, email, password)
        return self._adopt(result)

    async def login(self, email: str, password: str) -> SessionUser:
        result = await self._api.login(email, password)
        return self._adopt(result)

    async def refresh(self) -> None:
        if self._token is None:
            raise InvalidTokenError(context={"reason": "not_signed_in"})
        result = await self._api.refresh(self._token)
        self._adopt(result)

    def logout(self) -> None:
        if self._cache is not None:
            self._cache.close()
        self._cache = None
        self._token = None
        self._user = None
        self.offline = False
        self._store.clear()
        logger.info("session: signed out")

    def _adopt(self, result: AuthResult) -> SessionUser:
        self.offline = False
        self._set(result.token, result.user)
        return result.user

    def _set(self, token: str, user: SessionUser, *, persist: bool = True) -> None:
        if self._user is not None and self._user.id != user.id and self._cache is not None:
            self._cache.close()
            self._cache = None
        self._token = token
        self._user = user
        if persist:
            self._store.save(StoredSession(token=token, user=user))


__all__ = ["SessionContext"]
