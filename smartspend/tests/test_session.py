from __future__ import annotations

import asyncio
from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest

from smartspend.client import ExpenseApiClient, ExpenseData, SessionContext
from smartspend.domain.users import InvalidCredentialsError, InvalidTokenError


def _context(fake_server, client_config) -> SessionContext:
    api = ExpenseApiClient(client_config, transport=fake_server.transport())
    return SessionContext(api, client_config)


def test_signup_then_restore_refreshes_token(fake_server, client_config) -> None:
    async def scenario() -> None:
        first = _context(fake_server, client_config)
        user = await first.signup("Ana", "ana@example.com", "pw123")
        assert first.is_authenticated
        original_token = first.token

        second = _context(fake_server, client_config)
        restored = await second.restore()

        assert restored == user
        assert second.token != original_token
        assert second.token in fake_server.tokens
        assert not second.offline

    asyncio.run(scenario())


def test_restore_without_stored_session(fake_server, client_config) -> None:
    async def scenario() -> None:
        context = _context(fake_server, client_config)
        assert await context.restore() is None
        assert not context.is_authenticated
        with pytest.raises(InvalidTokenError):
            context.cache

    asyncio.run(scenario())


def test_rejected_stored_token_is_discarded(fake_server, client_config) -> None:
    async def scenario() -> None:
        context = _context(fake_server, client_config)
        await context.signup("Ana", "ana@example.com", "pw123")
        fake_server.tokens.clear()

        fresh = _context(fake_server, client_config)
        assert await fresh.restore() is None
        assert not (Path(client_config.cache_dir) / "session.json").exists()

    asyncio.run(scenario())


def test_restore_offline_keeps_local_identity(fake_server, client_config) -> None:
    async def scenario() -> None:
        context = _context(fake_server, client_config)
        user = await context.signup("Ana", "ana@example.com", "pw123")
        fake_server.online = False

        fresh = _context(fake_server, client_config)
        assert await fresh.restore() == user
        assert fresh.offline

        result = await fresh.cache.create(
            ExpenseData(amount=Decimal("9.99"), category="transport", date=date(2024, 3, 2))
        )
        assert not result.synced
        assert result.entry.id.startswith("local-")

    asyncio.run(scenario())


def test_login_failure_leaves_session_empty(fake_server, client_config) -> None:
    fake_server.add_user()

    async def scenario() -> None:
        context = _context(fake_server, client_config)
        with pytest.raises(InvalidCredentialsError):
            await context.login("ana@example.com", "wrong")
        assert not context.is_authenticated

    asyncio.run(scenario())


def test_logout_closes_cache_and_forgets_token(fake_server, client_config) -> None:
    fake_server.add_user()

    async def scenario() -> None:
        context = _context(fake_server, client_config)
        await context.login("ana@example.com", "pw123")
        cache = context.cache
        assert context.cache is cache

        context.logout()

        assert context.token is None
        assert context.user is None
        with pytest.raises(RuntimeError):
            await cache.load()
        assert await _context(fake_server, client_config).restore() is None

    asyncio.run(scenario())


def test_each_user_gets_own_mirror(fake_server, client_config) -> None:
    fake_server.add_user()
    fake_server.add_user(name="Bob", email="bob@example.com")

    async def scenario() -> None:
        context = _context(fake_server, client_config)
        await context.login("ana@example.com", "pw123")
        context.cache.set_monthly_budget("2024-03", Decimal("100"))
        context.logout()

        await context.login("bob@example.com", "pw123")
        assert context.cache.monthly_budget("2024-03") is None

    asyncio.run(scenario())
