from __future__ import annotations

import json
from collections.abc import Iterator
from pathlib import Path

import httpx
import pytest
from flask import Flask

from smartspend.app import create_app
from smartspend.shared.config import AppConfig, ClientConfig, DatabaseConfig, SecurityConfig

TEST_SECRET = "test-secret-key-with-enough-length-0123456789"


@pytest.fixture()
def app_config(tmp_path: Path) -> AppConfig:
    return AppConfig(
        APP_ENV="testing",
        SECRET_KEY=TEST_SECRET,
        database=DatabaseConfig(DATABASE_URL=f"sqlite:///{tmp_path / 'smartspend.db'}"),
        security=SecurityConfig(ENABLE_RATE_LIMIT=False),
    )


@pytest.fixture()
def app(app_config: AppConfig) -> Iterator[Flask]:
    flask_app = create_app(app_config)
    yield flask_app
    flask_app.extensions["smartspend.container"].dispose()



class FakeApiServer:
    """In-memory stand-in for the HTTP API, served through httpx.MockTransport."""

    def __init__(self) -> None:
        self.expenses: dict[str, dict] = {}
        self.users: dict[str, dict] = {}
        self.tokens: dict[str, dict] = {}
        self.online = True
        self.failing_methods: set[str] = set()
        self.queued_rejections: list[tuple[int, dict]] = []
        self.requests: list[tuple[str, str]] = []
        self._seq = 0

    def _next(self) -> int:
        self._seq += 1
        return self._seq

    def add_user(self, name: str = "Ana", email: str = "ana@example.com", password: str = "pw123") -> str:
        user = {"id": f"user{self._next()}", "email": email, "name": name}
        self.users[email] = {"password": password, "user": user}
        return self._issue(user)

    def _issue(self, user: dict) -> str:
        token = f"token-{self._next()}"
        self.tokens[token] = user
        return token

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append((request.method, request.url.path))
        if not self.online or request.method in self.failing_methods:
            raise httpx.ConnectError("connection refused", request=request)

        path = request.url.path.removeprefix("/api/")
        if path.startswith("auth/"):
            return self._handle_auth(request, path.removeprefix("auth/"))

        token = request.headers.get("Authorization", "").removeprefix("Bearer ")
        if token not in self.tokens:
            return httpx.Response(401, json={"error": "invalid_token"})
        if request.method != "GET" and self.queued_rejections:
            status, body = self.queued_rejections.pop(0)
            return httpx.Response(status, json=body)

        if path == "expenses":
            if request.method == "GET":
                return httpx.Response(200, json={"expenses": list(self.expenses.values())})
            record = {"id": f"srv-{self._next()}", **json.loads(request.content)}
            self.expenses[record["id"]] = record
            return httpx.Response(200, json={"expense": record})

        expense_id = path.removeprefix("expenses/")
        if expense_id not in self.expenses:
            return httpx.Response(
                404, json={"error": "expense_not_found", "context": {"expense_id": expense_id}}
            )
        if request.method == "PUT":
            record = {"id": expense_id, **json.loads(request.content)}
            self.expenses[expense_id] = record
            return httpx.Response(200, json={"expense": record})
        del self.expenses[expense_id]
        return httpx.Response(200, json={"success": True})

    def _handle_auth(self, request: httpx.Request, action: str) -> httpx.Response:
        if action in ("signup", "login"):
            body = json.loads(request.content)
            known = self.users.get(body["email"])
            if action == "signup":
                if known is not None:
                    return httpx.Response(400, json={"error": "duplicate_email"})
                token = self.add_user(body["name"], body["email"], body["password"])
                return httpx.Response(200, json={"token": token, "user": self.tokens[token]})
            if known is None or known["password"] != body["password"]:
                return httpx.Response(400, json={"error": "invalid_credentials"})
            token = self._issue(known["user"])
            return httpx.Response(200, json={"token": token, "user": known["user"]})

        token = request.headers.get("Authorization", "").removeprefix("Bearer ")
        user = self.tokens.get(token)
        if user is None:
            return httpx.Response(401, json={"error": "invalid_token"})
        if action == "verify":
            return httpx.Response(200, json={"user": user})
        new_token = self._issue(user)
        return httpx.Response(200, json={"token": new_token, "user": user})


@pytest.fixture()
def fake_server() -> FakeApiServer:
    return FakeApiServer()


@pytest.fixture()
def client_config(tmp_path: Path) -> ClientConfig:
    return ClientConfig(
        SMARTSPEND_API_URL="http://testserver/api",
        SMARTSPEND_CACHE_DIR=tmp_path / "cache",
        CLIENT_SYNC_RETRIES=2,
        CLIENT_BACKOFF_BASE=0,
        CLIENT_CIRCUIT_THRESHOLD=100,
    )
