# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Async HTTP client for the SmartSpend API."""

from __future__ import annotations

from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from smartspend.client.errors import NetworkFailure, error_from_response
from smartspend.client.models import AuthResult, ExpenseData, ExpenseRecord, SessionUser
from smartspend.client.resilience import CircuitBreaker
from smartspend.shared.config import ClientConfig
from smartspend.shared.logging import get_correlation_id, get_logger

logger = get_logger("client")


class ExpenseApiClient:
    def __init__(
        self,
        config: ClientConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        breaker: CircuitBreaker | None = None,
    ) -> None:
        self._config = config
        self._breaker = breaker or CircuitBreaker.from_config(config)
        self._http = httpx.AsyncClient(
            base_url=config.api_base_url.rstrip("/") + "/",
            timeout=config.request_timeout,
            transport=transport,
        )

    @property
    def breaker(self) -> CircuitBreaker:
        return self._breaker

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> ExpenseApiClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        token: str | None = None,
        json: dict[str, Any] | None = None,
    ) -> Any:
        if not self._breaker.allow():
            raise NetworkFailure("circuit breaker is open")

        headers: dict[str, str] = {}
        correlation_id = get_correlation_id()
        if correlation_id != "-":
            headers["X-Request-ID"] = correlation_id
        if token:
            headers["Authorization"] = f"Bearer {token}"
        try:
            response = await self._http.request(method, path, json=json, headers=headers)
        except httpx.TimeoutException as exc:
            self._breaker.on_failure()
            logger.warning("api: {} {} timed out", method, path)
            raise NetworkFailure(f"request timed out: {exc}") from exc
        except httpx.TransportError as exc:
            self._breaker.on_failure()
            logger.warning("api: {} {} transport error: {}", method, path, exc)
            raise NetworkFailure(f"server unreachable: {exc}") from exc

        if response.status_code >= 500:
            self._breaker.on_failure()
            logger.warning("api: {} {} -> {}", method, path, response.status_code)
            raise NetworkFailure(
                f"server error {response.status_code}", status=response.status_code
            )

        self._breaker.on_success()
        try:
            body = response.json()
        except ValueError:
            body = None

        if response.status_code >= 400:
            logger.info("api: {} {} rejected with {}", method, path, response.status_code)
            raise error_from_response(response.status_code, body)
        return body

    @staticmethod
    def _parse(model: type, body: Any, key: str | None = None) -> Any:
        try:
            value = body[key] if key is not None else body
            return model.model_validate(value)
        except (KeyError, TypeError, PydanticValidationError) as exc:
            raise NetworkFailure(f"malformed response: {exc}") from exc

    # Auth -------------------------------------------------------------------

    async def signup(self, name: str, email: str, password: str) -> AuthResult:
        body = await self._request(
            "POST", "auth/signup", json={"name": name, "email": email, "password": password}
        )
        return self._parse(AuthResult, body)

    async def login(self, email: str, password: str) -> AuthResult:
        body = await self._request("POST", "auth/login", json={"email": email, "password": password})
        return self._parse(AuthResult, body)

    async def verify(self, token: str) -> SessionUser:
        body = await self._request("GET", "auth/verify", token=token)
        return self._parse(SessionUser, body, "user")

    async def refresh(self, token: str) -> AuthResult:
        body = await self._request("POST", "auth/refresh", token=token)
        return self._parse(AuthResult, body)

    # Expenses ---------------------------------------------------------------

    async def list_expenses(self, token: str) -> list[ExpenseRecord]:
        body = await self._request("GET", "expenses", token=token)
        try:
            items = body["expenses"]
            return [ExpenseRecord.model_validate(item) for item in items]
        except (KeyError, TypeError, PydanticValidationError) as exc:
            raise NetworkFailure(f"malformed response: {exc}") from exc

    async def create_expense(self, token: str, data: ExpenseData) -> ExpenseRecord:
        body = await self._request(
            "POST", "expenses", token=token, json=data.model_dump(mode="json")
        )
        return self._parse(ExpenseRecord, body, "expense")

    async def update_expense(self, token: str, expense_id: str, data: ExpenseData) -> ExpenseRecord:
        body = await self._request(
            "PUT", f"expenses/{expense_id}", token=token, json=data.model_dump(mode="json")
        )
        return self._parse(ExpenseRecord, body, "expense")

    async def delete_expense(self, token: str, expense_id: str) -> None:
        await self._request("DELETE", f"expenses/{expense_id}", token=token)


__all__ = ["ExpenseApiClient"]
