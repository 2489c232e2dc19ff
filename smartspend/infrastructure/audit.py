# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Trail of authentication events (signups, logins, token refreshes)."""

from __future__ import annotations

import json
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from smartspend.infrastructure.db.models import AuditLog
from smartspend.infrastructure.db.session import session_scope
from smartspend.shared.logging import get_correlation_id, logger

_SECRET_MARKERS = ("password", "token", "secret", "hash")


class AuditAction(str, Enum):
    SIGNUP = "signup"
    LOGIN_SUCCESS = "login_success"
    LOGIN_FAILED = "login_failed"
    TOKEN_REFRESHED = "token_refreshed"


@dataclass(frozen=True, slots=True)
class AuditEvent:
    action: AuditAction
    success: bool
    user_id: str | None = None
    ip_address: str | None = None
    details: Mapping[str, Any] = field(default_factory=dict)
    at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def safe_details(self) -> dict[str, Any]:
        return {
            key: "<redacted>" if any(marker in key.lower() for marker in _SECRET_MARKERS) else value
            for key, value in self.details.items()
        }

    def summary(self) -> str:
        return (
            f"audit: {self.action.value} success={self.success} "
            f"user={self.user_id or '-'} ip={self.ip_address or '-'}"
        )


class AuditLogger:
    """Emits each event as a log line and, with a session factory, as an ``audit_logs`` row.

    Storage failures are logged and dropped so a successful login never
    turns into a 500.
    """

    def __init__(self, session_factory: Callable[[], Session] | None = None) -> None:
        self._session_factory = session_factory

    def log(
        self,
        action: AuditAction,
        user_id: str | None = None,
        ip_address: str | None = None,
        details: Mapping[str, Any] | None = None,
        success: bool = True,
    ) -> AuditEvent:
        event = AuditEvent(
            action=action,
            success=success,
            user_id=user_id,
            ip_address=ip_address,
            details=dict(details or {}),
        )
        (logger.info if success else logger.warning)(event.summary())
        if self._session_factory is not None:
            self._persist(event)
        return event

    def _persist(self, event: AuditEvent) -> None:
        details = event.safe_details()
        correlation_id = get_correlation_id()
        if correlation_id != "-":
            details["request_id"] = correlation_id
        try:
            with session_scope(self._session_factory) as session:
                session.add(
                    AuditLog(
                        timestamp=event.at,
                        action=event.action.value,
                        user_id=event.user_id,
                        ip_address=event.ip_address,
                        success=event.success,
                        details_json=json.dumps(details, default=str) if details else None,
                    )
                )
        except SQLAlchemyError as exc:
            logger.warning(f"audit: {event.action.value} not stored ({type(exc).__name__})")


__all__ = ["AuditAction", "AuditEvent", "AuditLogger"]
