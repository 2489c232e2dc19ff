from __future__ import annotations

import json
from pathlib import Path

from sqlalchemy import select

from smartspend.infrastructure.audit import AuditAction, AuditLogger
from smartspend.infrastructure.db import build_engine, build_session_factory, init_db
from smartspend.infrastructure.db.models import AuditLog
from smartspend.shared.config import DatabaseConfig
from smartspend.shared.logging import correlation_scope


def test_events_are_stored_without_secrets(tmp_path: Path) -> None:
    engine = build_engine(DatabaseConfig(DATABASE_URL=f"sqlite:///{tmp_path / 'audit.db'}"))
    init_db(engine)
    factory = build_session_factory(engine)
    audit = AuditLogger(factory)

    with correlation_scope("req-9"):
        audit.log(
            AuditAction.LOGIN_FAILED,
            ip_address="10.0.0.1",
            details={"email": "ana@example.com", "password": "hunter2"},
            success=False,
        )
    audit.log(AuditAction.SIGNUP, user_id="u1")

    with factory() as session:
        rows = session.scalars(select(AuditLog).order_by(AuditLog.id)).all()
    factory.remove()
    engine.dispose()

    assert [row.action for row in rows] == ["login_failed", "signup"]
    assert rows[0].success is False
    details = json.loads(rows[0].details_json)
    assert details == {"email": "ana@example.com", "password": "<redacted>", "request_id": "req-9"}
    assert rows[1].details_json is None


def test_without_storage_only_logs() -> None:
    event = AuditLogger().log(AuditAction.TOKEN_REFRESHED, user_id="u1")

    assert event.success
    assert "token_refreshed" in event.summary()
