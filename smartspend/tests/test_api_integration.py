from __future__ import annotations

from datetime import UTC, datetime, timedelta

from flask import Flask
from sqlalchemy import func, select

from smartspend.application.services import JwtTokenService
from smartspend.domain.users.entities import SessionIdentity
from smartspend.infrastructure.db.models import User

def _signup(client, name="Ana", email="ana@example.com", password="pw123"):
    return client.post(
        "/api/auth/signup", json={"name": name, "email": email, "password": password}
    )


def _auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def _lunch(amount=50, category="food"):
    return {"amount": amount, "category": category, "date": "2024-03-01", "note": ""}


def test_expense_lifecycle_for_single_user(app: Flask) -> None:
    with app.test_client() as client:
        signup = _signup(client)
        assert signup.status_code == 200
        token = signup.get_json()["token"]

        verify = client.get("/api/auth/verify", headers=_auth(token))
        assert verify.get_json()["user"]["email"] == "ana@example.com"

        created = client.post("/api/expenses", json=_lunch(), headers=_auth(token))
        assert created.status_code == 200
        expense = created.get_json()["expense"]
        assert expense["id"]
        assert expense["amount"] == 50.0
        assert expense["category"] == "food"

        listed = client.get("/api/expenses", headers=_auth(token)).get_json()["expenses"]
        assert [item["id"] for item in listed] == [expense["id"]]

        updated = client.put(
            f"/api/expenses/{expense['id']}", json=_lunch(amount=75), headers=_auth(token)
        )
        assert updated.status_code == 200
        listed = client.get("/api/expenses", headers=_auth(token)).get_json()["expenses"]
        assert listed[0]["amount"] == 75.0

        deleted = client.delete(f"/api/expenses/{expense['id']}", headers=_auth(token))
        assert deleted.get_json() == {"success": True}
        assert client.get("/api/expenses", headers=_auth(token)).get_json() == {"expenses": []}

        again = client.delete(f"/api/expenses/{expense['id']}", headers=_auth(token))
        assert again.status_code == 404
        assert again.get_json()["error"] == "expense_not_found"


def test_records_are_isolated_between_users(app: Flask) -> None:
    with app.test_client() as client:
        ana = _signup(client).get_json()["token"]
        bob = _signup(client, name="Bob", email="bob@example.com").get_json()["token"]

        expense_id = client.post(
            "/api/expenses", json=_lunch(), headers=_auth(ana)
        ).get_json()["expense"]["id"]

        assert client.get("/api/expenses", headers=_auth(bob)).get_json() == {"expenses": []}
        hijack = client.put(f"/api/expenses/{expense_id}", json=_lunch(1), headers=_auth(bob))
        assert hijack.status_code == 404
        assert client.delete(f"/api/expenses/{expense_id}", headers=_auth(bob)).status_code == 404

        mine = client.get("/api/expenses", headers=_auth(ana)).get_json()["expenses"]
        assert mine[0]["amount"] == 50.0


def test_duplicate_signup_is_rejected_without_second_user(app: Flask) -> None:
    with app.test_client() as client:
        assert _signup(client).status_code == 200
        duplicate = _signup(client, name="Ana Two", password="other")

    assert duplicate.status_code == 400
    assert duplicate.get_json() == {"error": "duplicate_email"}

    container = app.extensions["smartspend.container"]
    session = container.session_factory()
    try:
        assert session.scalar(select(func.count()).select_from(User)) == 1
    finally:
        container.session_factory.remove()


def test_login_failures_look_identical(app: Flask) -> None:
    with app.test_client() as client:
        _signup(client)
        wrong_password = client.post(
            "/api/auth/login", json={"email": "ana@example.com", "password": "nope"}
        )
        unknown_email = client.post(
            "/api/auth/login", json={"email": "nobody@example.com", "password": "nope"}
        )
        ok = client.post("/api/auth/login", json={"email": "ana@example.com", "password": "pw123"})

    assert wrong_password.status_code == unknown_email.status_code == 400
    assert wrong_password.get_json() == unknown_email.get_json() == {"error": "invalid_credentials"}
    assert ok.status_code == 200
    assert ok.get_json()["user"]["name"] == "Ana"


def test_missing_or_bad_token_is_unauthorized(app: Flask) -> None:
    with app.test_client() as client:
        assert client.get("/api/expenses").status_code == 401
        bad = client.get("/api/expenses", headers=_auth("garbage"))
        assert bad.status_code == 401
        assert bad.get_json()["error"] == "invalid_token"
        assert client.get("/api/auth/verify").status_code == 401


def test_expired_token_is_rejected(app: Flask) -> None:
    long_ago = datetime.now(UTC) - timedelta(days=30)
    stale_issuer = JwtTokenService(
        secret_key=app.config["SECRET_KEY"], ttl_seconds=3600, clock=lambda: long_ago
    )
    with app.test_client() as client:
        user = _signup(client).get_json()["user"]
        expired = stale_issuer.issue(
            SessionIdentity(user_id=user["id"], email=user["email"], name=user["name"])
        ).token

        response = client.get("/api/expenses", headers=_auth(expired))
        assert response.status_code == 401
        assert response.get_json() == {"error": "invalid_token", "context": {"reason": "expired"}}
        assert client.post("/api/auth/refresh", headers=_auth(expired)).status_code == 401


def test_refresh_issues_working_token(app: Flask) -> None:
    with app.test_client() as client:
        token = _signup(client).get_json()["token"]
        refreshed = client.post("/api/auth/refresh", headers=_auth(token))
        assert refreshed.status_code == 200
        new_token = refreshed.get_json()["token"]
        assert client.get("/api/expenses", headers=_auth(new_token)).status_code == 200


def test_invalid_expense_payloads_are_rejected(app: Flask) -> None:
    with app.test_client() as client:
        token = _signup(client).get_json()["token"]
        negative = client.post("/api/expenses", json=_lunch(amount=-1), headers=_auth(token))
        unknown = client.post(
            "/api/expenses", json=_lunch(category="groceries"), headers=_auth(token)
        )
        bad_date = client.post(
            "/api/expenses",
            json={"amount": 5, "category": "food", "date": "yesterday"},
            headers=_auth(token),
        )

        assert negative.status_code == unknown.status_code == bad_date.status_code == 422
        assert negative.get_json()["context"]["fields"] == {"amount": "greater_than_equal"}
        assert "category" in unknown.get_json()["context"]["fields"]
        assert client.get("/api/expenses", headers=_auth(token)).get_json() == {"expenses": []}


def test_category_is_normalized_and_id_in_body_ignored(app: Flask) -> None:
    with app.test_client() as client:
        token = _signup(client).get_json()["token"]
        body = {**_lunch(category="Transport"), "id": "forged"}
        expense = client.post("/api/expenses", json=body, headers=_auth(token)).get_json()["expense"]

    assert expense["category"] == "transport"
    assert expense["id"] != "forged"


def test_health_and_request_id(app: Flask) -> None:
    with app.test_client() as client:
        response = client.get("/api/health", headers={"X-Request-ID": "req-42"})

    assert response.status_code == 200
    assert response.headers["X-Request-ID"] == "req-42"
    assert response.headers["X-Content-Type-Options"] == "nosniff"
