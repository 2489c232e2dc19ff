from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from smartspend.application.services import JwtTokenService, WerkzeugPasswordHasher
from smartspend.domain.users.entities import SessionIdentity
from smartspend.domain.users.exceptions import InvalidTokenError

SECRET = "unit-test-secret-0123456789abcdef0123456789"
IDENTITY = SessionIdentity(user_id="u1", email="ana@example.com", name="Ana")


class FakeClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 3, 1, 12, 0, tzinfo=UTC))


def test_issued_token_verifies_to_identity(clock) -> None:
    service = JwtTokenService(secret_key=SECRET, ttl_seconds=3600, clock=clock)

    issued = service.issue(IDENTITY)
    verified = service.verify(issued.token)

    assert verified.user_id == "u1"
    assert verified.email == "ana@example.com"
    assert verified.name == "Ana"
    assert issued.expires_at == clock.now + timedelta(hours=1)


def test_token_expires_against_injected_clock(clock) -> None:
    service = JwtTokenService(secret_key=SECRET, ttl_seconds=3600, clock=clock)
    issued = service.issue(IDENTITY)

    clock.now += timedelta(minutes=59)
    assert service.verify(issued.token).user_id == "u1"

    clock.now += timedelta(minutes=1)
    with pytest.raises(InvalidTokenError) as exc_info:
        service.verify(issued.token)
    assert exc_info.value.context == {"reason": "expired"}


@pytest.mark.parametrize("token", ["", "not-a-jwt", "a.b.c"])
def test_malformed_tokens_are_rejected(clock, token: str) -> None:
    service = JwtTokenService(secret_key=SECRET, ttl_seconds=3600, clock=clock)
    with pytest.raises(InvalidTokenError):
        service.verify(token)


def test_token_signed_with_other_secret_is_rejected(clock) -> None:
    issuer = JwtTokenService(secret_key="another-secret-0123456789abcdef01", ttl_seconds=60, clock=clock)
    verifier = JwtTokenService(secret_key=SECRET, ttl_seconds=60, clock=clock)

    with pytest.raises(InvalidTokenError):
        verifier.verify(issuer.issue(IDENTITY).token)


def test_tampered_token_is_rejected(clock) -> None:
    service = JwtTokenService(secret_key=SECRET, ttl_seconds=60, clock=clock)
    header, payload, signature = service.issue(IDENTITY).token.split(".")
    tampered = ".".join([header, payload, signature[:-2] + ("AA" if signature[-2:] != "AA" else "BB")])

    with pytest.raises(InvalidTokenError):
        service.verify(tampered)


def test_empty_secret_is_refused() -> None:
    with pytest.raises(ValueError):
        JwtTokenService(secret_key="", ttl_seconds=60)


def test_password_hasher_round_trip() -> None:
    hasher = WerkzeugPasswordHasher(method="pbkdf2:sha256:1000")
    hashed = hasher.hash("pw123")

    assert hashed != "pw123"
    assert hasher.verify("pw123", hashed)
    assert not hasher.verify("pw124", hashed)
    hasher.burn("anything")
