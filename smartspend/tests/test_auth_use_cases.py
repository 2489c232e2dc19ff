from __future__ import annotations

from datetime import UTC, datetime

import pytest

from smartspend.application.use_cases.users import (
    LoginUserUseCase,
    RefreshSessionUseCase,
    RegisterUserUseCase,
    VerifySessionUseCase,
)
from smartspend.domain.users.entities import IssuedToken, SessionIdentity, User
from smartspend.domain.users.exceptions import (
    DuplicateEmailError,
    InvalidCredentialsError,
    InvalidTokenError,
)
from smartspend.domain.users.repositories import PasswordHasher, TokenService, UserRepository


class InMemoryUserRepository(UserRepository):
    def __init__(self) -> None:
        self._users: dict[str, User] = {}

    def find_by_email(self, email: str) -> User | None:
        return self._users.get(email)

    def find_by_id(self, user_id: str) -> User | None:
        return next((u for u in self._users.values() if u.id == user_id), None)

    def add(self, user: User) -> User:
        if user.email in self._users:
            raise DuplicateEmailError()
        self._users[user.email] = user
        return user

    def count(self) -> int:
        return len(self._users)


class FakeTokenService(TokenService):
    def __init__(self) -> None:
        self._issued: dict[str, SessionIdentity] = {}
        self._seq = 0

    def issue(self, identity: SessionIdentity) -> IssuedToken:
        self._seq += 1
        token = f"token-{self._seq}"
        self._issued[token] = identity
        return IssuedToken(token=token, identity=identity, expires_at=datetime.now(UTC))

    def verify(self, token: str) -> SessionIdentity:
        try:
            return self._issued[token]
        except KeyError:
            raise InvalidTokenError() from None


class DeterministicHasher(PasswordHasher):
    def __init__(self) -> None:
        self.burned: list[str] = []

    def hash(self, password: str) -> str:
        return f"hashed:{password}"

    def verify(self, password: str, hashed: str) -> bool:
        return hashed == f"hashed:{password}"

    def burn(self, password: str) -> None:
        self.burned.append(password)


@pytest.fixture()
def users() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture()
def tokens() -> FakeTokenService:
    return FakeTokenService()


@pytest.fixture()
def hasher() -> DeterministicHasher:
    return DeterministicHasher()


def test_register_user_issues_token_for_new_identity(users, tokens, hasher) -> None:
    use_case = RegisterUserUseCase(users=users, tokens=tokens, password_hasher=hasher)

    user, issued = use_case.execute("Ana", "ana@example.com", "pw123")

    assert user.password_hash == "hashed:pw123"
    assert len(user.id) == 32
    assert tokens.verify(issued.token) == SessionIdentity.for_user(user)


def test_register_duplicate_email_does_not_create_second_user(users, tokens, hasher) -> None:
    use_case = RegisterUserUseCase(users=users, tokens=tokens, password_hasher=hasher)
    use_case.execute("Ana", "ana@example.com", "pw123")

    with pytest.raises(DuplicateEmailError):
        use_case.execute("Other Ana", "ana@example.com", "different")

    assert users.count() == 1


def test_login_success_returns_token(users, tokens, hasher) -> None:
    RegisterUserUseCase(users=users, tokens=tokens, password_hasher=hasher).execute(
        "Ana", "ana@example.com", "pw123"
    )
    issued = LoginUserUseCase(users=users, tokens=tokens, password_hasher=hasher).execute(
        "ana@example.com", "pw123"
    )

    assert issued.identity.email == "ana@example.com"
    assert issued.identity.name == "Ana"


def test_login_failures_are_indistinguishable(users, tokens, hasher) -> None:
    RegisterUserUseCase(users=users, tokens=tokens, password_hasher=hasher).execute(
        "Ana", "ana@example.com", "pw123"
    )
    login = LoginUserUseCase(users=users, tokens=tokens, password_hasher=hasher)

    with pytest.raises(InvalidCredentialsError) as wrong_password:
        login.execute("ana@example.com", "nope")
    with pytest.raises(InvalidCredentialsError) as unknown_email:
        login.execute("bob@example.com", "nope")

    assert wrong_password.value.to_dict() == unknown_email.value.to_dict()
    assert hasher.burned == ["nope"]


def test_verify_and_refresh_round_trip(tokens) -> None:
    identity = SessionIdentity(user_id="u1", email="ana@example.com", name="Ana")
    issued = tokens.issue(identity)

    assert VerifySessionUseCase(tokens=tokens).execute(issued.token) == identity
    refreshed = RefreshSessionUseCase(tokens=tokens).execute(issued.token)
    assert refreshed.token != issued.token
    assert refreshed.identity == identity


def test_refresh_rejects_unknown_token(tokens) -> None:
    with pytest.raises(InvalidTokenError):
        RefreshSessionUseCase(tokens=tokens).execute("bogus")
