# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Signed, time-bound session tokens (JWT)."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from smartspend.domain.users.entities import IssuedToken, SessionIdentity
from smartspend.domain.users.exceptions import InvalidTokenError
from smartspend.domain.users.repositories import TokenService
from smartspend.shared.logging import logger

_REQUIRED_CLAIMS = ("sub", "email", "name", "iat", "exp")


class JwtTokenService(TokenService):
    """Issues and verifies stateless tokens with a process-wide secret.

    Verification never touches the user store: a token stays valid until
    ``exp`` even if the account behind it disappears.
    """

    def __init__(
        self,
        *,
        secret_key: str,
        ttl_seconds: int,
        algorithm: str = "HS256",
        issuer: str = "smartspend",
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        if not secret_key:
            raise ValueError("secret_key must not be empty")
        self._secret_key = secret_key
        self._ttl = timedelta(seconds=ttl_seconds)
        self._algorithm = algorithm
        self._issuer = issuer
        self._clock = clock or (lambda: datetime.now(UTC))

    def issue(self, identity: SessionIdentity) -> IssuedToken:
        issued_at = self._clock().replace(microsecond=0)
        expires_at = issued_at + self._ttl
        claims = {
            "sub": identity.user_id,
            "email": identity.email,
            "name": identity.name,
            "iss": self._issuer,
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        token = jwt.encode(claims, self._secret_key, algorithm=self._algorithm)
        logger.debug(f"tokens.issue: user_id={identity.user_id} exp={expires_at.isoformat()}")
        return IssuedToken(
            token=token,
            identity=SessionIdentity(
                user_id=identity.user_id,
                email=identity.email,
                name=identity.name,
                expires_at=expires_at,
            ),
            expires_at=expires_at,
        )

    def verify(self, token: str) -> SessionIdentity:
        if not token:
            raise InvalidTokenError()
        try:
            claims = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                issuer=self._issuer,
                # jose forces verify_exp on for any require_* option, so presence is
                # checked below and expiry only against the injected clock.
                options={"verify_exp": False},
            )
        except JWTError as exc:
            logger.info(f"tokens.verify: rejected ({type(exc).__name__})")
            raise InvalidTokenError() from exc

        missing = [claim for claim in _REQUIRED_CLAIMS if claims.get(claim) in (None, "")]
        if missing:
            logger.info(f"tokens.verify: rejected (missing claims {missing})")
            raise InvalidTokenError()

        try:
            expires_at = datetime.fromtimestamp(int(claims["exp"]), tz=UTC)
        except (TypeError, ValueError, OverflowError) as exc:
            raise InvalidTokenError() from exc
        if expires_at <= self._clock():
            logger.info("tokens.verify: rejected (expired)")
            raise InvalidTokenError(context={"reason": "expired"})

        return SessionIdentity(
            user_id=str(claims["sub"]),
            email=str(claims["email"]),
            name=str(claims["name"]),
            expires_at=expires_at,
        )


__all__ = ["JwtTokenService"]
