# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from typing import Any

from pydantic import (
    BaseModel,
    EmailStr,
    Field,
    ValidationError,
    ValidatorFunctionWrapHandler,
    field_validator,
)

from smartspend.domain.users.entities import IssuedToken, SessionIdentity
from smartspend.shared.errors.validation import FieldProblem, field_problem


def _check_email(value: Any, handler: ValidatorFunctionWrapHandler) -> str:
    """Run the ``EmailStr`` check but keep the address as typed, minus whitespace.

    Logins look the address up verbatim, so the normalized form is not stored.
    """
    if isinstance(value, str):
        value = value.strip()
    if not value:
        raise field_problem(FieldProblem.MISSING, "Email cannot be empty")
    try:
        handler(value)
    except ValidationError:
        raise field_problem(FieldProblem.EMAIL_INVALID, "Email address is not valid") from None
    return value


class SignupRequestDTO(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(min_length=1, max_length=128)

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise field_problem(FieldProblem.NAME_BLANK, "Name cannot be blank")
        return value

    @field_validator("email", mode="wrap")
    @classmethod
    def validate_email(cls, value: Any, handler: ValidatorFunctionWrapHandler) -> str:
        return _check_email(value, handler)


class LoginRequestDTO(BaseModel):
    email: str = Field(min_length=1, max_length=254)
    password: str = Field(min_length=1, max_length=128)  # No strength check on login

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        return value.strip()


class UserDTO(BaseModel):
    id: str
    email: str
    name: str

    @classmethod
    def from_identity(cls, identity: SessionIdentity) -> UserDTO:
        return cls(id=identity.user_id, email=identity.email, name=identity.name)


class AuthSuccessDTO(BaseModel):
    token: str
    user: UserDTO

    @classmethod
    def from_issued(cls, issued: IssuedToken) -> AuthSuccessDTO:
        return cls(token=issued.token, user=UserDTO.from_identity(issued.identity))


class VerifyResponseDTO(BaseModel):
    user: UserDTO
