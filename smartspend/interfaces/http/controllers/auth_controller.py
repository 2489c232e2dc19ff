# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from flask import Blueprint, Response, jsonify, request
from pydantic import ValidationError

from smartspend.application.use_cases.users import (
    LoginUserUseCase,
    RefreshSessionUseCase,
    RegisterUserUseCase,
    VerifySessionUseCase,
)
from smartspend.domain.users.exceptions import InvalidCredentialsError
from smartspend.infrastructure.audit import AuditAction, AuditLogger
from smartspend.infrastructure.auth import bearer_token
from smartspend.interfaces.http.dto.auth import (
    AuthSuccessDTO,
    LoginRequestDTO,
    SignupRequestDTO,
    UserDTO,
    VerifyResponseDTO,
)
from smartspend.shared.errors.validation import raise_validation_error
from smartspend.shared.logging import logger
from smartspend.shared.middleware.rate_limit import rate_limit


def _get_client_ip() -> str | None:
    ip_address = request.headers.get("X-Forwarded-For", request.remote_addr)
    if ip_address and "," in ip_address:
        ip_address = ip_address.split(",")[0].strip()
    return ip_address


class AuthController:
    def __init__(
        self,
        *,
        register_use_case: RegisterUserUseCase,
        login_use_case: LoginUserUseCase,
        verify_use_case: VerifySessionUseCase,
        refresh_use_case: RefreshSessionUseCase,
        audit: AuditLogger,
    ) -> None:
        self._register_use_case = register_use_case
        self._login_use_case = login_use_case
        self._verify_use_case = verify_use_case
        self._refresh_use_case = refresh_use_case
        self._audit = audit

    @rate_limit(limit=5, window_seconds=60.0)
    def signup(self) -> tuple[Response, int]:
        try:
            dto = SignupRequestDTO.model_validate(request.get_json(silent=True) or {})
        except ValidationError as exc:
            raise_validation_error(exc)

        user, issued = self._register_use_case.execute(dto.name, dto.email, dto.password)

        self._audit.log(
            AuditAction.SIGNUP,
            user_id=user.id,
            ip_address=_get_client_ip(),
            success=True,
        )

        logger.info(f"auth.signup: ok user_id={user.id}")
        return jsonify(AuthSuccessDTO.from_issued(issued).model_dump(mode="json")), 200

    @rate_limit(limit=10, window_seconds=60.0)
    def login(self) -> tuple[Response, int]:
        try:
            dto = LoginRequestDTO.model_validate(request.get_json(silent=True) or {})
        except ValidationError as exc:
            raise_validation_error(exc)

        ip_address = _get_client_ip()

        try:
            issued = self._login_use_case.execute(dto.email, dto.password)
        except InvalidCredentialsError:
            self._audit.log(
                AuditAction.LOGIN_FAILED,
                user_id=None,
                ip_address=ip_address,
                success=False,
            )
            raise

        self._audit.log(
            AuditAction.LOGIN_SUCCESS,
            user_id=issued.identity.user_id,
            ip_address=ip_address,
            success=True,
        )
        logger.info(f"auth.login: ok user_id={issued.identity.user_id}")
        return jsonify(AuthSuccessDTO.from_issued(issued).model_dump(mode="json")), 200

    def verify(self) -> tuple[Response, int]:
        identity = self._verify_use_case.execute(bearer_token())
        payload = VerifyResponseDTO(user=UserDTO.from_identity(identity))
        return jsonify(payload.model_dump(mode="json")), 200

    def refresh(self) -> tuple[Response, int]:
        issued = self._refresh_use_case.execute(bearer_token())
        self._audit.log(
            AuditAction.TOKEN_REFRESHED,
            user_id=issued.identity.user_id,
            ip_address=_get_client_ip(),
            success=True,
        )
        return jsonify(AuthSuccessDTO.from_issued(issued).model_dump(mode="json")), 200

    def as_blueprint(self) -> Blueprint:
        bp = Blueprint("auth", __name__, url_prefix="/api/auth")
        bp.add_url_rule("/signup", view_func=self.signup, methods=["POST"])
        bp.add_url_rule("/login", view_func=self.login, methods=["POST"])
        bp.add_url_rule("/verify", view_func=self.verify, methods=["GET"])
        bp.add_url_rule("/refresh", view_func=self.refresh, methods=["POST"])
        return bp
