# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from functools import cached_property

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, scoped_session

from smartspend.application.services import JwtTokenService, WerkzeugPasswordHasher
from smartspend.application.use_cases.expenses import (
    CreateExpenseUseCase,
    DeleteExpenseUseCase,
    ListExpensesUseCase,
    UpdateExpenseUseCase,
)
from smartspend.application.use_cases.users import (
    LoginUserUseCase,
    RefreshSessionUseCase,
    RegisterUserUseCase,
    VerifySessionUseCase,
)
from smartspend.infrastructure.audit import AuditLogger
from smartspend.infrastructure.db import build_engine, build_session_factory
from smartspend.infrastructure.repositories import (
    SqlAlchemyExpenseRepository,
    SqlAlchemyUserRepository,
)
from smartspend.interfaces.http.controllers import (
    AuthController,
    ExpensesController,
    MiscController,
)
from smartspend.shared.config import AppConfig


class Container:
    def __init__(self, config: AppConfig) -> None:
        self.config = config

    @cached_property
    def engine(self) -> Engine:
        return build_engine(self.config.database)

    @cached_property
    def session_factory(self) -> scoped_session[Session]:
        return build_session_factory(self.engine)

    @cached_property
    def password_hasher(self) -> WerkzeugPasswordHasher:
        return WerkzeugPasswordHasher()

    @cached_property
    def token_service(self) -> JwtTokenService:
        return JwtTokenService(
            secret_key=self.config.secret_key,
            ttl_seconds=self.config.auth.token_ttl_seconds,
            algorithm=self.config.auth.token_algorithm,
            issuer=self.config.auth.token_issuer,
        )

    @cached_property
    def user_repository(self) -> SqlAlchemyUserRepository:
        return SqlAlchemyUserRepository(self.session_factory)

    @cached_property
    def expense_repository(self) -> SqlAlchemyExpenseRepository:
        return SqlAlchemyExpenseRepository(self.session_factory)

    @cached_property
    def audit_logger(self) -> AuditLogger:
        return AuditLogger(self.session_factory)

    # Auth use cases

    @cached_property
    def register_user_use_case(self) -> RegisterUserUseCase:
        return RegisterUserUseCase(
            users=self.user_repository,
            tokens=self.token_service,
            password_hasher=self.password_hasher,
        )

    @cached_property
    def login_user_use_case(self) -> LoginUserUseCase:
        return LoginUserUseCase(
            users=self.user_repository,
            tokens=self.token_service,
            password_hasher=self.password_hasher,
        )

    @cached_property
    def verify_session_use_case(self) -> VerifySessionUseCase:
        return VerifySessionUseCase(tokens=self.token_service)

    @cached_property
    def refresh_session_use_case(self) -> RefreshSessionUseCase:
        return RefreshSessionUseCase(tokens=self.token_service)

    # Expense use cases

    @cached_property
    def list_expenses_use_case(self) -> ListExpensesUseCase:
        return ListExpensesUseCase(expenses=self.expense_repository)

    @cached_property
    def create_expense_use_case(self) -> CreateExpenseUseCase:
        return CreateExpenseUseCase(expenses=self.expense_repository)

    @cached_property
    def update_expense_use_case(self) -> UpdateExpenseUseCase:
        return UpdateExpenseUseCase(expenses=self.expense_repository)

    @cached_property
    def delete_expense_use_case(self) -> DeleteExpenseUseCase:
        return DeleteExpenseUseCase(expenses=self.expense_repository)

    # Controllers

    @cached_property
    def auth_controller(self) -> AuthController:
        return AuthController(
            register_use_case=self.register_user_use_case,
            login_use_case=self.login_user_use_case,
            verify_use_case=self.verify_session_use_case,
            refresh_use_case=self.refresh_session_use_case,
            audit=self.audit_logger,
        )

    @cached_property
    def expenses_controller(self) -> ExpensesController:
        return ExpensesController(
            list_use_case=self.list_expenses_use_case,
            create_use_case=self.create_expense_use_case,
            update_use_case=self.update_expense_use_case,
            delete_use_case=self.delete_expense_use_case,
        )

    @cached_property
    def misc_controller(self) -> MiscController:
        return MiscController(engine=self.engine)

    def dispose(self) -> None:
        self.session_factory.remove()
        self.engine.dispose()
