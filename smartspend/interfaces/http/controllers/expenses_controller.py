# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig


from __future__ import annotations

from time import perf_counter

from flask import Blueprint, jsonify, request
from pydantic import ValidationError

from smartspend.application.use_cases.expenses import (
    CreateExpenseUseCase,
    DeleteExpenseUseCase,
    ListExpensesUseCase,
    UpdateExpenseUseCase,
)
from smartspend.infrastructure.auth import auth_required, authed_identity
from smartspend.interfaces.http.dto.expenses import (
    DeleteResultDTO,
    ExpenseDTO,
    ExpenseEnvelopeDTO,
    ExpenseInputDTO,
    ExpenseListDTO,
)
from smartspend.shared.errors.validation import raise_validation_error
from smartspend.shared.logging import logger


def _parse_body() -> ExpenseInputDTO:
    try:
        return ExpenseInputDTO.model_validate(request.get_json(silent=True) or {})
    except ValidationError as exc:
        raise_validation_error(exc)


class ExpensesController:
    def __init__(
        self,
        *,
        list_use_case: ListExpensesUseCase,
        create_use_case: CreateExpenseUseCase,
        update_use_case: UpdateExpenseUseCase,
        delete_use_case: DeleteExpenseUseCase,
    ) -> None:
        self._list = list_use_case
        self._create = create_use_case
        self._update = update_use_case
        self._delete = delete_use_case

    def as_blueprint(self) -> Blueprint:
        bp = Blueprint("expenses", __name__, url_prefix="/api")
        bp.add_url_rule("/expenses", view_func=self.list_expenses, methods=["GET"])
        bp.add_url_rule("/expenses", view_func=self.create, methods=["POST"])
        bp.add_url_rule("/expenses/<expense_id>", view_func=self.update, methods=["PUT"])
        bp.add_url_rule("/expenses/<expense_id>", view_func=self.delete, methods=["DELETE"])
        return bp

    @auth_required
    def list_expenses(self):
        t0 = perf_counter()
        owner_id = authed_identity().user_id
        items = self._list.execute(owner_id)
        dt = (perf_counter() - t0) * 1000
        logger.info(f"expenses.list: ok (user_id={owner_id}, n={len(items)}, dt_ms={dt:.0f})")
        payload = ExpenseListDTO(expenses=[ExpenseDTO.from_domain(e) for e in items])
        return jsonify(payload.model_dump(mode="json"))

    @auth_required
    def create(self):
        owner_id = authed_identity().user_id
        dto = _parse_body()
        expense = self._create.execute(owner_id, dto.to_fields())
        logger.info(f"expenses.create: ok (user_id={owner_id}, id={expense.id})")
        payload = ExpenseEnvelopeDTO(expense=ExpenseDTO.from_domain(expense))
        return jsonify(payload.model_dump(mode="json"))

    @auth_required
    def update(self, expense_id: str):
        owner_id = authed_identity().user_id
        dto = _parse_body()
        expense = self._update.execute(owner_id, expense_id, dto.to_fields())
        logger.info(f"expenses.update: ok (user_id={owner_id}, id={expense_id})")
        payload = ExpenseEnvelopeDTO(expense=ExpenseDTO.from_domain(expense))
        return jsonify(payload.model_dump(mode="json"))

    @auth_required
    def delete(self, expense_id: str):
        owner_id = authed_identity().user_id
        self._delete.execute(owner_id, expense_id)
        logger.info(f"expenses.delete: ok (user_id={owner_id}, id={expense_id})")
        return jsonify(DeleteResultDTO().model_dump(mode="json"))
