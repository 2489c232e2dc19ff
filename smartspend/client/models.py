# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Client-side shapes: wire records, cache entries, outbox operations."""

from __future__ import annotations

import datetime as dt
import uuid
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from smartspend.domain.expenses.categories import Category

LOCAL_ID_PREFIX = "local-"


def new_local_id() -> str:
    return f"{LOCAL_ID_PREFIX}{uuid.uuid4().hex}"


class SyncState(str, Enum):
    SYNCED = "synced"
    PENDING_CREATE = "pending_create"
    PENDING_UPDATE = "pending_update"
    PENDING_DELETE = "pending_delete"


class ExpenseData(BaseModel):
    """Editable expense fields as sent to and received from the API."""

    model_config = ConfigDict(extra="ignore")

    amount: Decimal = Field(ge=0, max_digits=12, decimal_places=2, allow_inf_nan=False)
    category: Category
    date: dt.date
    note: str = Field(default="", max_length=2000)
    description: str = Field(default="", max_length=200)

    @field_validator("amount", mode="before")
    @classmethod
    def _coerce_amount(cls, value: object) -> object:
        if isinstance(value, float):
            return Decimal(str(value)).quantize(Decimal("0.01"))
        return value

    @field_validator("category", mode="before")
    @classmethod
    def _normalize_category(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("note", "description", mode="before")
    @classmethod
    def _none_to_empty(cls, value: object) -> object:
        return "" if value is None else value

    @field_serializer("amount", when_used="json")
    def _serialize_amount(self, value: Decimal) -> float:
        return float(value)

    def data(self) -> ExpenseData:
        return ExpenseData(
            amount=self.amount,
            category=self.category,
            date=self.date,
            note=self.note,
            description=self.description,
        )


class ExpenseRecord(ExpenseData):
    id: str


class CacheEntry(ExpenseRecord):
    sync_state: SyncState = SyncState.SYNCED

    @property
    def synced(self) -> bool:
        return self.sync_state is SyncState.SYNCED

    def record(self) -> ExpenseRecord:
        return ExpenseRecord(id=self.id, **self.data().model_dump())


class OpKind(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class OutboxOperation(BaseModel):
    """A mutation applied locally and still owed to the server."""

    op_id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    kind: OpKind
    expense_id: str
    payload: ExpenseData | None = None
    # Last server-confirmed form, restored if the server rejects the operation.
    previous: ExpenseRecord | None = None
    attempts: int = 0
    last_error: str | None = None
    queued_at: dt.datetime = Field(default_factory=lambda: dt.datetime.now(dt.UTC))


class BudgetPeriod(str, Enum):
    MONTHLY = "monthly"
    WEEKLY = "weekly"


class CategoryBudget(BaseModel):
    category: Category
    amount: Decimal = Field(ge=0, decimal_places=2)
    period: BudgetPeriod = BudgetPeriod.MONTHLY


class MirrorState(BaseModel):
    version: int = 1
    user_id: str
    entries: list[CacheEntry] = Field(default_factory=list)
    outbox: list[OutboxOperation] = Field(default_factory=list)
    budgets: dict[str, Decimal] = Field(default_factory=dict)
    category_budgets: list[CategoryBudget] = Field(default_factory=list)
    last_synced_at: dt.datetime | None = None


class SessionUser(BaseModel):
    id: str
    email: str
    name: str


class AuthResult(BaseModel):
    token: str
    user: SessionUser


class StoredSession(BaseModel):
    token: str
    user: SessionUser
    saved_at: dt.datetime = Field(default_factory=lambda: dt.datetime.now(dt.UTC))
