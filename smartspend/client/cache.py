# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Offline-first expense cache backed by a local mirror and an outbox.

Every mutation is applied to the local mirror first and queued in the
outbox. The outbox is replayed against the API in order; a network failure
leaves the entry pending while a definitive server rejection drops the
operation and reverts the entry to what the server knows.
"""

from __future__ import annotations

import asyncio
import datetime as dt
from collections.abc import Callable
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Literal

from smartspend.client.api import ExpenseApiClient
from smartspend.client.errors import NetworkFailure, is_rejection
from smartspend.client.insights import normalize_month
from smartspend.client.local_store import LocalMirror
from smartspend.client.models import (
    BudgetPeriod,
    CacheEntry,
    CategoryBudget,
    ExpenseData,
    ExpenseRecord,
    OpKind,
    OutboxOperation,
    SyncState,
    new_local_id,
)
from smartspend.client.resilience import sync_retrying
from smartspend.domain.expenses.categories import Category
from smartspend.domain.expenses.exceptions import ExpenseNotFoundError
from smartspend.domain.users.exceptions import InvalidTokenError
from smartspend.shared.config import ClientConfig
from smartspend.shared.errors.base import AppError
from smartspend.shared.logging import correlation_scope, get_logger

logger = get_logger("client")

OFFLINE_NOTICE = "Saved locally, will sync when the server is reachable"
STALE_NOTICE = "Server unreachable, showing locally saved expenses"


@dataclass(slots=True, frozen=True)
class RejectedOperation:
    kind: OpKind
    expense_id: str
    code: str


@dataclass(slots=True)
class SyncReport:
    pushed: int = 0
    pending: int = 0
    rejected: list[RejectedOperation] = field(default_factory=list)
    offline: bool = False
    error: str | None = None

    @property
    def clean(self) -> bool:
        return not self.pending and not self.rejected and not self.offline


@dataclass(slots=True)
class MutationResult:
    entry: CacheEntry | None
    synced: bool
    notice: str | None = None
    report: SyncReport | None = None


@dataclass(slots=True)
class LoadResult:
    source: Literal["remote", "local"]
    entries: list[CacheEntry]
    report: SyncReport
    notice: str | None = None


class SyncCache:
    def __init__(
        self,
        api: ExpenseApiClient,
        mirror: LocalMirror,
        token_provider: Callable[[], str | None],
        *,
        config: ClientConfig,
        on_notice: Callable[[str], None] | None = None,
    ) -> None:
        self._api = api
        self._mirror = mirror
        self._token_provider = token_provider
        self._config = config
        self._on_notice = on_notice
        self._state = mirror.load()
        self._lock = asyncio.Lock()
        self._inflight: str | None = None
        self._closed = False

    # Views ------------------------------------------------------------------

    @property
    def entries(self) -> list[CacheEntry]:
        """Entries as the user should see them; pending deletes are hidden."""
        return [
            entry.model_copy()
            for entry in self._state.entries
            if entry.sync_state is not SyncState.PENDING_DELETE
        ]

    @property
    def outbox(self) -> list[OutboxOperation]:
        return [op.model_copy() for op in self._state.outbox]

    @property
    def last_synced_at(self) -> dt.datetime | None:
        return self._state.last_synced_at

    def get(self, expense_id: str) -> CacheEntry | None:
        entry = self._find(expense_id)
        if entry is None or entry.sync_state is SyncState.PENDING_DELETE:
            return None
        return entry.model_copy()

    # Read path --------------------------------------------------------------

    async def load(self) -> LoadResult:
        self._ensure_open()
        with correlation_scope():
            return await self._load()

    async def _load(self) -> LoadResult:
        async with self._lock:
            report = SyncReport()
            await self._flush_locked(report)
            try:
                records = await self._api.list_expenses(self._token())
            except NetworkFailure as exc:
                report.offline = True
                report.error = str(exc)
                report.pending = len(self._state.outbox)
                self._notify(STALE_NOTICE)
                return LoadResult("local", self.entries, report, STALE_NOTICE)

            self._adopt_remote(records)
            self._state.last_synced_at = dt.datetime.now(dt.UTC)
            self._save()
            report.pending = len(self._state.outbox)
            logger.debug(
                "cache: loaded {} remote expenses, {} pending", len(records), report.pending
            )
            return LoadResult("remote", self.entries, report)

    async def sync_now(self) -> SyncReport:
        """Replay the outbox with bounded retries, then refresh from the server."""
        self._ensure_open()
        with correlation_scope():
            return await self._sync_now()

    async def _sync_now(self) -> SyncReport:
        report = SyncReport()
        try:
            async for attempt in sync_retrying(self._config):
                with attempt:
                    async with self._lock:
                        await self._flush_locked(report, strict=True)
        except NetworkFailure as exc:
            report.offline = True
            report.error = str(exc)
            report.pending = len(self._state.outbox)
            self._notify(OFFLINE_NOTICE)
            return report

        loaded = await self.load()
        report.rejected.extend(loaded.report.rejected)
        report.pushed += loaded.report.pushed
        report.pending = loaded.report.pending
        report.offline = loaded.report.offline
        report.error = loaded.report.error
        return report

    # Mutations --------------------------------------------------------------

    async def create(self, data: ExpenseData) -> MutationResult:
        self._ensure_open()
        data = data.data()
        local_id = new_local_id()
        self._state.entries.append(
            CacheEntry(id=local_id, sync_state=SyncState.PENDING_CREATE, **data.model_dump())
        )
        op = OutboxOperation(kind=OpKind.CREATE, expense_id=local_id, payload=data)
        self._state.outbox.append(op)
        self._save()
        return await self._finish(op)

    async def update(self, expense_id: str, data: ExpenseData) -> MutationResult:
        self._ensure_open()
        data = data.data()
        entry = self._find(expense_id)
        if entry is None or entry.sync_state is SyncState.PENDING_DELETE:
            raise ExpenseNotFoundError(expense_id)

        previous = entry.record() if entry.synced else None
        self._set_fields(entry, data)

        queued = self._queued_op(expense_id)
        if queued is not None and queued.kind in (OpKind.CREATE, OpKind.UPDATE):
            # Not yet sent: fold the new fields into the queued operation.
            queued.payload = data
            op = queued
        else:
            if entry.sync_state is not SyncState.PENDING_CREATE:
                entry.sync_state = SyncState.PENDING_UPDATE
            op = OutboxOperation(
                kind=OpKind.UPDATE, expense_id=expense_id, payload=data, previous=previous
            )
            self._state.outbox.append(op)
        self._save()
        return await self._finish(op)

    async def delete(self, expense_id: str) -> MutationResult:
        self._ensure_open()
        entry = self._find(expense_id)
        if entry is None or entry.sync_state is SyncState.PENDING_DELETE:
            raise ExpenseNotFoundError(expense_id)

        queued = self._queued_op(expense_id)
        if queued is not None and queued.kind is OpKind.CREATE:
            # The server never saw this expense.
            self._state.outbox.remove(queued)
            self._state.entries.remove(entry)
            self._save()
            return MutationResult(entry=None, synced=True)

        previous = entry.record() if entry.synced else None
        if queued is not None and queued.kind is OpKind.UPDATE:
            previous = queued.previous
            self._state.outbox.remove(queued)

        entry.sync_state = SyncState.PENDING_DELETE
        op = OutboxOperation(kind=OpKind.DELETE, expense_id=expense_id, previous=previous)
        self._state.outbox.append(op)
        self._save()
        return await self._finish(op)

    # Budgets ----------------------------------------------------------------

    def monthly_budget(self, month: str) -> Decimal | None:
        return self._state.budgets.get(normalize_month(month))

    def set_monthly_budget(self, month: str, amount: Decimal) -> None:
        key = normalize_month(month)
        if amount < 0:
            raise ValueError("budget amount must not be negative")
        self._state.budgets[key] = Decimal(amount).quantize(Decimal("0.01"))
        self._save()

    @property
    def category_budgets(self) -> list[CategoryBudget]:
        return [budget.model_copy() for budget in self._state.category_budgets]

    def set_category_budget(
        self,
        category: Category | str,
        amount: Decimal,
        period: BudgetPeriod = BudgetPeriod.MONTHLY,
    ) -> CategoryBudget:
        budget = CategoryBudget(category=Category.parse(category), amount=amount, period=period)
        self._state.category_budgets = [
            existing
            for existing in self._state.category_budgets
            if existing.category is not budget.category
        ]
        self._state.category_budgets.append(budget)
        self._save()
        return budget.model_copy()

    def remove_category_budget(self, category: Category | str) -> bool:
        target = Category.parse(category)
        before = len(self._state.category_budgets)
        self._state.category_budgets = [
            budget for budget in self._state.category_budgets if budget.category is not target
        ]
        self._save()
        return len(self._state.category_budgets) != before

    def close(self) -> None:
        self._closed = True

    # Internals --------------------------------------------------------------

    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeError("cache is closed")

    def _token(self) -> str:
        token = self._token_provider()
        if not token:
            raise InvalidTokenError(context={"reason": "missing"})
        return token

    def _save(self) -> None:
        self._mirror.save(self._state)

    def _notify(self, message: str) -> None:
        logger.info("cache: {}", message)
        if self._on_notice is not None:
            self._on_notice(message)

    def _find(self, expense_id: str) -> CacheEntry | None:
        for entry in self._state.entries:
            if entry.id == expense_id:
                return entry
        return None

    def _queued_op(self, expense_id: str) -> OutboxOperation | None:
        """Latest operation for this id that is not currently being sent."""
        for op in reversed(self._state.outbox):
            if op.expense_id == expense_id and op.op_id != self._inflight:
                return op
        return None

    def _has_other_ops(self, op: OutboxOperation) -> bool:
        return any(
            other.expense_id == op.expense_id and other.op_id != op.op_id
            for other in self._state.outbox
        )

    def _drop(self, expense_id: str) -> None:
        self._state.entries = [e for e in self._state.entries if e.id != expense_id]
        self._state.outbox = [op for op in self._state.outbox if op.expense_id != expense_id]

    @staticmethod
    def _set_fields(entry: CacheEntry, data: ExpenseData) -> None:
        entry.amount = data.amount
        entry.category = data.category
        entry.date = data.date
        entry.note = data.note
        entry.description = data.description

    async def _finish(self, op: OutboxOperation) -> MutationResult:
        report = SyncReport()
        with correlation_scope():
            async with self._lock:
                await self._flush_locked(report)

        entry = self._find(op.expense_id)
        synced = all(queued.op_id != op.op_id for queued in self._state.outbox)
        notice = None
        if not synced:
            notice = OFFLINE_NOTICE
            self._notify(notice)
        elif any(rejected.expense_id == op.expense_id for rejected in report.rejected):
            notice = "The server rejected this change; it was reverted"
            self._notify(notice)
        visible = entry.model_copy() if entry is not None else None
        if visible is not None and visible.sync_state is SyncState.PENDING_DELETE:
            visible = None
        return MutationResult(entry=visible, synced=synced, notice=notice, report=report)

    async def _flush_locked(self, report: SyncReport, *, strict: bool = False) -> None:
        """Replay queued operations in order; caller holds the lock."""
        while self._state.outbox:
            op = self._state.outbox[0]
            self._inflight = op.op_id
            try:
                await self._push(op)
            except NetworkFailure as exc:
                op.attempts += 1
                op.last_error = str(exc)
                report.offline = True
                report.error = str(exc)
                self._save()
                if strict:
                    raise
                break
            except InvalidTokenError:
                raise
            except AppError as exc:
                op.attempts += 1
                op.last_error = exc.code
                if not is_rejection(exc):
                    report.error = exc.code
                    self._save()
                    break
                logger.warning(
                    "cache: server rejected {} {} with {}", op.kind.value, op.expense_id, exc.code
                )
                report.rejected.append(RejectedOperation(op.kind, op.expense_id, exc.code))
                self._revert(op, exc)
                self._save()
                continue
            finally:
                self._inflight = None

            if op in self._state.outbox:
                self._state.outbox.remove(op)
            report.pushed += 1
            self._save()
        report.pending = len(self._state.outbox)

    async def _push(self, op: OutboxOperation) -> None:
        token = self._token()
        if op.kind is OpKind.CREATE:
            assert op.payload is not None
            record = await self._api.create_expense(token, op.payload)
            self._adopt_server_id(op.expense_id, record.id)
            self._settle(op, record)
        elif op.kind is OpKind.UPDATE:
            assert op.payload is not None
            record = await self._api.update_expense(token, op.expense_id, op.payload)
            self._settle(op, record)
        else:
            try:
                await self._api.delete_expense(token, op.expense_id)
            except ExpenseNotFoundError:
                logger.debug("cache: {} already gone on the server", op.expense_id)
            entry = self._find(op.expense_id)
            if entry is not None:
                self._state.entries.remove(entry)

    def _settle(self, op: OutboxOperation, record: ExpenseRecord) -> None:
        entry = self._find(record.id)
        if entry is None or self._has_other_ops(op):
            return
        self._set_fields(entry, record)
        entry.sync_state = SyncState.SYNCED

    def _adopt_server_id(self, local_id: str, server_id: str) -> None:
        for entry in self._state.entries:
            if entry.id == local_id:
                entry.id = server_id
                if entry.sync_state is SyncState.PENDING_CREATE:
                    entry.sync_state = SyncState.PENDING_UPDATE
        for op in self._state.outbox:
            if op.expense_id == local_id:
                op.expense_id = server_id

    def _revert(self, op: OutboxOperation, exc: AppError) -> None:
        if op.kind is OpKind.CREATE or isinstance(exc, ExpenseNotFoundError):
            self._drop(op.expense_id)
            return

        self._state.outbox.remove(op)
        entry = self._find(op.expense_id)
        if entry is None:
            return
        if op.previous is not None:
            self._set_fields(entry, op.previous)
        if not self._has_other_ops(op):
            entry.sync_state = SyncState.SYNCED

    def _adopt_remote(self, records: list[ExpenseRecord]) -> None:
        entries = [
            CacheEntry(sync_state=SyncState.SYNCED, **record.model_dump()) for record in records
        ]
        by_id = {entry.id: entry for entry in entries}

        for op in self._state.outbox:
            existing = by_id.get(op.expense_id)
            if op.kind is OpKind.CREATE and op.payload is not None:
                entry = CacheEntry(
                    id=op.expense_id,
                    sync_state=SyncState.PENDING_CREATE,
                    **op.payload.model_dump(),
                )
                entries.append(entry)
                by_id[entry.id] = entry
            elif op.kind is OpKind.UPDATE and op.payload is not None:
                if existing is None:
                    existing = CacheEntry(
                        id=op.expense_id,
                        sync_state=SyncState.PENDING_UPDATE,
                        **op.payload.model_dump(),
                    )
                    entries.append(existing)
                    by_id[existing.id] = existing
                self._set_fields(existing, op.payload)
                if existing.sync_state is SyncState.SYNCED:
                    existing.sync_state = SyncState.PENDING_UPDATE
            elif op.kind is OpKind.DELETE and existing is not None:
                existing.sync_state = SyncState.PENDING_DELETE

        self._state.entries = entries


__all__ = [
    "LoadResult",
    "MutationResult",
    "RejectedOperation",
    "SyncCache",
    "SyncReport",
]
