# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Offline-capable client for the SmartSpend API."""

from .api import ExpenseApiClient
from .cache import LoadResult, MutationResult, RejectedOperation, SyncCache, SyncReport
from .errors import NetworkFailure
from .local_store import LocalMirror, SessionStore
from .models import (
    BudgetPeriod,
    CacheEntry,
    CategoryBudget,
    ExpenseData,
    ExpenseRecord,
    OpKind,
    OutboxOperation,
    SessionUser,
    SyncState,
)
from .resilience import CircuitBreaker
from .session import SessionContext

__all__ = [
    "BudgetPeriod",
    "CacheEntry",
    "CategoryBudget",
    "CircuitBreaker",
    "ExpenseApiClient",
    "ExpenseData",
    "ExpenseRecord",
    "LoadResult",
    "LocalMirror",
    "MutationResult",
    "NetworkFailure",
    "OpKind",
    "OutboxOperation",
    "RejectedOperation",
    "SessionContext",
    "SessionStore",
    "SessionUser",
    "SyncCache",
    "SyncReport",
    "SyncState",
]
