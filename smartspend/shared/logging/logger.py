# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Loguru setup shared by the API server and the sync client.

Each record carries the component that produced it and the correlation id
of the request or sync run it belongs to. The client forwards its
correlation id as ``X-Request-ID`` so both sides of a sync line up.
"""

from __future__ import annotations

import logging
import os
import sys
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

from loguru import logger as _logger

from .sensitive_filter import sanitize_record

_FMT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<lvl>{level:<8}</lvl> | "
    "<blue>{extra[component]:<6}</blue> | "
    "<magenta>{extra[correlation_id]}</magenta> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> | "
    "<lvl>{message}</lvl>"
)

_CORRELATION_ID: ContextVar[str] = ContextVar("correlation_id", default="-")

_logger.configure(extra={"correlation_id": "-", "component": "app"})


class _InterceptHandler(logging.Handler):
    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = _logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        bound = _logger.bind(
            correlation_id=_CORRELATION_ID.get(), component=record.name.split(".")[0]
        )
        bound.opt(depth=6, exception=record.exc_info).log(level, record.getMessage())


class ContextualLogger:
    """Loguru proxy bound to a component and the current correlation id."""

    def __init__(self, component: str = "app") -> None:
        self._component = component

    def __getattr__(self, name: str) -> Any:
        bound = _logger.bind(correlation_id=_CORRELATION_ID.get(), component=self._component)
        return getattr(bound, name)


def get_logger(component: str) -> ContextualLogger:
    return ContextualLogger(component)


def set_correlation_id(value: str | None) -> None:
    _CORRELATION_ID.set(value or "-")


def get_correlation_id() -> str:
    return _CORRELATION_ID.get()


def clear_correlation_id() -> None:
    _CORRELATION_ID.set("-")


@contextmanager
def correlation_scope(value: str | None = None) -> Iterator[str]:
    """Bind a correlation id for the duration of the block, reusing an outer one."""
    current = _CORRELATION_ID.get()
    if value is None and current != "-":
        yield current
        return
    token = _CORRELATION_ID.set(value or uuid.uuid4().hex[:12])
    try:
        yield _CORRELATION_ID.get()
    finally:
        _CORRELATION_ID.reset(token)


def setup_logging(level: str | None = None, *, debug_mode: bool = False) -> None:
    """Install the stderr sink; ``LOG_FILE`` adds a file sink, ``LOG_JSON`` serializes."""
    if debug_mode:
        level = "DEBUG"
    level = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    serialize = os.getenv("LOG_JSON", "").lower() in ("1", "true", "yes")

    _logger.remove()
    _logger.add(
        sys.stderr,
        level=level,
        format=_FMT,
        colorize=not serialize,
        serialize=serialize,
        backtrace=False,
        diagnose=False,
        filter=sanitize_record,
    )
    log_file = os.getenv("LOG_FILE")
    if log_file:
        os.makedirs(os.path.dirname(os.path.abspath(log_file)), exist_ok=True)
        _logger.add(
            log_file,
            level=level,
            format=_FMT,
            rotation="10 MB",
            retention=5,
            enqueue=True,
            encoding="utf-8",
            filter=sanitize_record,
        )

    logging.basicConfig(handlers=[_InterceptHandler()], level=0, force=True)
    logging.getLogger("werkzeug").setLevel(logging.INFO)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


logger = ContextualLogger("server")

__all__ = [
    "ContextualLogger",
    "clear_correlation_id",
    "correlation_scope",
    "get_correlation_id",
    "get_logger",
    "logger",
    "set_correlation_id",
    "setup_logging",
]
