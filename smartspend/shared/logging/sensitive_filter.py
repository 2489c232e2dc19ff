# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Redaction applied to every log line before it reaches a sink."""

from __future__ import annotations

import re
from typing import Any

_MASK = "***"

_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    # Signed session tokens, wherever they appear.
    (re.compile(r"\beyJ[\w-]+\.[\w-]+\.[\w-]+"), "<token>"),
    (re.compile(r"(bearer\s+)\S{8,}", re.IGNORECASE), rf"\1{_MASK}"),
    (re.compile(r"(authorization\s*[:=]\s*['\"]?)[^'\"\s,]{8,}", re.IGNORECASE), rf"\1{_MASK}"),
    (
        re.compile(r"((?:secret_key|token|password|password_hash)\s*[:=]\s*['\"]?)[^'\"\s,}]+", re.IGNORECASE),
        rf"\1{_MASK}",
    ),
    # Credentials embedded in database URLs.
    (re.compile(r"(\w+(?:\+\w+)?://[^:/@\s]+:)[^@\s]+@"), rf"\1{_MASK}@"),
    # Keep the domain of an email, drop the mailbox.
    (re.compile(r"[\w.%+-]+@([\w-]+(?:\.[\w-]+)*\.[a-zA-Z]{2,})"), rf"{_MASK}@\1"),
)


def sanitize_message(message: str) -> str:
    for pattern, replacement in _RULES:
        message = pattern.sub(replacement, message)
    return message


def sanitize_record(record: dict[str, Any]) -> bool:
    """Loguru filter: rewrites the message in place and never drops a record."""
    record["message"] = sanitize_message(record["message"])
    return True
