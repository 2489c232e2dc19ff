# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Per-user JSON mirror on disk, written atomically."""

from __future__ import annotations

import json
import os
import re
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from smartspend.client.models import MirrorState, StoredSession
from smartspend.shared.logging import get_logger

logger = get_logger("client")

_UNSAFE = re.compile(r"[^A-Za-z0-9_-]")


def write_json_atomic(path: Path, payload: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    with open(tmp, "w", encoding="utf-8") as f:
        f.write(payload)
        f.flush()
        os.fsync(f.fileno())
    os.replace(tmp, path)


def _read_json(path: Path) -> object | None:
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError:
        return None
    except (OSError, ValueError) as exc:
        logger.warning("local store: unreadable file {}: {}", path.name, exc)
        return None


class LocalMirror:
    """Stores one user's cached expenses, outbox and budgets."""

    def __init__(self, cache_dir: Path, user_id: str) -> None:
        if not user_id:
            raise ValueError("user_id must not be empty")
        self._user_id = user_id
        self._path = Path(cache_dir) / f"user-{_UNSAFE.sub('_', user_id)}.json"

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> MirrorState:
        raw = _read_json(self._path)
        if raw is None:
            return MirrorState(user_id=self._user_id)
        try:
            state = MirrorState.model_validate(raw)
        except PydanticValidationError as exc:
            logger.warning("local store: discarding corrupt mirror: {}", exc.error_count())
            return MirrorState(user_id=self._user_id)
        if state.user_id != self._user_id:
            logger.warning("local store: mirror belongs to another user, ignoring")
            return MirrorState(user_id=self._user_id)
        return state

    def save(self, state: MirrorState) -> None:
        write_json_atomic(self._path, state.model_dump_json(indent=1))

    def clear(self) -> None:
        self._path.unlink(missing_ok=True)


class SessionStore:
    """Remembers the signed-in session between runs."""

    def __init__(self, cache_dir: Path) -> None:
        self._path = Path(cache_dir) / "session.json"

    def load(self) -> StoredSession | None:
        raw = _read_json(self._path)
        if raw is None:
            return None
        try:
            return StoredSession.model_validate(raw)
        except PydanticValidationError:
            logger.warning("local store: discarding corrupt session file")
            self.clear()
            return None

    def save(self, session: StoredSession) -> None:
        write_json_atomic(self._path, session.model_dump_json())

    def clear(self) -> None:
        self._path.unlink(missing_ok=True)


__all__ = ["LocalMirror", "SessionStore", "write_json_atomic"]
