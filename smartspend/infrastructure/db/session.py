# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, scoped_session, sessionmaker

from smartspend.shared.config import DatabaseConfig
from smartspend.shared.logging import logger


class Base(DeclarativeBase):
    pass


def build_engine(config: DatabaseConfig) -> Engine:
    kwargs: dict[str, object] = {"echo": False, "future": True, "pool_pre_ping": True}
    if config.url.startswith("sqlite"):
        kwargs["connect_args"] = {
            "check_same_thread": False,
            "timeout": int(config.pool_timeout),
        }
    else:
        kwargs.update(
            pool_size=config.pool_size,
            max_overflow=config.max_overflow,
            pool_timeout=config.pool_timeout,
        )
    return create_engine(config.url, **kwargs)


def build_session_factory(engine: Engine) -> scoped_session[Session]:
    return scoped_session(
        sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)
    )


@contextmanager
def session_scope(factory: Callable[[], Session]) -> Iterator[Session]:
    """Transaction scope: commit on clean exit, roll back when the block raises."""
    session = factory()
    try:
        yield session
        session.commit()
    except Exception as exc:
        logger.warning(f"db.session: rollback due to {type(exc).__name__}")
        session.rollback()
        raise
    finally:
        session.close()
        remove = getattr(factory, "remove", None)
        if remove is not None:
            remove()


def init_db(engine: Engine) -> None:
    # Models must be imported so their tables register on Base.metadata.
    from . import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("Database schema ensured")
