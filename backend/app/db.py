from __future__ import annotations

import logging
import time
from typing import Iterator

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from tenacity import (
    RetryCallState,
    RetryError,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from app.config import Settings
from app.errors import DatabaseConnectionError

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


def build_engine(settings: Settings) -> Engine:
    return create_engine(settings.sqlalchemy_url(), pool_pre_ping=True)


def check_connection(engine: Engine) -> None:
    with engine.connect() as conn:
        conn.execute(text("select 1"))


def _nap(seconds: float) -> None:
    time.sleep(seconds)


def connect_with_retry(engine: Engine, retries: int = 9, delay_sec: float = 3.0) -> None:
    """
    Probe the database until it answers.

    Makes ``retries + 1`` attempts in total and waits ``delay_sec`` between
    them. Raises DatabaseConnectionError once every attempt has failed.
    """
    attempts = max(int(retries), 0) + 1
    url = engine.url.render_as_string(hide_password=True)

    def _log_failure(state: RetryCallState) -> None:
        logger.warning(
            "database connection failed (attempt %d/%d) url=%s: %s",
            state.attempt_number,
            attempts,
            url,
            state.outcome.exception() if state.outcome else None,
        )

    def _log_wait(state: RetryCallState) -> None:
        wait = state.next_action.sleep if state.next_action else 0
        logger.info("retrying database connection in %.1fs", wait)

    retrying = Retrying(
        stop=stop_after_attempt(attempts),
        wait=wait_fixed(max(delay_sec, 0)),
        retry=retry_if_exception_type(SQLAlchemyError),
        after=_log_failure,
        before_sleep=_log_wait,
        sleep=_nap,
    )
    try:
        retrying(check_connection, engine)
    except RetryError as exc:
        cause = exc.last_attempt.exception()
        raise DatabaseConnectionError(url, attempts, cause) from cause

    logger.info("database connected url=%s", url)


def synchronize_schema(engine: Engine) -> None:
    # create_all only adds missing tables; columns and constraints are left alone
    logger.warning(
        "DB_SYNCHRONIZE is enabled: creating missing tables on %s; use alembic migrations outside development",
        engine.url.render_as_string(hide_password=True),
    )
    Base.metadata.create_all(engine)


def make_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def session_scope(factory: sessionmaker[Session]) -> Iterator[Session]:
    session = factory()
    try:
        yield session
    finally:
        session.close()
