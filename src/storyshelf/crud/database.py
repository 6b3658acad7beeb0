"""Engine construction, schema creation, and transaction scoping"""

import logging
import os
import time
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

import storyshelf.crud.models  # noqa: F401  (registers tables on SQLModel.metadata)


logger = logging.getLogger(__name__)

DEFAULT_URL = "sqlite:///storyshelf.db"
# SQLite VM instructions between deadline checks
PROGRESS_STEPS = 1000


def get_url(explicit: str | None = None) -> str:
    """Explicit URL, else STORYSHELF_DB_URL, else the local SQLite default."""
    return explicit or os.getenv("STORYSHELF_DB_URL") or DEFAULT_URL


def make_engine(db_url: str | None = None, timeout: float = 3.0) -> Engine:
    """Create an engine whose connections abort statements that run past timeout seconds."""
    db_url = get_url(db_url)
    if db_url.startswith("sqlite"):
        connect_args = {"check_same_thread": False, "timeout": timeout}
    elif db_url.startswith("postgresql"):
        connect_args = {"options": f"-c statement_timeout={int(timeout * 1000)}"}
    else:
        connect_args = {}
    logger.debug("Creating engine for %s with %.1fs deadline", db_url.split("://", 1)[0], timeout)
    engine = create_engine(db_url, echo=False, connect_args=connect_args, pool_pre_ping=True)
    if db_url.startswith("sqlite"):
        _install_sqlite_deadline(engine, timeout)
    return engine


def _install_sqlite_deadline(engine: Engine, timeout: float) -> None:
    """Interrupt any statement that runs once timeout seconds have passed since the transaction began.

    The sqlite3 `timeout` argument only bounds lock waits; the progress handler
    bounds the transaction itself. An interrupted statement raises OperationalError.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_conn, record):
        info = record.info
        dbapi_conn.set_progress_handler(
            lambda: int(time.monotonic() > info.get("deadline", float("inf"))), PROGRESS_STEPS,
        )

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.info["deadline"] = time.monotonic() + timeout

    @event.listens_for(engine, "commit")
    @event.listens_for(engine, "rollback")
    def _on_end(conn):
        conn.info.pop("deadline", None)

    @event.listens_for(engine, "checkin")
    def _on_checkin(dbapi_conn, record):
        record.info.pop("deadline", None)


def init_db(engine: Engine) -> None:
    SQLModel.metadata.create_all(engine)


def get_session(engine: Engine) -> Iterator[Session]:
    with Session(engine) as session:
        yield session


@contextmanager
def transaction(engine: Engine) -> Iterator[Session]:
    """Yield a session committed on success and rolled back in full on any exception."""
    with Session(engine) as session:
        try:
            yield session
            session.commit()
        except BaseException:
            session.rollback()
            raise
