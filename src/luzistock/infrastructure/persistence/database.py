"""Engine and session plumbing shared by the SQL repositories.

Every repository call runs in its own short transaction.  On SQLite the
transaction is opened with ``BEGIN IMMEDIATE`` so that a read followed
by a write inside it holds the database write lock for its whole
duration; on PostgreSQL the repositories lock rows with
``SELECT ... FOR UPDATE`` instead.
"""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from luzistock.domain.exceptions import PersistenceError
from luzistock.infrastructure.persistence.tables import Base

_IN_MEMORY_URLS = {"sqlite://", "sqlite:///:memory:"}


def build_engine(database_url: str, echo: bool = False) -> Engine:
    if not database_url.startswith("sqlite"):
        return create_engine(database_url, echo=echo, pool_pre_ping=True)

    options = {}
    if database_url in _IN_MEMORY_URLS:
        # One shared connection, otherwise each session sees an empty database.
        options["poolclass"] = StaticPool
    else:
        _ensure_directory(make_url(database_url).database)
    engine = create_engine(
        database_url,
        echo=echo,
        connect_args={"check_same_thread": False, "timeout": 30},
        **options,
    )
    _use_immediate_transactions(engine)
    return engine


def _ensure_directory(database: str | None) -> None:
    if database:
        Path(database).parent.mkdir(parents=True, exist_ok=True)


def _use_immediate_transactions(engine: Engine) -> None:
    """Let SQLAlchemy, not pysqlite, emit BEGIN, and make it BEGIN IMMEDIATE."""

    @event.listens_for(engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def create_schema(engine: Engine) -> None:
    Base.metadata.create_all(engine)


def session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, expire_on_commit=False)


@contextmanager
def transaction(factory: sessionmaker[Session]) -> Iterator[Session]:
    """Open a session, commit on success, roll back on any error.

    Driver and ORM errors surface as PersistenceError; domain errors
    raised inside the block propagate unchanged after the rollback.
    """
    with factory() as session:
        try:
            yield session
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            raise PersistenceError(f"Database operation failed: {exc}") from exc
        except Exception:
            session.rollback()
            raise
