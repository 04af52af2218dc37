"""Engine construction and transaction-mode configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Connection, Engine, make_url
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

# Execution option marking connections whose transactions must hold the write lock.
WRITE_LOCK_OPTION = "dailyreps_write_lock"
SQLITE_BUSY_TIMEOUT_SECONDS = 30.0


class Base(DeclarativeBase):
    """Declarative base shared by all ORM models."""


# Ensure model modules are imported so that metadata is populated when create_all runs.
import dailyreps_backup.models  # noqa: E402,F401


def _ensure_sqlite_directory(url: str) -> None:
    database = make_url(url).database
    if database and database != ":memory:" and not database.startswith("file:"):
        Path(database).expanduser().resolve().parent.mkdir(parents=True, exist_ok=True)


def _install_sqlite_transaction_hooks(engine: Engine, *, file_backed: bool) -> None:
    """Make SQLite write transactions take the database lock at BEGIN.

    pysqlite defers BEGIN until the first DML statement, so two writers can both
    read a row before either locks. Emitting BEGIN IMMEDIATE for write sessions
    serializes every read-modify-write for its full duration.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection: Any, connection_record: Any) -> None:
        dbapi_connection.isolation_level = None
        if file_backed:
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn: Connection) -> None:
        if conn.get_execution_options().get(WRITE_LOCK_OPTION):
            conn.exec_driver_sql("BEGIN IMMEDIATE")
        else:
            conn.exec_driver_sql("BEGIN")


def build_engine(url: str, *, echo: bool = False) -> Engine:
    """Create an engine for `url` with the transaction semantics the store relies on."""
    connect_args: dict[str, Any] = {}
    is_sqlite = url.startswith("sqlite")
    file_backed = False
    if is_sqlite:
        database = make_url(url).database
        file_backed = bool(database) and database != ":memory:"
        connect_args = {"check_same_thread": False, "timeout": SQLITE_BUSY_TIMEOUT_SECONDS}
        _ensure_sqlite_directory(url)

    engine = create_engine(url, pool_pre_ping=True, echo=echo, connect_args=connect_args)
    if is_sqlite:
        _install_sqlite_transaction_hooks(engine, file_backed=file_backed)
    return engine


def build_sessionmaker(engine: Engine, *, write: bool = False) -> sessionmaker[Session]:
    """Return a session factory; write factories hold the engine write lock."""
    bind = engine.execution_options(**{WRITE_LOCK_OPTION: True}) if write else engine
    return sessionmaker(bind=bind, autoflush=False, expire_on_commit=False)


def create_tables(engine: Engine) -> None:
    """Create all database tables."""
    Base.metadata.create_all(bind=engine)


def drop_tables(engine: Engine) -> None:
    """Drop all database tables."""
    Base.metadata.drop_all(bind=engine)
