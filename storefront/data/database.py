# storefront/data/database.py
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from storefront.utils.settings import (
    DATABASE_URL,
    DB_POOL_SIZE,
    DB_MAX_OVERFLOW,
    DB_POOL_TIMEOUT,
    DB_STATEMENT_TIMEOUT_MS,
)

Base = declarative_base()


def _enable_sqlite_transactions(engine: Engine) -> None:
    """
    pysqlite sam decyduje kiedy wyslac BEGIN i psuje SAVEPOINT,
    wiec przejmujemy kontrole: kazda transakcja to BEGIN IMMEDIATE
    (pisarze ustawiaja sie w kolejce zamiast dostac "database is locked")
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def build_engine(url: str = DATABASE_URL, **kwargs) -> Engine:
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False, "timeout": 30})
        engine = create_engine(url, **kwargs)
        _enable_sqlite_transactions(engine)
        return engine

    # postgres: ograniczona pula + timeout na kazde zapytanie
    kwargs.setdefault("pool_size", DB_POOL_SIZE)
    kwargs.setdefault("max_overflow", DB_MAX_OVERFLOW)
    kwargs.setdefault("pool_timeout", DB_POOL_TIMEOUT)
    kwargs.setdefault("pool_pre_ping", True)
    kwargs.setdefault(
        "connect_args",
        {"options": f"-c statement_timeout={DB_STATEMENT_TIMEOUT_MS}"},
    )
    return create_engine(url, **kwargs)


engine = build_engine()
SessionLocal = sessionmaker(bind=engine, expire_on_commit=False)


def get_db() -> Iterator[Session]:
    """Sesja na request - zawsze zamykana, nawet przy bledzie."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """Unit of work: commit gdy wszystko ok, rollback przy dowolnym wyjatku."""
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
