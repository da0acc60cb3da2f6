"""
SQLAlchemy base configuration and session management.

Uses SQLAlchemy 2.0 style with type hints and declarative base.
Designed to be portable between SQLite (dev) and PostgreSQL (prod).

Nothing here is created at import time: the app factory builds one
engine and one session factory and hands them to the store.
"""

from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker, Session

from flightdata.config import DatabaseConfig


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


def _set_sqlite_pragma(dbapi_connection, connection_record):
    """
    Configure SQLite for concurrent ingestion and queries.

    WAL mode allows concurrent reads during writes - critical for
    a system that's constantly ingesting while serving queries.
    """
    cursor = dbapi_connection.cursor()
    # Write-Ahead Logging for concurrent access
    cursor.execute('PRAGMA journal_mode=WAL')
    # Synchronous=NORMAL balances safety and speed
    cursor.execute('PRAGMA synchronous=NORMAL')
    # Larger cache for time-series queries
    cursor.execute('PRAGMA cache_size=-64000')  # 64MB
    cursor.close()


def create_db_engine(db_config: DatabaseConfig) -> Engine:
    """
    Create an engine whose every call is bounded by the configured timeout.

    - SQLite: busy timeout on the DBAPI connection (lock waits)
    - PostgreSQL: connect timeout plus server-side statement_timeout
    - Pooled backends: pool checkout timeout
    """
    timeout = db_config.timeout_seconds
    engine_kwargs = {
        'echo': db_config.echo,  # Log SQL when requested
    }

    if db_config.is_sqlite:
        engine_kwargs['connect_args'] = {
            'check_same_thread': False,
            'timeout': timeout,
        }
    else:
        engine_kwargs['pool_timeout'] = timeout
        engine_kwargs['pool_pre_ping'] = True
        if db_config.is_postgresql:
            engine_kwargs['connect_args'] = {
                'connect_timeout': max(1, int(timeout)),
                'options': f'-c statement_timeout={int(timeout * 1000)}',
            }

    engine = create_engine(db_config.url, **engine_kwargs)

    if db_config.is_sqlite:
        event.listen(engine, 'connect', _set_sqlite_pragma)

    return engine


def create_session_factory(engine: Engine) -> sessionmaker:
    """Session factory bound to `engine`."""
    return sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,  # Records are read after the session closes
    )


@contextmanager
def session_scope(session_factory: sessionmaker) -> Generator[Session, None, None]:
    """
    Context manager for database sessions.

    Usage:
        with session_scope(factory) as session:
            session.execute(...)

    Automatically handles commit/rollback and session cleanup.
    """
    session = session_factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(engine: Engine) -> None:
    """
    Initialize database schema.

    Creates all tables and indexes if they don't exist.
    """
    Base.metadata.create_all(bind=engine)
