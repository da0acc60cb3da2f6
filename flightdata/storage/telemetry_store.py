"""
Telemetry store - durable, indexed persistence of telemetry records.

Sole owner of the unity_data table. Exposes exactly two writes and three
reads:

    insert_one                 single record, committed before returning
    insert_batch               many records, one transaction, all-or-nothing
    query_latest               newest N across all devices
    query_latest_for_device    newest N for one device
    query_range                one device, inclusive timestamp window, oldest first

Every database error is converted to StoreFailure and raised. Nothing is
retried and nothing is logged-and-dropped; retry policy belongs to the
caller. Call duration is bounded by the engine's configured timeout (see
models.base.create_db_engine).

The store keeps no in-memory state besides its session factory, so one
instance is safe to share across request threads.
"""

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Generator, List, Sequence

from sqlalchemy import desc, select, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import (
    DBAPIError,
    IntegrityError,
    OperationalError,
    SQLAlchemyError,
    TimeoutError as PoolTimeoutError,
)
from sqlalchemy.orm import Session, sessionmaker

from flightdata.config import DatabaseConfig
from flightdata.errors import StoreFailure
from flightdata.models.base import (
    create_db_engine,
    create_session_factory,
    init_db,
    session_scope,
)
from flightdata.models.sample import Sample
from flightdata.models.telemetry_record import TelemetryRecord

logger = logging.getLogger(__name__)

# Driver messages that mean "gave up waiting" rather than "cannot connect"
_TIMEOUT_MARKERS = (
    'database is locked',
    'timeout',
    'timed out',
    'canceling statement',
)


def classify_error(exc: SQLAlchemyError) -> str:
    """Map a SQLAlchemy exception to a StoreFailure kind."""
    if isinstance(exc, IntegrityError):
        return StoreFailure.CONSTRAINT_VIOLATION

    if isinstance(exc, PoolTimeoutError):
        return StoreFailure.TIMEOUT

    if isinstance(exc, OperationalError):
        message = str(exc.orig).lower()
        if any(marker in message for marker in _TIMEOUT_MARKERS):
            return StoreFailure.TIMEOUT
        return StoreFailure.CONNECTIVITY

    if isinstance(exc, DBAPIError) and exc.connection_invalidated:
        return StoreFailure.CONNECTIVITY

    return StoreFailure.TRANSACTION_ABORTED


def describe_error(exc: SQLAlchemyError) -> str:
    """Driver message without SQLAlchemy's statement/parameter dump."""
    if isinstance(exc, DBAPIError) and exc.orig is not None:
        return str(exc.orig)
    return str(exc)


class TelemetryStore:
    """
    Append-only telemetry persistence backed by SQLAlchemy.

    Constructed once by the application and passed to the ingestion and
    query services.
    """

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    @classmethod
    def from_config(cls, db_config: DatabaseConfig, create_schema: bool = True) -> 'TelemetryStore':
        """
        Build a store from database configuration.

        Creates the table and its indexes when `create_schema` is set.

        Raises:
            StoreFailure: the schema could not be created
        """
        engine = create_db_engine(db_config)
        if create_schema:
            try:
                init_db(engine)
            except SQLAlchemyError as e:
                raise StoreFailure(classify_error(e), describe_error(e), operation='init_db') from e
        return cls(create_session_factory(engine))

    @property
    def engine(self) -> Engine:
        return self._session_factory.kw['bind']

    def dispose(self) -> None:
        """Close all pooled connections."""
        self.engine.dispose()

    @contextmanager
    def _transaction(self, operation: str) -> Generator[Session, None, None]:
        """
        One session, one transaction.

        Commits on success, rolls back on any error, and converts database
        errors into StoreFailure.
        """
        try:
            with session_scope(self._session_factory) as session:
                yield session
        except SQLAlchemyError as e:
            failure = StoreFailure(classify_error(e), describe_error(e), operation=operation)
            logger.error(f'Store {operation} failed ({failure.kind}): {failure.message}')
            raise failure from e

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def insert_one(self, sample: Sample) -> TelemetryRecord:
        """
        Persist one sample.

        The record is committed (and visible to new sessions) before this
        returns. `id` and `created_at` are populated on the returned record.
        """
        created_at = datetime.now(timezone.utc)
        record = TelemetryRecord(**TelemetryRecord.column_values(sample, created_at))

        with self._transaction('insert_one') as session:
            session.add(record)

        return record

    def insert_batch(self, samples: Sequence[Sample]) -> int:
        """
        Persist a non-empty ordered batch in a single transaction.

        Either every sample is committed or, on any failure, none are.
        Ids follow the batch order. All records of one batch share a
        `created_at`.

        Returns count of records inserted.
        """
        if not samples:
            raise ValueError('insert_batch requires at least one sample')

        created_at = datetime.now(timezone.utc)
        rows = [TelemetryRecord.column_values(s, created_at) for s in samples]

        # Single multi-row INSERT inside one transaction
        with self._transaction('insert_batch') as session:
            session.execute(TelemetryRecord.__table__.insert(), rows)

        return len(rows)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def query_latest(self, limit: int) -> List[TelemetryRecord]:
        """
        Newest records across all devices.

        Ordered by timestamp descending, newer insert first on ties.
        Served by idx_timestamp.
        """
        if limit <= 0:
            return []

        stmt = (
            select(TelemetryRecord)
            .order_by(desc(TelemetryRecord.timestamp), desc(TelemetryRecord.id))
            .limit(limit)
        )
        with self._transaction('query_latest') as session:
            return list(session.scalars(stmt))

    def query_latest_for_device(self, device_id: str, limit: int) -> List[TelemetryRecord]:
        """
        Newest records for one device, timestamp descending.

        Served by idx_device_timestamp. Unknown device -> empty list.
        """
        if limit <= 0:
            return []

        stmt = (
            select(TelemetryRecord)
            .where(TelemetryRecord.device_id == device_id)
            .order_by(desc(TelemetryRecord.timestamp), desc(TelemetryRecord.id))
            .limit(limit)
        )
        with self._transaction('query_latest_for_device') as session:
            return list(session.scalars(stmt))

    def query_range(self, device_id: str, start_time: int, end_time: int) -> List[TelemetryRecord]:
        """
        Records for one device with start_time <= timestamp <= end_time.

        Ordered by timestamp ascending, insertion order on ties. The result
        is not capped; callers bound the window.
        """
        stmt = (
            select(TelemetryRecord)
            .where(
                TelemetryRecord.device_id == device_id,
                TelemetryRecord.timestamp >= start_time,
                TelemetryRecord.timestamp <= end_time,
            )
            .order_by(TelemetryRecord.timestamp, TelemetryRecord.id)
        )
        with self._transaction('query_range') as session:
            return list(session.scalars(stmt))

    def ping(self) -> bool:
        """
        Round-trip a trivial statement.

        Raises:
            StoreFailure: the database is unreachable
        """
        with self._transaction('ping') as session:
            session.execute(text('SELECT 1'))
        return True
