"""
Data model for FlightData.

Schema designed for time-series telemetry data with these priorities:
1. Fast ingestion (single and batch inserts)
2. Efficient per-device time-range queries
3. Low-latency "most recent N" lookups, per device and overall
"""

from flightdata.models.base import (
    Base,
    create_db_engine,
    create_session_factory,
    init_db,
    session_scope,
)
from flightdata.models.sample import (
    Sample,
    Velocity,
    ValidationResult,
    TIMESTAMP_MAX,
    TIMESTAMP_MIN,
    coerce_timestamp,
    in_timestamp_range,
    parse_sample,
    validate,
)
from flightdata.models.telemetry_record import TelemetryRecord

__all__ = [
    'Base',
    'create_db_engine',
    'create_session_factory',
    'init_db',
    'session_scope',
    'Sample',
    'Velocity',
    'ValidationResult',
    'TIMESTAMP_MAX',
    'TIMESTAMP_MIN',
    'coerce_timestamp',
    'in_timestamp_range',
    'parse_sample',
    'validate',
    'TelemetryRecord',
]
