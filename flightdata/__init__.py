"""
FlightData Package.

Telemetry ingestion and time-series query engine built with Flask,
SQLAlchemy, and NumPy.

Modules:
    models/      Sample model and validation, SQLAlchemy ORM record (TelemetryRecord)
    storage/     Telemetry store: atomic single/batch inserts, indexed queries
    ingestion/   Validation boundary in front of the store
    query/       Latest, latest-per-device and time-range reads
    analytics/   Consumer-side transforms (fleet view, NumPy track summary)
    api/         REST endpoints for ingestion, queries and system status
    client.py    requests-based client for producers and consumers
    config.py    Centralized configuration from environment variables
"""

__version__ = '1.0.0'
