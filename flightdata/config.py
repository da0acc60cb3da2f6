"""
Configuration management for FlightData.

Loads settings from environment variables with sensible defaults.
All configuration is centralized here to avoid magic strings scattered
throughout the codebase.
"""

import os
from dataclasses import dataclass, field
from typing import Tuple

from dotenv import load_dotenv

load_dotenv()


def _parse_origins(value: str) -> Tuple[str, ...]:
    """Parse comma-separated CORS origins, '*' when empty."""
    origins = tuple(o.strip() for o in value.split(',') if o.strip())
    return origins or ('*',)


@dataclass(frozen=True)
class DatabaseConfig:
    """Database configuration."""
    url: str = field(default_factory=lambda: os.getenv('DATABASE_URL', 'sqlite:///flightdata.db'))

    # Upper bound for any single store call (lock wait, statement, pool checkout)
    timeout_seconds: float = field(
        default_factory=lambda: float(os.getenv('DATABASE_TIMEOUT_SECONDS', '5'))
    )
    echo: bool = field(default_factory=lambda: os.getenv('DATABASE_ECHO', '0') == '1')

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith('sqlite')

    @property
    def is_postgresql(self) -> bool:
        return self.url.startswith('postgresql')


@dataclass(frozen=True)
class IngestConfig:
    """Write path settings."""
    batch_max_size: int = field(
        default_factory=lambda: int(os.getenv('INGEST_BATCH_MAX_SIZE', '1000'))
    )


@dataclass(frozen=True)
class QueryConfig:
    """Read path settings."""
    default_limit: int = field(default_factory=lambda: int(os.getenv('QUERY_DEFAULT_LIMIT', '10')))
    max_limit: int = field(default_factory=lambda: int(os.getenv('QUERY_MAX_LIMIT', '1000')))

    # The dashboard groups a wider window than the default to find every device
    devices_view_limit: int = field(
        default_factory=lambda: int(os.getenv('DEVICES_VIEW_LIMIT', '100'))
    )


@dataclass(frozen=True)
class AppConfig:
    """Main application configuration."""
    database: DatabaseConfig
    ingest: IngestConfig
    query: QueryConfig

    # Flask settings
    secret_key: str
    debug: bool
    cors_origins: Tuple[str, ...]
    port: int


def load_config() -> AppConfig:
    """Load and validate all configuration."""
    return AppConfig(
        database=DatabaseConfig(),
        ingest=IngestConfig(),
        query=QueryConfig(),
        secret_key=os.getenv('SECRET_KEY', 'dev-key-change-in-prod'),
        debug=os.getenv('FLASK_DEBUG', '0') == '1',
        cors_origins=_parse_origins(os.getenv('CORS_ORIGINS', '')),
        port=int(os.getenv('PORT', '5000')),
    )
