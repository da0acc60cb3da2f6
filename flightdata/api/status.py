"""
System status API endpoint.

Provides:
- GET /api/status - Store connectivity and effective configuration
"""

import logging
import time
from datetime import datetime, timezone

from flask import Blueprint, jsonify

from flightdata.config import AppConfig
from flightdata.errors import StoreFailure
from flightdata.storage import TelemetryStore

logger = logging.getLogger(__name__)


def create_status_blueprint(store: TelemetryStore, app_config: AppConfig) -> Blueprint:
    """Build the /api/status blueprint for `store`."""
    status_bp = Blueprint('status', __name__, url_prefix='/api/status')

    @status_bp.route('', methods=['GET'])
    def get_system_status():
        """
        Get system health and status information.

        Returns:
        - Database connectivity (and failure kind when unreachable)
        - Read/write limits in effect
        """
        start_time = time.perf_counter()

        database = {
            'connected': True,
            'type': store.engine.dialect.name,
        }
        try:
            store.ping()
        except StoreFailure as e:
            # Reported, not raised: this endpoint exists to describe the failure
            database['connected'] = False
            database['error'] = e.to_dict()

        query_time_ms = (time.perf_counter() - start_time) * 1000

        return jsonify({
            'status': 'healthy' if database['connected'] else 'degraded',
            'database': database,
            'config': {
                'timeout_seconds': app_config.database.timeout_seconds,
                'batch_max_size': app_config.ingest.batch_max_size,
                'default_limit': app_config.query.default_limit,
                'max_limit': app_config.query.max_limit,
            },
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'query_time_ms': round(query_time_ms, 2),
        })

    return status_bp
