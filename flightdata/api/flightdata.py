"""
Flight data API endpoints.

Provides endpoints for:
- POST /api/flightdata - Ingest one sample
- POST /api/flightdata/batch - Ingest an array of samples atomically
- GET /api/flightdata - Latest across devices, latest for a device, or a time range
- GET /api/flightdata/devices - Newest record per device (dashboard fleet view)
- GET /api/flightdata/summary - Track summary for a device over a time range

Validation failures answer 400 and store failures 500; both are raised as
FlightDataError and rendered by the app-level error handler.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Optional

from flask import Blueprint, jsonify, request

from flightdata.analytics import latest_per_device, summarize_track
from flightdata.config import QueryConfig
from flightdata.errors import ValidationError
from flightdata.ingestion import IngestionService
from flightdata.models import in_timestamp_range
from flightdata.query import QueryService

logger = logging.getLogger(__name__)


def _int_arg(name: str, default: Optional[int] = None) -> Optional[int]:
    """Signed 64-bit integer query parameter, or `default` when absent/blank."""
    raw = request.args.get(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValidationError(f'{name} must be an integer, got {raw!r}')
    if not in_timestamp_range(value):
        raise ValidationError(f'{name} is out of range: {raw}')
    return value


def _json_body():
    payload = request.get_json(silent=True)
    if payload is None:
        raise ValidationError('Invalid data format: request body must be JSON')
    return payload


def _elapsed_ms(start_time: float) -> float:
    return round((time.perf_counter() - start_time) * 1000, 2)


def create_flightdata_blueprint(
    ingestion: IngestionService,
    queries: QueryService,
    query_config: QueryConfig,
) -> Blueprint:
    """
    Build the /api/flightdata blueprint around injected services.

    The services are captured by the route closures; no route looks up a
    database handle from the application context.
    """
    flightdata_bp = Blueprint('flightdata', __name__, url_prefix='/api/flightdata')

    @flightdata_bp.route('', methods=['POST'])
    def ingest_sample():
        """
        Ingest a single sample.

        Body: camelCase sample JSON (deviceId, formattedTime, timestamp, ...)

        Echoes back the identifying fields of the stored record.
        """
        record = ingestion.ingest_one(_json_body())

        return jsonify({
            'success': True,
            'message': 'Data saved successfully',
            'data': {
                'id': record.id,
                'deviceId': record.device_id,
                'timestamp': record.timestamp,
                'formattedTime': record.formatted_time,
            },
        })

    @flightdata_bp.route('/batch', methods=['POST'])
    def ingest_batch():
        """
        Ingest an array of samples in one transaction.

        Any invalid element rejects the whole batch; nothing is stored.
        """
        count = ingestion.ingest_batch(_json_body())

        return jsonify({
            'success': True,
            'message': 'Batch saved successfully',
            'count': count,
        })

    @flightdata_bp.route('', methods=['GET'])
    def query_samples():
        """
        Query stored samples.

        Query parameters:
        - deviceId: string, restrict to one device
        - limit: int, max results for latest queries (default 10)
        - startTime, endTime: int, inclusive timestamp window (with deviceId)

        deviceId + startTime + endTime -> range (ascending)
        deviceId only                  -> latest for device (descending)
        nothing                        -> latest across devices (descending)
        """
        start = time.perf_counter()

        device_id = request.args.get('deviceId') or None
        limit = queries.effective_limit(_int_arg('limit', query_config.default_limit))
        start_time = _int_arg('startTime')
        end_time = _int_arg('endTime')

        if device_id and start_time is not None and end_time is not None:
            records = queries.range(device_id, start_time, end_time)
            body = {
                'deviceId': device_id,
                'timeRange': {'startTime': start_time, 'endTime': end_time},
            }
        elif device_id:
            records = queries.latest_for_device(device_id, limit)
            body = {'deviceId': device_id, 'limit': limit}
        else:
            records = queries.latest(limit)
            body = {'limit': limit}

        body['data'] = [r.to_dict() for r in records]
        body['count'] = len(records)
        body['query_time_ms'] = _elapsed_ms(start)

        return jsonify(body)

    @flightdata_bp.route('/devices', methods=['GET'])
    def list_devices():
        """
        Newest record per device.

        Reduces a wide "latest" window (default DEVICES_VIEW_LIMIT) to one
        record per device, newest first. Devices quiet for longer than the
        window are not listed.
        """
        start = time.perf_counter()
        limit = queries.effective_limit(_int_arg('limit', query_config.devices_view_limit))

        devices = latest_per_device(queries.latest(limit))

        return jsonify({
            'data': [r.to_dict() for r in devices],
            'count': len(devices),
            'limit': limit,
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'query_time_ms': _elapsed_ms(start),
        })

    @flightdata_bp.route('/summary', methods=['GET'])
    def track_summary():
        """
        Summarize a device's track over an inclusive time window.

        Query parameters (all required): deviceId, startTime, endTime
        """
        start = time.perf_counter()

        device_id = request.args.get('deviceId') or None
        start_time = _int_arg('startTime')
        end_time = _int_arg('endTime')
        if not device_id or start_time is None or end_time is None:
            raise ValidationError('deviceId, startTime and endTime are required')

        summary = summarize_track(queries.range(device_id, start_time, end_time))
        summary.device_id = summary.device_id or device_id

        return jsonify({
            'summary': summary.to_dict(),
            'timeRange': {'startTime': start_time, 'endTime': end_time},
            'query_time_ms': _elapsed_ms(start),
        })

    return flightdata_bp
