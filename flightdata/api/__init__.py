"""
API module for FlightData.

Provides REST endpoints for:
- Telemetry ingestion (single and batch)
- Telemetry queries (latest, per device, time range) and consumer views
- System status
"""

from flightdata.api.flightdata import create_flightdata_blueprint
from flightdata.api.status import create_status_blueprint

__all__ = ['create_flightdata_blueprint', 'create_status_blueprint']
