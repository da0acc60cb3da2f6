"""
Query module for FlightData.

Read-side access to stored telemetry: latest across devices, latest for
one device, and a device's history in a time window.
"""

from flightdata.query.service import QueryService

__all__ = ['QueryService']
