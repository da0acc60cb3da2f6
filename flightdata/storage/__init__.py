"""
Storage module for FlightData.

The store is the only shared resource between the write and read paths;
all atomicity and isolation is delegated to the database behind it.
"""

from flightdata.storage.telemetry_store import TelemetryStore

__all__ = ['TelemetryStore']
