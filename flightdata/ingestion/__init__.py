"""
Data ingestion module for FlightData.

Validates producer samples and writes them to the telemetry store,
one at a time or as atomic batches.
"""

from flightdata.ingestion.service import IngestionService

__all__ = ['IngestionService']
