"""
Query service - the three read shapes served to consumers.

    latest(limit)                           newest records across all devices
    latest_for_device(device_id, limit)     newest records for one device
    range(device_id, start_time, end_time)  one device's history, oldest first

No result is ever an error: an unknown device or an inverted window is an
empty list. Records are returned as stored; there is no grouping to one
record per device (see analytics.devices for the consumer-side reduction).
"""

import logging
from typing import List, Optional

from flightdata.models import TelemetryRecord
from flightdata.storage import TelemetryStore

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 10


class QueryService:
    """
    Resolves read requests into store calls.

    Holds no record cache; every call reads through to the store.
    """

    def __init__(
        self,
        store: TelemetryStore,
        default_limit: int = DEFAULT_LIMIT,
        max_limit: Optional[int] = None,
    ):
        self.store = store
        self.default_limit = default_limit
        self.max_limit = max_limit

    def effective_limit(self, limit: Optional[int] = None) -> int:
        """The limit a query will actually use: default when None, clamped to [0, max_limit]."""
        if limit is None:
            limit = self.default_limit
        limit = max(0, limit)
        if self.max_limit is not None:
            limit = min(limit, self.max_limit)
        return limit

    def latest(self, limit: Optional[int] = None) -> List[TelemetryRecord]:
        """Newest records across all devices, timestamp descending."""
        limit = self.effective_limit(limit)
        logger.debug(f'Query latest limit={limit}')
        return self.store.query_latest(limit)

    def latest_for_device(self, device_id: str, limit: Optional[int] = None) -> List[TelemetryRecord]:
        """Newest records for `device_id`; empty if the device never reported."""
        limit = self.effective_limit(limit)
        logger.debug(f'Query latest device={device_id} limit={limit}')
        return self.store.query_latest_for_device(device_id, limit)

    def range(self, device_id: str, start_time: int, end_time: int) -> List[TelemetryRecord]:
        """
        Records for `device_id` with start_time <= timestamp <= end_time.

        Ascending by timestamp. An inverted window (start > end) matches
        nothing and is answered without a store call.
        """
        if start_time > end_time:
            logger.debug(f'Inverted range for {device_id}: {start_time} > {end_time}')
            return []

        logger.debug(f'Query range device={device_id} [{start_time}, {end_time}]')
        return self.store.query_range(device_id, start_time, end_time)
