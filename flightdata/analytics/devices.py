"""
Consumer-side fleet view: newest record per device.

The dashboard polls the "latest across devices" query with a wide limit
and keeps one row per device. That reduction lives here as a pure
function so it can be tested on its own; the store and query service
never deduplicate.
"""

from typing import Dict, Iterable, List

from flightdata.models import TelemetryRecord


def latest_per_device(records: Iterable[TelemetryRecord]) -> List[TelemetryRecord]:
    """
    Keep the record with the greatest timestamp for each device.

    Ties on timestamp go to the later insert (greater id). The result is
    sorted by timestamp descending.

    Devices whose newest record fell outside the queried window simply
    don't appear; widen the `latest` limit to see more of the fleet.
    """
    newest: Dict[str, TelemetryRecord] = {}

    for record in records:
        current = newest.get(record.device_id)
        if current is None or (record.timestamp, record.id) > (current.timestamp, current.id):
            newest[record.device_id] = record

    return sorted(
        newest.values(),
        key=lambda r: (r.timestamp, r.id),
        reverse=True,
    )
