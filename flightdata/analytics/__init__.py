"""
Analytics module for FlightData.

Pure transforms over query results, kept outside the store and the
query service:
- Fleet view: newest record per device
- Track summary: NumPy path length, speed/altitude statistics and trend
"""

from flightdata.analytics.devices import latest_per_device
from flightdata.analytics.track import (
    MetricStats,
    TrackSummary,
    TrendDirection,
    haversine_km,
    summarize_track,
)

__all__ = [
    'latest_per_device',
    'MetricStats',
    'TrackSummary',
    'TrendDirection',
    'haversine_km',
    'summarize_track',
]
