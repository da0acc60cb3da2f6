"""
Track summary for one device's history using NumPy.

Turns a range query result (one device, ascending timestamp) into
aggregate flight metrics:

1. Extent: sample count, first/last timestamp, duration
2. Path: great-circle length of the reported positions, bounding box
3. Statistics: speed and ground distance summaries
4. Trend: climbing / descending / level from a linear fit of ground distance

All calculations are vectorized. Values that are not finite are ignored
per metric, so one bad field does not discard the whole sample.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence

import numpy as np

from flightdata.models import TelemetryRecord

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0


class TrendDirection(str, Enum):
    """Trend direction classification."""
    INCREASING = 'increasing'
    STABLE = 'stable'
    DECREASING = 'decreasing'
    UNKNOWN = 'unknown'


@dataclass
class MetricStats:
    """Summary statistics for a single metric."""
    mean: float
    std: float
    min_val: float
    max_val: float
    count: int

    def to_dict(self) -> dict:
        return {
            'mean': round(self.mean, 3),
            'std': round(self.std, 3),
            'min': self.min_val,
            'max': self.max_val,
            'count': self.count,
        }


@dataclass
class TrackSummary:
    """Aggregate metrics for one device over a time window."""
    device_id: Optional[str]
    sample_count: int

    first_timestamp: Optional[int] = None
    last_timestamp: Optional[int] = None

    # Great-circle length of the reported path
    distance_km: Optional[float] = None

    # (lat_min, lon_min, lat_max, lon_max)
    bounding_box: Optional[List[float]] = None

    speed: Optional[MetricStats] = None
    ground_distance: Optional[MetricStats] = None
    altitude_trend: TrendDirection = TrendDirection.UNKNOWN

    warnings: List[str] = field(default_factory=list)

    @property
    def duration(self) -> Optional[int]:
        """Span between first and last timestamp, in producer units."""
        if self.first_timestamp is None or self.last_timestamp is None:
            return None
        return self.last_timestamp - self.first_timestamp

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict for API responses."""
        return {
            'deviceId': self.device_id,
            'sampleCount': self.sample_count,
            'firstTimestamp': self.first_timestamp,
            'lastTimestamp': self.last_timestamp,
            'duration': self.duration,
            'distanceKm': round(self.distance_km, 3) if self.distance_km is not None else None,
            'boundingBox': self.bounding_box,
            'speed': self.speed.to_dict() if self.speed else None,
            'groundDistance': self.ground_distance.to_dict() if self.ground_distance else None,
            'altitudeTrend': self.altitude_trend.value,
            'warnings': self.warnings,
        }


def haversine_km(
    lat1: np.ndarray, lon1: np.ndarray,
    lat2: np.ndarray, lon2: np.ndarray,
) -> np.ndarray:
    """
    Great-circle distance between paired points in kilometers.

    Uses the Haversine formula for accuracy over short to medium distances.
    """
    lat1_rad = np.radians(lat1)
    lat2_rad = np.radians(lat2)
    delta_lat = lat2_rad - lat1_rad
    delta_lon = np.radians(lon2 - lon1)

    a = (
        np.sin(delta_lat / 2) ** 2 +
        np.cos(lat1_rad) * np.cos(lat2_rad) *
        np.sin(delta_lon / 2) ** 2
    )
    c = 2 * np.arctan2(np.sqrt(a), np.sqrt(1 - a))

    return EARTH_RADIUS_KM * c


def _as_array(values: Sequence) -> np.ndarray:
    """Float array with None and non-numeric values as NaN."""
    out = np.full(len(values), np.nan, dtype=np.float64)
    for i, v in enumerate(values):
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            out[i] = v
    return out


def _metric_stats(values: np.ndarray) -> Optional[MetricStats]:
    valid = values[np.isfinite(values)]
    if len(valid) == 0:
        return None

    return MetricStats(
        mean=float(np.mean(valid)),
        std=float(np.std(valid)),
        min_val=float(np.min(valid)),
        max_val=float(np.max(valid)),
        count=len(valid),
    )


def _trend(
    timestamps: np.ndarray,
    values: np.ndarray,
    min_samples: int,
    threshold: float,
) -> TrendDirection:
    """
    Determine trend direction using linear regression.

    The slope is scaled by the value range and the time span so the
    threshold is independent of units.
    """
    valid_mask = np.isfinite(values)
    t = timestamps[valid_mask]
    v = values[valid_mask]

    if len(t) < min_samples:
        return TrendDirection.UNKNOWN

    # Normalize timestamps to avoid numerical issues
    t_normalized = t - t[0]
    span = np.ptp(t_normalized)
    value_range = np.ptp(v)
    if span == 0 or value_range == 0:
        return TrendDirection.STABLE

    try:
        slope, _ = np.polyfit(t_normalized, v, 1)
    except np.linalg.LinAlgError:
        return TrendDirection.UNKNOWN

    normalized_slope = slope * span / value_range

    if normalized_slope > threshold:
        return TrendDirection.INCREASING
    elif normalized_slope < -threshold:
        return TrendDirection.DECREASING
    else:
        return TrendDirection.STABLE


def summarize_track(
    records: Sequence[TelemetryRecord],
    min_trend_samples: int = 3,
    trend_threshold: float = 0.5,
) -> TrackSummary:
    """
    Summarize one device's records.

    Records are expected in ascending timestamp order (as returned by a
    range query); they are re-sorted defensively by (timestamp, id) so the
    path length follows reported time, not arrival order.
    """
    if not records:
        return TrackSummary(device_id=None, sample_count=0)

    ordered = sorted(records, key=lambda r: (r.timestamp, r.id or 0))

    device_ids = {r.device_id for r in ordered}
    summary = TrackSummary(
        device_id=ordered[0].device_id,
        sample_count=len(ordered),
        first_timestamp=ordered[0].timestamp,
        last_timestamp=ordered[-1].timestamp,
    )
    if len(device_ids) > 1:
        summary.device_id = None
        summary.warnings.append(f'records span {len(device_ids)} devices')

    timestamps = np.array([r.timestamp for r in ordered], dtype=np.float64)
    lats = _as_array([r.latitude for r in ordered])
    lons = _as_array([r.longitude for r in ordered])
    speeds = _as_array([r.speed for r in ordered])
    ground = _as_array([r.ground_distance for r in ordered])

    # Path length over consecutive valid positions
    position_mask = np.isfinite(lats) & np.isfinite(lons)
    valid_lats = lats[position_mask]
    valid_lons = lons[position_mask]
    if len(valid_lats) > 0:
        segments = haversine_km(valid_lats[:-1], valid_lons[:-1], valid_lats[1:], valid_lons[1:])
        summary.distance_km = float(np.sum(segments))
        summary.bounding_box = [
            float(np.min(valid_lats)),
            float(np.min(valid_lons)),
            float(np.max(valid_lats)),
            float(np.max(valid_lons)),
        ]
    else:
        summary.warnings.append('no valid positions')

    if len(valid_lats) < len(ordered):
        logger.debug(f'{len(ordered) - len(valid_lats)} samples without a usable position')

    summary.speed = _metric_stats(speeds)
    summary.ground_distance = _metric_stats(ground)
    summary.altitude_trend = _trend(timestamps, ground, min_trend_samples, trend_threshold)

    return summary
