"""
TelemetryRecord model - append-only time-series telemetry storage.

Every accepted sample becomes one row here. The table is never updated
or deleted from by this package; rows are immutable once committed.

Schema optimized for:
- Fast single and batch inserts (append-only pattern)
- "Most recent N" queries across all devices and per device
- Inclusive time-range queries per device
"""

from datetime import datetime, timezone
from typing import Any, Dict

from sqlalchemy import String, Float, Integer, BigInteger, DateTime, Index
from sqlalchemy.orm import Mapped, mapped_column

from flightdata.models.base import Base
from flightdata.models.sample import Sample, Velocity


class TelemetryRecord(Base):
    """
    A stored telemetry sample.

    One row per accepted sample. `id` and `created_at` are assigned by the
    store at insert time; everything else is the producer's data. Multiple
    rows may share a (device_id, timestamp) pair - producers may resend or
    deliver out of order, and both copies are kept.
    """

    __tablename__ = 'unity_data'

    # Surrogate key; AUTOINCREMENT keeps ids strictly increasing on SQLite
    # (no reuse of the largest id after deletes by external tooling)
    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
        comment='Surrogate key, insertion order'
    )

    device_id: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment='Reporting device identifier'
    )

    formatted_time: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        comment='Producer display time (not used for ordering)'
    )

    # The critical dimension for ordering and range filtering.
    # Producer epoch values may exceed 32 bits (milliseconds)
    timestamp: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        comment='Producer epoch timestamp'
    )

    # Position (WGS84)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)

    # Attitude in degrees
    pitch: Mapped[float] = mapped_column(Float, nullable=False)
    yaw: Mapped[float] = mapped_column(Float, nullable=False)
    roll: Mapped[float] = mapped_column(Float, nullable=False)

    speed: Mapped[float] = mapped_column(Float, nullable=False)

    # Velocity vector, flattened
    velocity_x: Mapped[float] = mapped_column(Float, nullable=False)
    velocity_y: Mapped[float] = mapped_column(Float, nullable=False)
    velocity_z: Mapped[float] = mapped_column(Float, nullable=False)

    horizontal_speed: Mapped[float] = mapped_column(Float, nullable=False)
    vertical_speed: Mapped[float] = mapped_column(Float, nullable=False)

    flight_direction: Mapped[float] = mapped_column(
        Float,
        nullable=False,
        comment='Heading in degrees'
    )

    ground_distance: Mapped[float] = mapped_column(
        Float,
        nullable=False,
        comment='Altitude above ground'
    )

    # Server ingest wall clock, independent of `timestamp`
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        comment='Record creation time'
    )

    # Range and per-device latest queries dominate the workload; none of
    # them may fall back to a full scan.
    __table_args__ = (
        Index('idx_device_id', 'device_id'),
        Index('idx_timestamp', 'timestamp'),
        Index('idx_created_at', 'created_at'),
        # Device history in a time window, newest-first per device
        Index('idx_device_timestamp', 'device_id', 'timestamp'),
        {'sqlite_autoincrement': True},
    )

    def __repr__(self) -> str:
        return f'<TelemetryRecord #{self.id} {self.device_id} @ {self.timestamp}>'

    @classmethod
    def column_values(cls, sample: Sample, created_at: datetime) -> Dict[str, Any]:
        """Row values for inserting `sample`; `id` is left to the database."""
        values = sample.to_record_values()
        values['created_at'] = created_at
        return values

    def to_sample(self) -> Sample:
        """The producer-supplied part of this record."""
        return Sample(
            device_id=self.device_id,
            formatted_time=self.formatted_time,
            timestamp=self.timestamp,
            latitude=self.latitude,
            longitude=self.longitude,
            pitch=self.pitch,
            yaw=self.yaw,
            roll=self.roll,
            speed=self.speed,
            velocity=Velocity(self.velocity_x, self.velocity_y, self.velocity_z),
            horizontal_speed=self.horizontal_speed,
            vertical_speed=self.vertical_speed,
            flight_direction=self.flight_direction,
            ground_distance=self.ground_distance,
        )

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict for API responses."""
        return {
            'id': self.id,
            'device_id': self.device_id,
            'formatted_time': self.formatted_time,
            'timestamp': self.timestamp,
            'latitude': self.latitude,
            'longitude': self.longitude,
            'pitch': self.pitch,
            'yaw': self.yaw,
            'roll': self.roll,
            'speed': self.speed,
            'velocity_x': self.velocity_x,
            'velocity_y': self.velocity_y,
            'velocity_z': self.velocity_z,
            'horizontal_speed': self.horizontal_speed,
            'vertical_speed': self.vertical_speed,
            'flight_direction': self.flight_direction,
            'ground_distance': self.ground_distance,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
