"""
Sample model - one telemetry reading as sent by a producer.

Producers post camelCase JSON (deviceId, formattedTime, velocity: {x, y, z},
...). This module normalizes that payload into a typed dataclass and
decides whether it is acceptable.

Only identity and ordering fields are checked: `deviceId` must be a
non-empty string and `timestamp` must be an integer. Everything else is
stored as reported, including physically implausible values (negative
speed, latitude outside +/-90). Plausibility filtering is a consumer
decision.
"""

import math
from dataclasses import dataclass, field, replace
from typing import Any, Mapping, Optional

from flightdata.errors import ValidationError


@dataclass(frozen=True)
class Velocity:
    """Velocity vector components."""
    x: Optional[float] = None
    y: Optional[float] = None
    z: Optional[float] = None

    @classmethod
    def from_payload(cls, value: Any) -> 'Velocity':
        if not isinstance(value, Mapping):
            return cls()
        return cls(x=value.get('x'), y=value.get('y'), z=value.get('z'))

    def to_payload(self) -> dict:
        return {'x': self.x, 'y': self.y, 'z': self.z}


@dataclass(frozen=True)
class Sample:
    """
    One telemetry reading.

    Transient: exists only while a request is being handled, and becomes
    a TelemetryRecord once the store commits it.
    """
    device_id: Any
    timestamp: Any
    formatted_time: Optional[str] = None

    # Position (WGS84)
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    # Attitude in degrees
    pitch: Optional[float] = None
    yaw: Optional[float] = None
    roll: Optional[float] = None

    speed: Optional[float] = None
    velocity: Velocity = field(default_factory=Velocity)
    horizontal_speed: Optional[float] = None
    vertical_speed: Optional[float] = None
    flight_direction: Optional[float] = None
    ground_distance: Optional[float] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> 'Sample':
        """
        Build a sample from the camelCase wire format.

        Missing fields become None; no judgement is made here.
        """
        return cls(
            device_id=payload.get('deviceId'),
            timestamp=payload.get('timestamp'),
            formatted_time=payload.get('formattedTime'),
            latitude=payload.get('latitude'),
            longitude=payload.get('longitude'),
            pitch=payload.get('pitch'),
            yaw=payload.get('yaw'),
            roll=payload.get('roll'),
            speed=payload.get('speed'),
            velocity=Velocity.from_payload(payload.get('velocity')),
            horizontal_speed=payload.get('horizontalSpeed'),
            vertical_speed=payload.get('verticalSpeed'),
            flight_direction=payload.get('flightDirection'),
            ground_distance=payload.get('groundDistance'),
        )

    def to_payload(self) -> dict:
        """Convert back to the camelCase wire format."""
        return {
            'deviceId': self.device_id,
            'formattedTime': self.formatted_time,
            'timestamp': self.timestamp,
            'latitude': self.latitude,
            'longitude': self.longitude,
            'pitch': self.pitch,
            'yaw': self.yaw,
            'roll': self.roll,
            'speed': self.speed,
            'velocity': self.velocity.to_payload(),
            'horizontalSpeed': self.horizontal_speed,
            'verticalSpeed': self.vertical_speed,
            'flightDirection': self.flight_direction,
            'groundDistance': self.ground_distance,
        }

    def to_record_values(self) -> dict:
        """Flatten into column values for the unity_data table."""
        return {
            'device_id': self.device_id,
            'formatted_time': self.formatted_time,
            'timestamp': self.timestamp,
            'latitude': self.latitude,
            'longitude': self.longitude,
            'pitch': self.pitch,
            'yaw': self.yaw,
            'roll': self.roll,
            'speed': self.speed,
            'velocity_x': self.velocity.x,
            'velocity_y': self.velocity.y,
            'velocity_z': self.velocity.z,
            'horizontal_speed': self.horizontal_speed,
            'vertical_speed': self.vertical_speed,
            'flight_direction': self.flight_direction,
            'ground_distance': self.ground_distance,
        }


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of `validate`: ok, or the reason the sample is invalid."""
    ok: bool
    reason: Optional[str] = None

    def __bool__(self) -> bool:
        return self.ok


VALID = ValidationResult(ok=True)

# Signed 64-bit, the range of the timestamp column
TIMESTAMP_MIN = -2 ** 63
TIMESTAMP_MAX = 2 ** 63 - 1


def in_timestamp_range(value: int) -> bool:
    return TIMESTAMP_MIN <= value <= TIMESTAMP_MAX


def coerce_timestamp(value: Any) -> Optional[int]:
    """
    Interpret `value` as an integer timestamp.

    Accepts ints, integral floats (1.7e12) and integer strings ("1700000000")
    that fit a signed 64-bit column. Returns None for anything else,
    including booleans.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, int):
        result = value
    elif isinstance(value, float):
        if not (math.isfinite(value) and value.is_integer()):
            return None
        result = int(value)
    elif isinstance(value, str):
        try:
            result = int(value.strip())
        except ValueError:
            return None
    else:
        return None

    return result if in_timestamp_range(result) else None


def validate(sample: Sample) -> ValidationResult:
    """Check the fields the store orders and partitions by. No side effects."""
    if not isinstance(sample.device_id, str) or sample.device_id == '':
        return ValidationResult(False, 'missing deviceId')
    if sample.timestamp is None:
        return ValidationResult(False, 'missing timestamp')
    if coerce_timestamp(sample.timestamp) is None:
        return ValidationResult(False, f'timestamp is not an integer: {sample.timestamp!r}')
    return VALID


def parse_sample(payload: Any) -> Sample:
    """
    Parse and validate a wire payload.

    Returns the sample with `timestamp` normalized to int.

    Raises:
        ValidationError: payload is not an object, or fails `validate`
    """
    if not isinstance(payload, Mapping):
        raise ValidationError('Invalid data format: expected a JSON object')

    sample = Sample.from_payload(payload)
    result = validate(sample)
    if not result:
        raise ValidationError(f'Invalid data format: {result.reason}')

    return replace(sample, timestamp=coerce_timestamp(sample.timestamp))
