"""
Record adapter: maps decoded telemetry messages onto track points.

A FIT 'record' message carries the position in semicircles plus any number of
optional sensor readings. Devices report sensors intermittently, so every
non-geometry attribute of a Point is independently optional.
"""

import logging
from datetime import datetime, timezone, tzinfo
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fit2walking.errors import FieldEncodingError
from fit2walking.protocols import RecordField, TelemetryRecord

logger = logging.getLogger(__name__)

RECORD_MESSAGE = "record"
EVENT_MESSAGE = "event"

# Field numbers of the 'event' message
EVENT_CATEGORY_FIELD = 0
EVENT_TYPE_FIELD = 1

SEMICIRCLES_PER_HALF_TURN = 2**31
MPS_TO_KMH = 3.6


class Point(BaseModel):
    """
    A single position fix with the sensor readings recorded alongside it.
    """

    model_config = ConfigDict(frozen=True)

    latitude_deg: float = Field(ge=-90.0, le=90.0)
    longitude_deg: float = Field(ge=-180.0, le=180.0)
    elevation_m: Optional[float] = None
    unix_timestamp: Optional[float] = None
    heart_rate_bpm: Optional[int] = None
    speed_km_per_h: Optional[float] = None
    cadence_rpm: Optional[int] = None
    temperature_degc: Optional[int] = None
    timestamp: Optional[datetime] = None


def resolve_timezone(tz_name: Optional[str]) -> Optional[tzinfo]:
    """
    Create tzinfo from an IANA timezone name.

    Args:
        tz_name: Timezone name like "Europe/Vienna", or None for system local time.

    Returns:
        tzinfo instance, or None to use the system local timezone.

    Raises:
        ValueError: If the timezone name is unknown on this system.
    """
    if not tz_name:
        return None
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown timezone: {tz_name!r}") from exc


def to_local(dt: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """Convert a decoder timestamp to an aware local datetime. Naive values are UTC."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(tz)


def semicircles_to_degrees(value: int) -> float:
    """Convert a FIT semicircle angle to decimal degrees."""
    return value * 180.0 / SEMICIRCLES_PER_HALF_TURN


def find_field(record: TelemetryRecord, name: str) -> Optional[RecordField]:
    """Returns the first field called `name`, or None."""
    for field in record.fields:
        if field.name == name:
            return field
    return None


def find_field_by_number(record: TelemetryRecord, number: int) -> Optional[RecordField]:
    """Returns the first field with definition number `number`, or None."""
    for field in record.fields:
        if field.def_num == number:
            return field
    return None


def _field_value(record: TelemetryRecord, name: str) -> Any:
    field = find_field(record, name)
    return None if field is None else field.value


def is_timer_stop(record: TelemetryRecord) -> bool:
    """True for an event message signalling that the activity timer was stopped."""
    if record.name != EVENT_MESSAGE:
        return False
    category = find_field_by_number(record, EVENT_CATEGORY_FIELD)
    event_type = find_field_by_number(record, EVENT_TYPE_FIELD)
    if category is None or event_type is None:
        return False
    return category.value == "timer" and event_type.value == "stop_all"


def is_position_record(record: TelemetryRecord) -> bool:
    return record.name == RECORD_MESSAGE


def has_position_fix(record: TelemetryRecord) -> bool:
    """True when both position_lat and position_long carry a value."""
    return (
        _field_value(record, "position_lat") is not None
        and _field_value(record, "position_long") is not None
    )


def _position_degrees(record: TelemetryRecord, name: str) -> float:
    value = _field_value(record, name)
    # bool is an int subclass but never a valid semicircle value
    if isinstance(value, bool) or not isinstance(value, int):
        raise FieldEncodingError(
            f"{name} must be encoded as integer semicircles, got {type(value).__name__} {value!r}"
        )
    return semicircles_to_degrees(value)


def _optional_float(record: TelemetryRecord, name: str) -> Optional[float]:
    value = _field_value(record, name)
    if isinstance(value, float):
        return value
    return None


def _optional_int(record: TelemetryRecord, name: str) -> Optional[int]:
    value = _field_value(record, name)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None


def to_point(record: TelemetryRecord, tz: Optional[tzinfo] = None) -> Optional[Point]:
    """
    Decode a position record into a Point.

    Parameters
    ----------
    record : TelemetryRecord
        A decoded message.
    tz : tzinfo, optional
        Timezone for the calendar timestamp. Defaults to system local time.

    Returns
    -------
    Optional[Point]
        None for non-position messages or records without a fix.

    Raises
    ------
    FieldEncodingError
        If the position is not encoded as integer semicircles or lies outside
        the valid coordinate range.
    """
    if not is_position_record(record) or not has_position_fix(record):
        return None

    latitude_deg = _position_degrees(record, "position_lat")
    longitude_deg = _position_degrees(record, "position_long")

    unix_timestamp = None
    local_time = None
    raw_time = _field_value(record, "timestamp")
    if isinstance(raw_time, datetime):
        local_time = to_local(raw_time, tz)
        unix_timestamp = int(local_time.timestamp() * 1000) / 1000.0

    speed = _optional_float(record, "enhanced_speed")

    try:
        return Point(
            latitude_deg=latitude_deg,
            longitude_deg=longitude_deg,
            elevation_m=_optional_float(record, "enhanced_altitude"),
            unix_timestamp=unix_timestamp,
            heart_rate_bpm=_optional_int(record, "heart_rate"),
            speed_km_per_h=None if speed is None else speed * MPS_TO_KMH,
            cadence_rpm=_optional_int(record, "cadence"),
            temperature_degc=_optional_int(record, "temperature"),
            timestamp=local_time,
        )
    except ValidationError as exc:
        raise FieldEncodingError(
            f"position ({latitude_deg}, {longitude_deg}) is outside the valid coordinate range"
        ) from exc
