"""Tests for mapping decoded FIT messages onto track points."""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError
from zoneinfo import ZoneInfo

from fakes import FakeField, FakeRecord, degrees_to_semicircles, fix, lap, no_fix, timer_event, timer_stop
from fit2walking.data_ingestion.record_adapter import (
    Point,
    has_position_fix,
    is_timer_stop,
    resolve_timezone,
    semicircles_to_degrees,
    to_point,
)
from fit2walking.errors import FieldEncodingError

UTC = ZoneInfo("UTC")


class TestSemicircles:
    def test_zero_is_zero_degrees(self) -> None:
        assert semicircles_to_degrees(0) == 0.0

    def test_max_value_is_just_under_180(self) -> None:
        degrees = semicircles_to_degrees(2**31 - 1)
        assert degrees < 180.0
        assert degrees == pytest.approx(180.0, abs=1e-6)

    def test_min_value_is_minus_180(self) -> None:
        assert semicircles_to_degrees(-(2**31)) == -180.0

    def test_quarter_turn(self) -> None:
        assert semicircles_to_degrees(2**30) == 90.0


class TestToPoint:
    def test_decodes_all_fields(self) -> None:
        record = fix(
            48.2,
            16.37,
            timestamp=datetime(2023, 1, 1, 10, 0, 0),
            enhanced_altitude=171.4,
            enhanced_speed=1.5,
            heart_rate=112,
            cadence=54,
            temperature=-3,
        )

        point = to_point(record, tz=UTC)

        assert point is not None
        assert point.latitude_deg == pytest.approx(48.2, abs=1e-7)
        assert point.longitude_deg == pytest.approx(16.37, abs=1e-7)
        assert point.elevation_m == 171.4
        assert point.speed_km_per_h == pytest.approx(5.4)
        assert point.heart_rate_bpm == 112
        assert point.cadence_rpm == 54
        assert point.temperature_degc == -3
        assert point.unix_timestamp == 1672567200.0
        assert point.timestamp == datetime(2023, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
        assert point.timestamp.utcoffset().total_seconds() == 0

    def test_timestamp_converted_to_requested_zone(self) -> None:
        record = fix(48.2, 16.37, timestamp=datetime(2023, 7, 1, 10, 0, 0))
        point = to_point(record, tz=ZoneInfo("Europe/Vienna"))

        assert point is not None
        assert point.timestamp.hour == 12
        assert point.timestamp.utcoffset().total_seconds() == 2 * 3600

    def test_optional_fields_absent(self) -> None:
        point = to_point(fix(1.0, 2.0))

        assert point is not None
        assert point.elevation_m is None
        assert point.speed_km_per_h is None
        assert point.heart_rate_bpm is None
        assert point.cadence_rpm is None
        assert point.temperature_degc is None
        assert point.timestamp is None
        assert point.unix_timestamp is None

    def test_non_position_messages_yield_none(self) -> None:
        assert to_point(lap()) is None
        assert to_point(timer_stop()) is None

    def test_missing_longitude_yields_none(self) -> None:
        record = FakeRecord("record", [FakeField("position_lat", degrees_to_semicircles(1.0), 0)])
        assert not has_position_fix(record)
        assert to_point(record) is None

    def test_invalid_marker_counts_as_missing(self) -> None:
        record = fix(1.0, 2.0)
        record.fields[1] = FakeField("position_long", None, 1)
        assert not has_position_fix(record)
        assert to_point(record) is None

    def test_record_without_position(self) -> None:
        assert to_point(no_fix(heart_rate=100)) is None

    def test_float_position_is_fatal(self) -> None:
        record = FakeRecord(
            "record",
            [FakeField("position_lat", 48.2, 0), FakeField("position_long", 16.37, 1)],
        )
        with pytest.raises(FieldEncodingError, match="position_lat"):
            to_point(record)

    def test_out_of_range_latitude_is_fatal(self) -> None:
        with pytest.raises(FieldEncodingError):
            to_point(fix(100.0, 0.0))

    def test_unexpected_optional_type_is_ignored(self) -> None:
        point = to_point(fix(1.0, 2.0, heart_rate="high", enhanced_altitude=12))
        assert point is not None
        assert point.heart_rate_bpm is None
        assert point.elevation_m is None

    def test_first_matching_field_wins(self) -> None:
        record = fix(1.0, 2.0, heart_rate=120)
        record.fields.append(FakeField("heart_rate", 180, 3))

        point = to_point(record)
        assert point is not None
        assert point.heart_rate_bpm == 120


class TestTimerStop:
    def test_stop_all(self) -> None:
        assert is_timer_stop(timer_stop())

    def test_timer_start_is_not_stop(self) -> None:
        assert not is_timer_stop(timer_event("start"))

    def test_other_event_category(self) -> None:
        record = FakeRecord(
            "event",
            [FakeField("event", "session", 0), FakeField("event_type", "stop_all", 1)],
        )
        assert not is_timer_stop(record)

    def test_lookup_by_field_number(self) -> None:
        record = FakeRecord(
            "event",
            [FakeField("unknown_0", "timer", 0), FakeField("unknown_1", "stop_all", 1)],
        )
        assert is_timer_stop(record)

    def test_position_record_is_not_event(self) -> None:
        assert not is_timer_stop(fix(1.0, 2.0))


def test_point_is_immutable() -> None:
    point = Point(latitude_deg=1.0, longitude_deg=2.0)
    with pytest.raises(ValidationError):
        point.latitude_deg = 3.0  # type: ignore[misc]


def test_resolve_timezone() -> None:
    assert resolve_timezone(None) is None
    assert resolve_timezone("UTC") == UTC
    with pytest.raises(ValueError, match="Unknown timezone"):
        resolve_timezone("Mars/Olympus_Mons")
