import logging
from typing import Optional, Tuple

import polars as pl
from pydantic import BaseModel

from fit2walking.errors import MissingExtentError
from fit2walking.feature_engineering.segmenter import Track

logger = logging.getLogger(__name__)

Range = Tuple[float, float]

DEFAULT_HEART_RATE_RANGE: Range = (80.0, 160.0)
DEFAULT_SPEED_RANGE: Range = (0.0, 10.0)
DEFAULT_CADENCE_RANGE: Range = (0.0, 120.0)
DEFAULT_TEMPERATURE_RANGE: Range = (-10.0, 45.0)

POINT_SCHEMA = {
    "segment": pl.Int64,
    "latitude": pl.Float64,
    "longitude": pl.Float64,
    "elevation": pl.Float64,
    "heart_rate": pl.Int64,
    "speed": pl.Float64,
    "cadence": pl.Int64,
    "temperature": pl.Int64,
    "unix_timestamp": pl.Float64,
}


class TrackExtents(BaseModel):
    """
    Attribute ranges of a track, used for map bounding and legend scaling.
    """

    latitude: Range
    longitude: Range
    elevation: Range
    heart_rate: Range
    speed: Range
    cadence: Range
    temperature: Range

    @property
    def center(self) -> Tuple[float, float]:
        """Midpoint of the lat/lon bounding box (the track never crosses the antimeridian)."""
        return (
            (self.latitude[0] + self.latitude[1]) / 2.0,
            (self.longitude[0] + self.longitude[1]) / 2.0,
        )


def track_to_dataframe(track: Track) -> pl.DataFrame:
    """
    Flattens all segments into one DataFrame, one row per point.
    The 'segment' column holds the index of the segment a point belongs to.
    """
    rows = [
        {
            "segment": index,
            "latitude": p.latitude_deg,
            "longitude": p.longitude_deg,
            "elevation": p.elevation_m,
            "heart_rate": p.heart_rate_bpm,
            "speed": p.speed_km_per_h,
            "cadence": p.cadence_rpm,
            "temperature": p.temperature_degc,
            "unix_timestamp": p.unix_timestamp,
        }
        for index, segment in enumerate(track)
        for p in segment
    ]
    return pl.DataFrame(rows, schema=POINT_SCHEMA)


def column_extent(df: pl.DataFrame, column: str) -> Optional[Range]:
    """(min, max) of a column, ignoring nulls. None if the column has no values."""
    series = df[column]
    low, high = series.min(), series.max()
    if low is None or high is None:
        return None
    return (float(low), float(high))


def compute_extents(
    track: Track,
    heart_rate_fallback: Range = DEFAULT_HEART_RATE_RANGE,
    speed_fallback: Range = DEFAULT_SPEED_RANGE,
    cadence_fallback: Range = DEFAULT_CADENCE_RANGE,
    temperature_fallback: Range = DEFAULT_TEMPERATURE_RANGE,
    elevation_fallback: Optional[Range] = None,
) -> TrackExtents:
    """
    Computes attribute ranges over every point of every segment.

    Optional attributes that no point reports fall back to the given ranges.
    Elevation has no fallback unless one is passed explicitly.

    Raises:
        MissingExtentError: If the track has no points, or no elevation and no fallback.
    """
    df = track_to_dataframe(track)
    if df.is_empty():
        raise MissingExtentError("track contains no position fixes")

    latitude = column_extent(df, "latitude")
    longitude = column_extent(df, "longitude")
    if latitude is None or longitude is None:
        raise MissingExtentError("track contains no coordinates")

    elevation = column_extent(df, "elevation")
    if elevation is None:
        if elevation_fallback is None:
            raise MissingExtentError("track contains no elevation data")
        logger.warning(f"No elevation data, using fallback range {elevation_fallback}")
        elevation = elevation_fallback

    return TrackExtents(
        latitude=latitude,
        longitude=longitude,
        elevation=elevation,
        heart_rate=column_extent(df, "heart_rate") or heart_rate_fallback,
        speed=column_extent(df, "speed") or speed_fallback,
        cadence=column_extent(df, "cadence") or cadence_fallback,
        temperature=column_extent(df, "temperature") or temperature_fallback,
    )
