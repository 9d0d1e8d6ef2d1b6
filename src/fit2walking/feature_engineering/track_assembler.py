import logging
from datetime import tzinfo
from typing import List, Optional

from fit2walking.data_ingestion.record_adapter import Point
from fit2walking.feature_engineering.geodesic import average, average_timestamp, distance
from fit2walking.feature_engineering.segmenter import Track
from fit2walking.map_document import (
    TIMESTAMP_FORMAT,
    EdgeProperties,
    Feature,
    FeatureCollection,
    LineString,
)

logger = logging.getLogger(__name__)


def _lonlat(point: Point):
    return (point.longitude_deg, point.latitude_deg)


def build_track(track: Track) -> FeatureCollection:
    """One LineString feature per segment, with empty properties."""
    features = [
        Feature(geometry=LineString(coordinates=[_lonlat(p) for p in segment]))
        for segment in track
    ]
    return FeatureCollection(features=features)


def edge_properties(
    point1: Point,
    point2: Point,
    running_distance: float,
    tz: Optional[tzinfo] = None,
) -> EdgeProperties:
    """Interpolate the attributes of two consecutive points onto their edge."""
    timestamp = average_timestamp(point1.timestamp, point2.timestamp, tz)
    return EdgeProperties(
        running_distance=running_distance,
        speed=average(point1.speed_km_per_h, point2.speed_km_per_h),
        elevation=average(point1.elevation_m, point2.elevation_m),
        heart_rate=average(point1.heart_rate_bpm, point2.heart_rate_bpm),
        cadence=average(point1.cadence_rpm, point2.cadence_rpm),
        temperature=average(point1.temperature_degc, point2.temperature_degc),
        timestamp=None if timestamp is None else timestamp.strftime(TIMESTAMP_FORMAT),
    )


def build_points(
    track: Track,
    strict: bool = False,
    tz: Optional[tzinfo] = None,
) -> FeatureCollection:
    """
    One feature per pair of adjacent points within each segment.

    Segments are not connected to each other, but the running distance keeps
    accumulating across them for the whole track.

    Parameters
    ----------
    track : Track
        Segments produced by TrackSegmenter.
    strict : bool
        Geodesic non-convergence policy, see geodesic.distance.
    tz : tzinfo, optional
        Timezone for averaged timestamps. Defaults to system local time.
    """
    features: List[Feature] = []
    running_dist_m = 0.0
    for segment in track:
        for point1, point2 in zip(segment, segment[1:]):
            running_dist_m += distance(point1, point2, strict=strict)
            features.append(
                Feature(
                    properties=edge_properties(point1, point2, running_dist_m, tz),
                    geometry=LineString(coordinates=[_lonlat(point1), _lonlat(point2)]),
                )
            )

    logger.debug(f"Built {len(features)} edge features, {running_dist_m:.1f} m in total")
    return FeatureCollection(features=features)
