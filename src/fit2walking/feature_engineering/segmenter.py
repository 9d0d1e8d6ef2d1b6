import logging
from dataclasses import dataclass
from datetime import tzinfo
from typing import Iterable, List, Optional, Sequence

from fit2walking.data_ingestion.record_adapter import (
    Point,
    has_position_fix,
    is_position_record,
    is_timer_stop,
    to_point,
)
from fit2walking.feature_engineering.censor import CensorPolygon, is_censored
from fit2walking.protocols import TelemetryRecord

logger = logging.getLogger(__name__)

Segment = List[Point]
Track = List[Segment]


@dataclass
class SegmentationStats:
    """Counters collected while segmenting one record stream."""

    records: int = 0
    points_kept: int = 0
    points_censored: int = 0
    fixes_lost: int = 0
    timer_stops: int = 0
    segments: int = 0


class TrackSegmenter:
    """
    Splits a decoded record stream into contiguous track segments.

    A segment is closed by a timer stop event or by a position record without
    a fix. Censored points are dropped but do not close the segment.
    """

    def __init__(
        self,
        censor_polygons: Sequence[CensorPolygon] = (),
        tz: Optional[tzinfo] = None,
    ):
        self.censor_polygons = list(censor_polygons)
        self.tz = tz
        self.stats = SegmentationStats()
        self._track: Track = []
        self._current: Segment = []

    def process(self, records: Iterable[TelemetryRecord]) -> Track:
        """
        Main loop: consume every record in order, then flush the open segment.

        Returns
        -------
        Track
            Non-empty segments in recording order.
        """
        self.stats = SegmentationStats()
        self._track = []
        self._current = []

        for record in records:
            self.feed(record)
        self._close_segment()

        self.stats.segments = len(self._track)
        logger.info(
            f"Segmented {self.stats.records} records into {self.stats.segments} segments "
            f"({self.stats.points_kept} points kept, {self.stats.points_censored} censored, "
            f"{self.stats.fixes_lost} fixes lost, {self.stats.timer_stops} timer stops)"
        )
        return self._track

    def feed(self, record: TelemetryRecord) -> None:
        """Apply a single record to the state machine."""
        self.stats.records += 1

        if is_timer_stop(record):
            self.stats.timer_stops += 1
            self._close_segment()
            return

        if not is_position_record(record):
            return

        if not has_position_fix(record):
            # position recording paused (e.g. went indoors)
            self.stats.fixes_lost += 1
            self._close_segment()
            return

        point = to_point(record, self.tz)
        if point is None:
            return

        if is_censored(point, self.censor_polygons):
            self.stats.points_censored += 1
            return

        self._current.append(point)
        self.stats.points_kept += 1

    def _close_segment(self) -> None:
        if self._current:
            self._track.append(self._current)
            self._current = []
