import logging
from pathlib import Path
from typing import Iterable, Optional, Sequence, Union

from fit2walking.config.settings import Settings, settings
from fit2walking.data_ingestion.fit_reader import FitReader, echo_records
from fit2walking.data_ingestion.record_adapter import resolve_timezone
from fit2walking.feature_engineering.censor import CensorPolygon
from fit2walking.feature_engineering.extents import TrackExtents, compute_extents
from fit2walking.feature_engineering.segmenter import Track, TrackSegmenter
from fit2walking.feature_engineering.track_assembler import build_points, build_track
from fit2walking.map_document import WalkingMap
from fit2walking.protocols import TelemetryRecord

logger = logging.getLogger(__name__)


class WalkingMapPipeline:
    """
    Orchestrates the conversion of one activity file into a map document.
    """

    def __init__(
        self,
        fit_file_path: Optional[Union[str, Path]] = None,
        censor_polygons: Sequence[CensorPolygon] = (),
        config: Settings = settings,
        dump_events: bool = False,
        dump_position_records: bool = True,
    ):
        self.fit_file_path = fit_file_path
        self.censor_polygons = list(censor_polygons)
        self.config = config
        self.dump_events = dump_events
        self.dump_position_records = dump_position_records
        self.tz = resolve_timezone(config.TIMEZONE)
        self.track: Track = []
        self.extents: Optional[TrackExtents] = None

    def run(self) -> WalkingMap:
        """
        Executes the pipeline: Read FIT -> Segment -> Assemble.
        """
        if self.fit_file_path is None:
            raise ValueError("fit_file_path must be set to run the pipeline")

        logger.info(f"Starting pipeline for {self.fit_file_path}")
        reader = FitReader(self.fit_file_path)
        document = self.process_records(reader.iter_records())
        logger.info(
            f"Pipeline complete. {len(self.track)} segments, "
            f"{len(document.points.features)} edges for {self.fit_file_path}"
        )
        return document

    def process_records(self, records: Iterable[TelemetryRecord]) -> WalkingMap:
        """Builds the map document from an already decoded record stream."""
        if self.dump_events:
            records = echo_records(records, include_position_records=self.dump_position_records)

        # 1. Segmentation
        segmenter = TrackSegmenter(censor_polygons=self.censor_polygons, tz=self.tz)
        self.track = segmenter.process(records)

        # 2. GeoJSON assembly
        track = build_track(self.track)
        points = build_points(self.track, strict=self.config.GEODESIC_STRICT, tz=self.tz)

        # 3. Ranges for bounding and legends
        self.extents = compute_extents(
            self.track,
            heart_rate_fallback=self.config.HEART_RATE_FALLBACK,
            speed_fallback=self.config.SPEED_FALLBACK,
            cadence_fallback=self.config.CADENCE_FALLBACK,
            temperature_fallback=self.config.TEMPERATURE_FALLBACK,
            elevation_fallback=self.config.ELEVATION_FALLBACK,
        )

        return WalkingMap(
            center=self.extents.center,
            zoom=self.config.ZOOM,
            track=track,
            points=points,
            elevation_range=self.extents.elevation,
            heart_rate_range=self.extents.heart_rate,
            speed_range=self.extents.speed,
            cadence_range=self.extents.cadence,
            temperature_range=self.extents.temperature,
        )


def convert_file(
    fit_file_path: Union[str, Path],
    censor_polygons: Sequence[CensorPolygon] = (),
    config: Settings = settings,
    dump_events: bool = False,
    dump_position_records: bool = True,
) -> WalkingMap:
    """Runs the pipeline for one file. Module-level so worker processes can pickle it."""
    pipeline = WalkingMapPipeline(
        fit_file_path,
        censor_polygons=censor_polygons,
        config=config,
        dump_events=dump_events,
        dump_position_records=dump_position_records,
    )
    return pipeline.run()
