"""
Output document consumed by the walking map viewer.

The track and the points collection are GeoJSON FeatureCollections of
LineStrings; the range pairs scale the viewer's colour legends.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

Range = Tuple[float, float]


class LineString(BaseModel):
    type: Literal["LineString"] = "LineString"
    coordinates: List[Tuple[float, float]]  # (longitude, latitude)


class EdgeProperties(BaseModel):
    """Attributes interpolated onto the edge between two consecutive points."""

    running_distance: float
    speed: Optional[float] = None
    elevation: Optional[float] = None
    heart_rate: Optional[int] = None
    cadence: Optional[int] = None
    temperature: Optional[int] = None
    timestamp: Optional[str] = None


class Feature(BaseModel):
    type: Literal["Feature"] = "Feature"
    properties: Union[EdgeProperties, Dict[str, Any]] = Field(default_factory=dict)
    geometry: LineString


class FeatureCollection(BaseModel):
    type: Literal["FeatureCollection"] = "FeatureCollection"
    features: List[Feature] = Field(default_factory=list)


class WalkingMap(BaseModel):
    """Map document for one activity file."""

    center: Tuple[float, float]  # (latitude, longitude)
    zoom: int
    track: FeatureCollection
    points: FeatureCollection
    elevation_range: Range
    heart_rate_range: Range
    speed_range: Range
    cadence_range: Range
    temperature_range: Range

    def to_json(self) -> str:
        return self.model_dump_json(indent=2, exclude_none=True)

    def save(self, path: Union[str, Path]) -> Path:
        """Write the document as JSON, creating parent directories as needed."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.to_json() + "\n", encoding="utf-8")
        logger.info(f"Wrote map document to {path}")
        return path
