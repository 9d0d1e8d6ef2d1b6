"""
Privacy censoring regions.

A censor file lists the vertices of one closed polygon, one
``latitude longitude`` pair per line:

    # around the front door
    48.208_49  16.372_08
    48.208_61  16.373_35   # corner
    48.207_70  16.373_51

Points recorded inside any configured polygon are removed from the track.
"""

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

from shapely.geometry import Point as ShapelyPoint
from shapely.geometry import Polygon
from shapely.prepared import prep

from fit2walking.data_ingestion.record_adapter import Point
from fit2walking.errors import CensorFileError

logger = logging.getLogger(__name__)

COMMENT_CHAR = "#"


class CensorPolygon:
    """
    A closed ring of (latitude, longitude) vertices.

    Containment is evaluated in the (longitude, latitude) plane. Points lying
    exactly on an edge or a vertex are outside the polygon.
    """

    def __init__(self, vertices: Iterable[Tuple[float, float]], source: Optional[str] = None):
        self.vertices: List[Tuple[float, float]] = list(vertices)
        self.source = source
        if len(set(self.vertices)) < 3:
            raise CensorFileError(
                f"a censor polygon needs at least 3 distinct vertices, got {len(self.vertices)}",
                source=source,
            )
        self._polygon = Polygon([(lon, lat) for lat, lon in self.vertices])
        self._prepared = prep(self._polygon)

    def contains(self, point: Point) -> bool:
        """True if the point lies strictly inside the polygon."""
        return self._prepared.contains(ShapelyPoint(point.longitude_deg, point.latitude_deg))

    def __reduce__(self):
        # prepared geometries do not pickle; rebuild from the vertices in worker processes
        return (CensorPolygon, (self.vertices, self.source))

    def __repr__(self) -> str:
        return f"CensorPolygon(source={self.source!r}, vertices={len(self.vertices)})"


def _parse_coordinate(
    token: str, line_number: int, low: float, high: float, source: Optional[str]
) -> float:
    try:
        value = float(token.replace("_", ""))
    except ValueError as exc:
        raise CensorFileError(
            f"invalid coordinate {token!r}", line_number=line_number, token=token, source=source
        ) from exc
    if not low <= value <= high:
        raise CensorFileError(
            f"coordinate {token!r} outside [{low}, {high}]",
            line_number=line_number,
            token=token,
            source=source,
        )
    return value


def load_censor_polygon(text: str, source: Optional[str] = None) -> CensorPolygon:
    """
    Parse a censor polygon description.

    Args:
        text: File contents, one ``latitude longitude`` pair per line.
        source: Name used in error messages (usually the file path).

    Returns:
        The parsed CensorPolygon.

    Raises:
        CensorFileError: On a malformed line, with its 1-based number and the offending token.
    """
    vertices: List[Tuple[float, float]] = []
    for line_number, raw_line in enumerate(text.splitlines(), start=1):
        tokens = raw_line.split(COMMENT_CHAR, 1)[0].split()
        if not tokens:
            continue
        if len(tokens) != 2:
            offending = tokens[2] if len(tokens) > 2 else None
            raise CensorFileError(
                f"expected 'latitude longitude', got {len(tokens)} token(s)",
                line_number=line_number,
                token=offending,
                source=source,
            )
        lat = _parse_coordinate(tokens[0], line_number, -90.0, 90.0, source)
        lon = _parse_coordinate(tokens[1], line_number, -180.0, 180.0, source)
        vertices.append((lat, lon))

    return CensorPolygon(vertices, source=source)


def load_censor_file(path: Union[str, Path]) -> CensorPolygon:
    """Read and parse a censor polygon file."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise CensorFileError(f"cannot read censor file: {exc}", source=str(path)) from exc

    polygon = load_censor_polygon(text, source=str(path))
    logger.info(f"Loaded censor polygon with {len(polygon.vertices)} vertices from {path}")
    return polygon


def is_censored(point: Point, polygons: Iterable[CensorPolygon]) -> bool:
    """True if any of the polygons contains the point."""
    return any(polygon.contains(point) for polygon in polygons)
