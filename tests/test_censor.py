"""
Tests for censor polygon parsing and containment.
"""

import pickle
import tempfile
import unittest
from pathlib import Path

from fit2walking.data_ingestion.record_adapter import Point
from fit2walking.errors import CensorFileError
from fit2walking.feature_engineering.censor import (
    CensorPolygon,
    is_censored,
    load_censor_file,
    load_censor_polygon,
)

SQUARE = """
# unit square north-east of the origin
0  0
0  1     # trailing comment
1  1

1  0
"""


def point(lat: float, lon: float) -> Point:
    return Point(latitude_deg=lat, longitude_deg=lon)


class TestLoadCensorPolygon(unittest.TestCase):
    def test_parses_vertices_skipping_comments_and_blanks(self):
        polygon = load_censor_polygon(SQUARE)
        self.assertEqual(polygon.vertices, [(0.0, 0.0), (0.0, 1.0), (1.0, 1.0), (1.0, 0.0)])

    def test_underscore_digit_separators(self):
        polygon = load_censor_polygon("48.208_49 16.372_08\n48.208_61 16.373_35\n48.207_70 16.373_51\n")
        self.assertAlmostEqual(polygon.vertices[0][0], 48.20849)
        self.assertAlmostEqual(polygon.vertices[2][1], 16.37351)

    def test_invalid_token_reports_line_and_token(self):
        text = "0 0\n# comment\n0 abc\n1 1\n"
        with self.assertRaises(CensorFileError) as ctx:
            load_censor_polygon(text, source="home.txt")
        self.assertEqual(ctx.exception.line_number, 3)
        self.assertEqual(ctx.exception.token, "abc")
        self.assertIn("home.txt:3", str(ctx.exception))

    def test_too_many_tokens(self):
        with self.assertRaises(CensorFileError) as ctx:
            load_censor_polygon("0 0\n0 1 2\n1 1\n")
        self.assertEqual(ctx.exception.line_number, 2)
        self.assertEqual(ctx.exception.token, "2")

    def test_single_token(self):
        with self.assertRaises(CensorFileError) as ctx:
            load_censor_polygon("0 0\n\n\n0\n")
        self.assertEqual(ctx.exception.line_number, 4)
        self.assertIsNone(ctx.exception.token)

    def test_latitude_out_of_range(self):
        with self.assertRaises(CensorFileError) as ctx:
            load_censor_polygon("0 0\n91 1\n1 1\n")
        self.assertEqual(ctx.exception.token, "91")

    def test_needs_three_vertices(self):
        with self.assertRaises(CensorFileError):
            load_censor_polygon("0 0\n1 1\n")


class TestContainment(unittest.TestCase):
    def setUp(self):
        self.square = load_censor_polygon(SQUARE)

    def test_inside(self):
        self.assertTrue(self.square.contains(point(0.5, 0.5)))

    def test_outside(self):
        self.assertFalse(self.square.contains(point(1.5, 0.5)))
        self.assertFalse(self.square.contains(point(0.5, -0.1)))

    def test_boundary_is_outside(self):
        self.assertFalse(self.square.contains(point(0.0, 0.5)))
        self.assertFalse(self.square.contains(point(1.0, 1.0)))

    def test_uses_longitude_latitude_plane(self):
        # tall thin rectangle: 0..10 degrees latitude, 0..1 degree longitude
        rectangle = CensorPolygon([(0, 0), (10, 0), (10, 1), (0, 1)])
        self.assertTrue(rectangle.contains(point(5.0, 0.5)))
        self.assertFalse(rectangle.contains(point(0.5, 5.0)))

    def test_is_censored_any_polygon(self):
        far_away = CensorPolygon([(40, 40), (40, 41), (41, 41)])
        self.assertTrue(is_censored(point(0.5, 0.5), [far_away, self.square]))
        self.assertFalse(is_censored(point(5, 5), [far_away, self.square]))
        self.assertFalse(is_censored(point(0.5, 0.5), []))

    def test_survives_pickling(self):
        clone = pickle.loads(pickle.dumps(self.square))
        self.assertEqual(clone.vertices, self.square.vertices)
        self.assertTrue(clone.contains(point(0.5, 0.5)))


class TestLoadCensorFile(unittest.TestCase):
    def test_reads_file(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / "home.txt"
            path.write_text(SQUARE, encoding="utf-8")
            polygon = load_censor_file(path)
        self.assertEqual(len(polygon.vertices), 4)
        self.assertEqual(polygon.source, str(path))

    def test_missing_file(self):
        with self.assertRaises(CensorFileError):
            load_censor_file("/nonexistent/censor.txt")


if __name__ == "__main__":
    unittest.main()
