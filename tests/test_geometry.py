import math
import unittest

from tests._test_path import SRC  # noqa: F401

from portraitpress.core.geometry import (
    CropRect,
    Handle,
    Placement,
    degrees_to_radians,
    exact_rotation,
    rotate_fine,
    rotate_quarter,
)


class TestCropRect(unittest.TestCase):
    def test_full_default(self):
        self.assertEqual(CropRect(), CropRect.full())
        c = CropRect(10, 20, 30, 40)
        self.assertEqual(c.right, 40)
        self.assertEqual(c.bottom, 60)
        self.assertEqual(c.as_dict(), {"x": 10, "y": 20, "width": 30, "height": 40})

    def test_handle_edges(self):
        self.assertTrue(Handle.BOTTOM_RIGHT.moves_right_edge)
        self.assertTrue(Handle.BOTTOM_RIGHT.moves_bottom_edge)
        self.assertFalse(Handle.BOTTOM_RIGHT.moves_left_edge)
        self.assertFalse(any([
            Handle.MOVE.moves_left_edge, Handle.MOVE.moves_right_edge,
            Handle.MOVE.moves_top_edge, Handle.MOVE.moves_bottom_edge,
        ]))
        self.assertEqual(Handle("bottom-right"), Handle.BOTTOM_RIGHT)


class TestPlacement(unittest.TestCase):
    def test_scaled_size_and_offset(self):
        p = Placement(scale=1.65, x=-30.4, y=-195.6)
        self.assertEqual(p.scaled_size(400, 600), (660, 990))
        self.assertEqual(p.pixel_offset(), (-30, -196))


class TestRotation(unittest.TestCase):
    def test_quarter_steps_normalise(self):
        self.assertEqual(rotate_quarter(0, "right"), 90)
        self.assertEqual(rotate_quarter(0, "left"), 270)
        self.assertEqual(rotate_quarter(270, "right"), 0)
        self.assertEqual(rotate_quarter(371, "right"), 101)

    def test_fine_steps_are_unbounded(self):
        self.assertEqual(rotate_fine(0, "left"), -1)
        self.assertEqual(rotate_fine(359, "right"), 360)
        self.assertEqual(rotate_fine(-400, "left"), -401)

    def test_bad_direction(self):
        with self.assertRaises(ValueError):
            rotate_quarter(0, "up")
        with self.assertRaises(ValueError):
            rotate_fine(0, "down")

    def test_exact_rotation_accepts_out_of_range(self):
        self.assertEqual(exact_rotation(-720), -720.0)
        self.assertEqual(exact_rotation(1000.5), 1000.5)
        with self.assertRaises(ValueError):
            exact_rotation(float("nan"))
        with self.assertRaises(ValueError):
            exact_rotation(float("inf"))

    def test_radians(self):
        self.assertAlmostEqual(degrees_to_radians(180), math.pi)
