import unittest
from dataclasses import FrozenInstanceError, replace

from tests._test_path import SRC  # noqa: F401  (ensures src on path)

from portraitpress.core.models import (
    PASSPORT_SPEC,
    PRINT_SHEET_SPEC,
    BackgroundMode,
    PassportSpec,
    PrintSheetSpec,
    parse_hex_color,
)


class TestPassportSpec(unittest.TestCase):
    def test_defaults(self):
        s = PassportSpec()
        self.assertEqual(s.frame_pixels, 600)
        self.assertEqual(s.dpi, 300)
        self.assertEqual((s.min_head_px, s.max_head_px, s.target_head_px), (240, 390, 330))
        self.assertEqual(s, PASSPORT_SPEC)

    def test_frozen(self):
        s = PassportSpec()
        with self.assertRaises(FrozenInstanceError):
            s.frame_pixels = 700  # type: ignore[misc]

    def test_replace(self):
        s2 = replace(PASSPORT_SPEC, frame_pixels=500)
        self.assertEqual(s2.frame_pixels, 500)
        # original unchanged
        self.assertEqual(PASSPORT_SPEC.frame_pixels, 600)


class TestPrintSheetSpec(unittest.TestCase):
    def test_derived_from_passport_dpi(self):
        self.assertEqual(PRINT_SHEET_SPEC.page_width_px, 1200)
        self.assertEqual(PRINT_SHEET_SPEC.page_height_px, 1800)
        self.assertEqual(PRINT_SHEET_SPEC.tile_px, PASSPORT_SPEC.frame_pixels)
        self.assertEqual((PRINT_SHEET_SPEC.columns, PRINT_SHEET_SPEC.rows), (2, 3))

    def test_tile_follows_frame(self):
        sheet = PrintSheetSpec.from_passport(PassportSpec(frame_pixels=400, dpi=200))
        self.assertEqual(sheet.tile_px, 400)
        self.assertEqual((sheet.page_width_px, sheet.page_height_px), (800, 1200))


class TestBackgroundMode(unittest.TestCase):
    def test_parse_hex(self):
        self.assertEqual(parse_hex_color("#FFFFFF"), (255, 255, 255))
        self.assertEqual(parse_hex_color("#0a0"), (0, 170, 0))
        for bad in ("FFFFFF", "#GGGGGG", "#12345", "", None):
            with self.assertRaises(ValueError):
                parse_hex_color(bad)  # type: ignore[arg-type]

    def test_solid_and_original(self):
        white = BackgroundMode.solid()
        self.assertTrue(white.is_solid)
        self.assertTrue(white.is_white)
        self.assertEqual(white.rgb, (255, 255, 255))

        blue = BackgroundMode.solid("#3366ff")
        self.assertFalse(blue.is_white)
        self.assertEqual(blue.describe(), "#3366FF")

        orig = BackgroundMode.original()
        self.assertFalse(orig.is_solid)
        self.assertIsNone(orig.rgb)
        self.assertEqual(orig.describe(), "original")

    def test_invalid_modes(self):
        with self.assertRaises(ValueError):
            BackgroundMode("gradient")
        with self.assertRaises(ValueError):
            BackgroundMode("original", "#FFFFFF")
        with self.assertRaises(ValueError):
            BackgroundMode.solid("white")
