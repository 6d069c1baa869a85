import unittest
from unittest.mock import patch

import numpy as np
from PIL import Image

from tests._test_path import SRC  # noqa: F401

from portraitpress.composition import composer
from portraitpress.composition.composer import compose_passport_photo
from portraitpress.core.errors import CompositionError, ResourceAcquisitionError
from portraitpress.core.models import BackgroundMode, PassportSpec
from portraitpress.imaging.raster import resize_raster


def _noise(w: int, h: int, alpha: int = 255, seed: int = 0) -> Image.Image:
    rng = np.random.default_rng(seed)
    arr = rng.integers(0, 256, size=(h, w, 4), dtype=np.uint8)
    arr[..., 3] = alpha
    return Image.fromarray(arr, "RGBA")


class TestComposePassportPhoto(unittest.TestCase):
    def test_output_is_always_frame_sized(self):
        for w, h in ((400, 600), (1000, 300), (37, 41), (600, 600)):
            out = compose_passport_photo(_noise(w, h), BackgroundMode.solid())
            self.assertEqual(out.size, (600, 600))

    def test_custom_frame(self):
        out = compose_passport_photo(_noise(50, 80), BackgroundMode.solid(), spec=PassportSpec(frame_pixels=300))
        self.assertEqual(out.size, (300, 300))

    def test_original_mode_has_no_extraneous_fill(self):
        fg = _noise(400, 600, seed=3)
        out = np.asarray(compose_passport_photo(fg, BackgroundMode.original()))

        # scale 1.65 -> 660x990 at offset (-30, -195)
        scaled = np.asarray(resize_raster(fg, (660, 990)))
        expected = scaled[195 : 195 + 600, 30 : 30 + 600]
        self.assertTrue(np.array_equal(out, expected))
        # border pixels in particular
        self.assertTrue(np.array_equal(out[0, :], expected[0, :]))
        self.assertTrue(np.array_equal(out[:, -1], expected[:, -1]))

    def test_solid_fill_shows_through_transparent_foreground(self):
        fg = Image.new("RGBA", (300, 300), (0, 0, 0, 0))
        out = compose_passport_photo(fg, BackgroundMode.solid("#FF0000"))
        arr = np.asarray(out)
        self.assertTrue((arr[..., 0] == 255).all())
        self.assertTrue((arr[..., 1:3] == 0).all())
        self.assertTrue((arr[..., 3] == 255).all())

    def test_opaque_subject_covers_fill(self):
        fg = Image.new("RGBA", (200, 200), (10, 20, 30, 255))
        out = compose_passport_photo(fg, BackgroundMode.solid())
        self.assertEqual(out.getpixel((0, 0)), (10, 20, 30, 255))
        self.assertEqual(out.getpixel((599, 599)), (10, 20, 30, 255))

    def test_input_is_not_modified(self):
        fg = _noise(120, 90, seed=5)
        before = np.asarray(fg).copy()
        compose_passport_photo(fg, BackgroundMode.solid())
        self.assertTrue(np.array_equal(np.asarray(fg), before))

    def test_surface_failure_raises_composition_error(self):
        fg = _noise(10, 10)
        with patch.object(composer.Image, "new", side_effect=MemoryError("no surface")):
            with self.assertRaises(CompositionError) as ctx:
                compose_passport_photo(fg, BackgroundMode.solid())
        self.assertIsInstance(ctx.exception, ResourceAcquisitionError)
        self.assertIn("no surface", str(ctx.exception))

    def test_draw_failure_raises_composition_error(self):
        fg = _noise(10, 10)
        with patch.object(composer, "resize_raster", side_effect=MemoryError("no layer")):
            with self.assertRaises(CompositionError) as ctx:
                compose_passport_photo(fg, BackgroundMode.original())
        self.assertIn("no layer", str(ctx.exception))
