import contextlib
import io
import shutil
import tempfile
import unittest
from pathlib import Path

from PIL import Image

from tests._test_path import SRC  # noqa: F401

from portraitpress import cli
from portraitpress.segmentation.base import PassthroughSegmenter


class TestCli(unittest.TestCase):
    def setUp(self):
        self.dir = Path(tempfile.mkdtemp(prefix="portraitpress_cli_"))
        self.src = self.dir / "in.jpg"
        Image.new("RGB", (400, 600), (220, 220, 220)).save(self.src, format="JPEG")

    def tearDown(self):
        shutil.rmtree(self.dir, ignore_errors=True)

    def _main(self, *argv):
        out, err = io.StringIO(), io.StringIO()
        with contextlib.redirect_stdout(out), contextlib.redirect_stderr(err):
            code = cli.main(list(argv), segmenter=PassthroughSegmenter())
        return code, out.getvalue(), err.getvalue()

    def test_photo_and_sheet(self):
        photo = self.dir / "passport-photo.png"
        sheet = self.dir / "passport-photos-printable.png"
        code, out, _ = self._main(
            "-i", str(self.src), "-o", str(photo), "--sheet", str(sheet),
            "--rotate", "90", "--crop", "0", "0", "100", "100", "--report",
        )
        self.assertEqual(code, 0)
        self.assertIn("Saved:", out)
        self.assertIn("Overall:", out)
        with Image.open(photo) as img:
            self.assertEqual(img.size, (600, 600))
        with Image.open(sheet) as img:
            self.assertEqual(img.size, (1200, 1800))

    def test_history_dir(self):
        photo = self.dir / "out.png"
        hist = self.dir / "history"
        code, _, _ = self._main("-i", str(self.src), "-o", str(photo), "--history-dir", str(hist))
        self.assertEqual(code, 0)
        self.assertTrue((hist / "index.json").exists())

    def test_errors_exit_2(self):
        bad = self.dir / "bad.png"
        bad.write_bytes(b"not an image")
        code, _, err = self._main("-i", str(bad), "-o", str(self.dir / "o.png"))
        self.assertEqual(code, 2)
        self.assertIn("ERROR:", err)

        code, _, _ = self._main("-i", str(self.dir / "missing.png"), "-o", str(self.dir / "o.png"))
        self.assertEqual(code, 2)

    def test_background_parsing(self):
        self.assertFalse(cli.parse_background("original").is_solid)
        self.assertEqual(cli.parse_background("#000000").rgb, (0, 0, 0))
        with self.assertRaises(SystemExit):
            with contextlib.redirect_stderr(io.StringIO()):
                cli.main(["-i", "x", "-o", "y", "--background", "blue"])

    def test_crop_values_are_clamped_like_the_sliders(self):
        editor = cli.build_editor(0.0, [-5.0, 120.0, 5.0, 0.0])
        self.assertEqual(editor.crop.as_dict(), {"x": 0.0, "y": 100.0, "width": 20.0, "height": 20.0})
        self.assertEqual(cli.build_editor(0.0, None).crop.as_dict(), {"x": 0.0, "y": 0.0, "width": 100.0, "height": 100.0})

    def test_tiny_crop_is_widened_to_minimum(self):
        photo = self.dir / "o.png"
        with self.assertLogs("portraitpress.cli", level="WARNING"):
            code, _, _ = self._main("-i", str(self.src), "-o", str(photo), "--crop", "0", "0", "5", "5")
        self.assertEqual(code, 0)
        self.assertEqual(cli.build_editor(0.0, [0, 0, 5, 5]).crop.width, 20.0)

    def test_non_finite_rotation_is_rejected(self):
        for value in ("nan", "inf", "-inf", "abc"):
            with self.subTest(value=value):
                with self.assertRaises(SystemExit) as ctx:
                    self._main("-i", str(self.src), "-o", str(self.dir / "o.png"), "--rotate", value)
                self.assertEqual(ctx.exception.code, 2)
        self.assertFalse((self.dir / "o.png").exists())
        self.assertEqual(cli.parse_rotation("450"), 450.0)

    def test_non_finite_crop_is_rejected(self):
        with self.assertRaises(SystemExit) as ctx:
            self._main("-i", str(self.src), "-o", str(self.dir / "o.png"), "--crop", "0", "0", "nan", "100")
        self.assertEqual(ctx.exception.code, 2)
