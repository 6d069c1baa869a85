#!/usr/bin/env python3
"""
portraitpress.cli

Generate a 2x2" (square) passport photo at 600x600 pixels, and optionally a
4x6" print sheet with six copies:
- Rotates and crops the input (crop given in percent of the rotated image)
- Removes the background (rembg) unless --no-bg is given
- Scales the subject to fill the whole frame and fills the background colour
- Checks the result and prints a short report

Usage:
  portraitpress --input in.jpg --output passport-photo.png
  portraitpress -i in.jpg -o out.png --rotate 90 --crop 25 0 50 100
  portraitpress -i in.jpg -o out.png --sheet passport-photos-printable.png
  portraitpress -i in.jpg -o out.png --background original --no-bg

Notes:
- Head size and eye level are not measured; always verify the final photo meets
  official requirements.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import math
import sys
from pathlib import Path
from typing import Optional, Sequence

from portraitpress.app.history import FileHistoryStore, HistoryRecorder
from portraitpress.app.pipeline import PassportPipeline
from portraitpress.core.config import DEFAULT_BACKGROUND
from portraitpress.core.errors import PortraitPressError
from portraitpress.core.models import BackgroundMode
from portraitpress.editing import editor_state as es
from portraitpress.editing.crop import CROP_FIELDS
from portraitpress.editing.editor_state import EditorState
from portraitpress.segmentation.base import PassthroughSegmenter, Segmenter
from portraitpress.segmentation.rembg_segmenter import RembgSegmenter
from portraitpress.validation.validator import format_report_text

logger = logging.getLogger(__name__)


def parse_background(value: str) -> BackgroundMode:
    if value.lower() == "original":
        return BackgroundMode.original()
    try:
        return BackgroundMode.solid(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def parse_rotation(value: str) -> float:
    try:
        return es.set_rotation(EditorState(), float(value)).rotation
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def _finite_percent(value: str) -> float:
    try:
        number = float(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"not a number: {value!r}") from e
    if not math.isfinite(number):
        raise argparse.ArgumentTypeError(f"crop values must be finite, got {value!r}")
    return number


def build_editor(rotation: float = 0.0, crop: Optional[Sequence[float]] = None) -> EditorState:
    """
    Editor state for a batch run. Crop values go through the same clamping as
    the sliders: x/y to [0, 100], width/height to [20, 100].
    """
    state = es.set_rotation(EditorState(), rotation)
    for name, value in zip(CROP_FIELDS, crop or ()):
        state = es.set_crop_field(state, name, value)
    if crop and list(state.crop.as_dict().values()) != [float(v) for v in crop]:
        logger.warning("Crop %s clamped to %s", list(crop), state.crop.as_dict())
    return state


def _build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Generate a 600x600 passport photo and an optional 4x6 print sheet.")
    p.add_argument("--input", "-i", required=True, help="Path to input image (jpg/png/webp, etc.)")
    p.add_argument("--output", "-o", required=True, help="Path to output PNG")
    p.add_argument("--sheet", help="Also write a 4x6 printable sheet (2x3 copies) to this path")
    p.add_argument("--rotate", type=parse_rotation, default=0.0, help="Rotation in degrees, clockwise (default: 0)")
    p.add_argument(
        "--crop",
        type=_finite_percent,
        nargs=4,
        metavar=("X", "Y", "W", "H"),
        help="Crop rectangle in percent of the rotated image (default: 0 0 100 100)",
    )
    p.add_argument(
        "--background",
        type=parse_background,
        default=BackgroundMode.solid(DEFAULT_BACKGROUND),
        help="Background colour as #RRGGBB, or 'original' to keep the segmented image as-is (default: #FFFFFF)",
    )
    p.add_argument("--no-bg", action="store_true", help="Disable background removal")
    p.add_argument("--model", help="rembg model name (default: rembg's default)")
    p.add_argument("--report", action="store_true", help="Print the validation report")
    p.add_argument("--history-dir", help="Keep a history of finished photos in this directory")
    p.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    return p


def build_segmenter(no_bg: bool, model: Optional[str] = None) -> Segmenter:
    if no_bg:
        return PassthroughSegmenter()
    return RembgSegmenter(model_name=model)


async def _run(args: argparse.Namespace, segmenter: Segmenter) -> int:
    history = HistoryRecorder(FileHistoryStore(Path(args.history_dir))) if args.history_dir else None
    pipeline = PassportPipeline(segmenter, history=history)

    editor = build_editor(args.rotate, args.crop)

    data = Path(args.input).read_bytes()
    result = await pipeline.run(data, editor, args.background, name=Path(args.input).name)

    result.composed.save(args.output, format="PNG")
    print(f"Saved: {args.output}")

    if args.sheet:
        pipeline.print_sheet(result.composed).save(args.sheet, format="PNG")
        print(f"Saved: {args.sheet}")

    report = result.validation.to_report(args.background)
    if args.report:
        print(format_report_text(report))
    return 0


def main(argv: Optional[list[str]] = None, segmenter: Optional[Segmenter] = None) -> int:
    args = _build_arg_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        return asyncio.run(_run(args, segmenter or build_segmenter(args.no_bg, args.model)))
    except (PortraitPressError, OSError) as e:
        logger.debug("Run failed", exc_info=True)
        print(f"ERROR: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
