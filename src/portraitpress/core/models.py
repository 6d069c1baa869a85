from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Tuple

from portraitpress.core import config

_HEX_RE = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


@dataclass(frozen=True)
class PassportSpec:
    """
    Target passport frame. Never mutated; derived constants are computed from it.

    frame_pixels:
        Output width/height in pixels (square). Default 600 (2" at 300 DPI).
    dpi:
        Dots per inch the frame is defined at. The print sheet uses the same DPI.
    min_head_px / max_head_px / target_head_px / eye_level_from_bottom_px:
        Head-size and eye-level targets. Kept as policy intent only: no code path
        measures the subject against them.
    """
    frame_pixels: int = config.FRAME_PIXELS
    dpi: int = config.DPI
    min_head_px: int = config.MIN_HEAD_PX
    max_head_px: int = config.MAX_HEAD_PX
    target_head_px: int = config.TARGET_HEAD_PX
    eye_level_from_bottom_px: int = config.EYE_LEVEL_FROM_BOTTOM_PX


PASSPORT_SPEC = PassportSpec()


@dataclass(frozen=True)
class PrintSheetSpec:
    """
    Page holding a fixed grid of passport photos, with cut guides between tiles.
    """
    page_width_px: int
    page_height_px: int
    tile_px: int
    columns: int = config.PRINT_GRID[0]
    rows: int = config.PRINT_GRID[1]
    cut_line_color: Tuple[int, int, int] = config.CUT_LINE_COLOR
    cut_line_width: int = config.CUT_LINE_WIDTH
    page_color: Tuple[int, int, int] = (255, 255, 255)

    @staticmethod
    def from_passport(
        spec: PassportSpec = PASSPORT_SPEC,
        page_inches: Tuple[float, float] = config.PRINT_PAGE_INCHES,
    ) -> "PrintSheetSpec":
        w_in, h_in = page_inches
        return PrintSheetSpec(
            page_width_px=int(round(w_in * spec.dpi)),
            page_height_px=int(round(h_in * spec.dpi)),
            tile_px=spec.frame_pixels,
        )


PRINT_SHEET_SPEC = PrintSheetSpec.from_passport(PASSPORT_SPEC)


def parse_hex_color(value: str) -> Tuple[int, int, int]:
    """'#RRGGBB' or '#RGB' -> (r, g, b)."""
    if not isinstance(value, str) or not _HEX_RE.match(value):
        raise ValueError(f"expected a colour like '#FFFFFF', got {value!r}")
    digits = value[1:]
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    return int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16)


@dataclass(frozen=True)
class BackgroundMode:
    """
    How the frame behind the segmented subject is filled.

    kind == "original": surface stays transparent; the foreground's own pixels
        are the visible background.
    kind == "solid": surface is filled with `color` before drawing.
    """
    kind: str
    color: Optional[str] = None

    def __post_init__(self) -> None:
        if self.kind == "original":
            if self.color is not None:
                raise ValueError("original background mode takes no colour")
        elif self.kind == "solid":
            parse_hex_color(self.color)  # type: ignore[arg-type]
        else:
            raise ValueError(f"unknown background mode {self.kind!r}")

    @staticmethod
    def original() -> "BackgroundMode":
        return BackgroundMode("original")

    @staticmethod
    def solid(color: str = config.DEFAULT_BACKGROUND) -> "BackgroundMode":
        return BackgroundMode("solid", color)

    @property
    def is_solid(self) -> bool:
        return self.kind == "solid"

    @property
    def rgb(self) -> Optional[Tuple[int, int, int]]:
        return parse_hex_color(self.color) if self.color is not None else None

    @property
    def is_white(self) -> bool:
        return self.rgb == (255, 255, 255)

    def describe(self) -> str:
        return self.color.upper() if self.is_solid and self.color else "original"
