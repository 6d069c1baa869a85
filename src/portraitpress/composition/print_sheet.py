"""
Print sheet: tile one passport photo into a fixed grid on a 4x6" page.

Tile size equals the passport frame size, so photos print at the same DPI.
Cut guides are drawn only on the tile boundaries inside the grid.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Tuple

from PIL import Image, ImageDraw

from portraitpress.core.errors import DecodeError
from portraitpress.core.models import PRINT_SHEET_SPEC, PrintSheetSpec
from portraitpress.imaging.raster import decode_bytes, resize_raster

logger = logging.getLogger(__name__)

Segment = Tuple[int, int, int, int]  # x0, y0, x1, y1


@dataclass(frozen=True)
class SheetLayout:
    page_width: int
    page_height: int
    tile: int
    grid_x: int
    grid_y: int
    grid_width: int
    grid_height: int
    tile_origins: List[Tuple[int, int]]
    vertical_cuts: List[int]
    horizontal_cuts: List[int]

    def cut_segments(self) -> List[Segment]:
        """Cut lines as inclusive pixel segments, each spanning the grid only."""
        segs: List[Segment] = []
        for x in self.vertical_cuts:
            segs.append((x, self.grid_y, x, self.grid_y + self.grid_height - 1))
        for y in self.horizontal_cuts:
            segs.append((self.grid_x, y, self.grid_x + self.grid_width - 1, y))
        return segs


def compute_sheet_layout(sheet: PrintSheetSpec = PRINT_SHEET_SPEC) -> SheetLayout:
    if sheet.tile_px <= 0 or sheet.columns <= 0 or sheet.rows <= 0:
        raise ValueError("Tile size and grid arity must be > 0")

    tile = sheet.tile_px
    grid_w = sheet.columns * tile
    grid_h = sheet.rows * tile
    grid_x = (sheet.page_width_px - grid_w) // 2
    grid_y = (sheet.page_height_px - grid_h) // 2

    origins = [
        (grid_x + col * tile, grid_y + row * tile)
        for row in range(sheet.rows)
        for col in range(sheet.columns)
    ]
    return SheetLayout(
        page_width=sheet.page_width_px,
        page_height=sheet.page_height_px,
        tile=tile,
        grid_x=grid_x,
        grid_y=grid_y,
        grid_width=grid_w,
        grid_height=grid_h,
        tile_origins=origins,
        vertical_cuts=[grid_x + col * tile for col in range(1, sheet.columns)],
        horizontal_cuts=[grid_y + row * tile for row in range(1, sheet.rows)],
    )


def render_print_sheet(photo: Image.Image, sheet: PrintSheetSpec = PRINT_SHEET_SPEC) -> Image.Image:
    """Return an RGB page with `photo` in every grid cell and cut guides between cells."""
    layout = compute_sheet_layout(sheet)

    tile_img = resize_raster(photo, (layout.tile, layout.tile))
    page = Image.new("RGB", (layout.page_width, layout.page_height), sheet.page_color)
    for origin in layout.tile_origins:
        page.paste(tile_img, origin, tile_img)

    draw = ImageDraw.Draw(page)
    for seg in layout.cut_segments():
        draw.line(seg, fill=sheet.cut_line_color, width=sheet.cut_line_width)

    logger.debug(
        "Rendered %dx%d sheet with %d tiles at (%d,%d)",
        layout.page_width, layout.page_height, len(layout.tile_origins), layout.grid_x, layout.grid_y,
    )
    return page


def render_print_sheet_from_bytes(data: bytes, sheet: PrintSheetSpec = PRINT_SHEET_SPEC) -> Image.Image:
    """Decode an encoded passport photo and tile it. Malformed data raises DecodeError."""
    try:
        photo = decode_bytes(data)
    except DecodeError:
        logger.warning("Print sheet source could not be decoded")
        raise
    return render_print_sheet(photo, sheet)
