"""
Crop-rectangle handle math.

All values are percent of the displayed (rotated) image box. Pointer pixels are
converted to percent by the interactive surface before reaching this module.

Clamping is per handle:
  - the left/top edge may not go below 0 and may not pass the opposite edge
    (it stops `min_size` short of it);
  - the right/bottom edge only stops at `min_size`; it is NOT clamped against 100,
    so a grow drag can push the rect past the container;
  - MOVE keeps the whole rect inside [0, 100] on both axes.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

from portraitpress.core.config import MIN_CROP_PERCENT
from portraitpress.core.geometry import CropRect, Handle, clamp


CROP_FIELDS = ("x", "y", "width", "height")


def _shift_leading_edge(pos: float, size: float, delta: float, min_size: float) -> tuple[float, float]:
    """Move the left/top edge by `delta`, keeping the trailing edge fixed."""
    trailing = pos + size
    new_pos = clamp(pos + delta, 0.0, max(0.0, trailing - min_size))
    return new_pos, trailing - new_pos


def _shift_trailing_edge(size: float, delta: float, min_size: float) -> float:
    return max(min_size, size + delta)


def apply_handle_delta(
    crop: CropRect,
    handle: Handle,
    dx: float,
    dy: float,
    min_size: float = MIN_CROP_PERCENT,
) -> CropRect:
    """Return the rect after dragging `handle` by (dx, dy) percent. Never fails."""
    if handle is Handle.MOVE:
        return replace(
            crop,
            x=clamp(crop.x + dx, 0.0, 100.0 - crop.width),
            y=clamp(crop.y + dy, 0.0, 100.0 - crop.height),
        )

    x, y, width, height = crop.x, crop.y, crop.width, crop.height

    if handle.moves_left_edge:
        x, width = _shift_leading_edge(x, width, dx, min_size)
    elif handle.moves_right_edge:
        width = _shift_trailing_edge(width, dx, min_size)

    if handle.moves_top_edge:
        y, height = _shift_leading_edge(y, height, dy, min_size)
    elif handle.moves_bottom_edge:
        height = _shift_trailing_edge(height, dy, min_size)

    return CropRect(x=x, y=y, width=width, height=height)


def set_crop_field(crop: CropRect, field: str, value: float, min_size: float = MIN_CROP_PERCENT) -> CropRect:
    """
    Slider-style direct edit of one field.

    x/y are clamped to [0, 100]; width/height to [min_size, 100]. Fields are
    independent: no check that x + width stays within 100.
    """
    if field not in CROP_FIELDS:
        raise ValueError(f"unknown crop field {field!r}")
    lo = 0.0 if field in ("x", "y") else min_size
    return replace(crop, **{field: clamp(float(value), lo, 100.0)})


def exceeds_container(crop: CropRect, eps: float = 1e-9) -> bool:
    """True when the rect reaches past the right or bottom edge of the container."""
    return crop.right > 100.0 + eps or crop.bottom > 100.0 + eps


def handle_at(crop: CropRect, px: float, py: float, tol_x: float, tol_y: float) -> Optional[Handle]:
    """
    Which handle sits under the pointer at (px, py) percent, if any.

    Corners win over edges, edges over the interior (MOVE). `tol_x`/`tol_y`
    are the grab radius in percent of the container on each axis.
    """
    near_left = abs(px - crop.x) <= tol_x
    near_right = abs(px - crop.right) <= tol_x
    near_top = abs(py - crop.y) <= tol_y
    near_bottom = abs(py - crop.bottom) <= tol_y
    within_x = crop.x - tol_x <= px <= crop.right + tol_x
    within_y = crop.y - tol_y <= py <= crop.bottom + tol_y

    if near_top and near_left:
        return Handle.TOP_LEFT
    if near_top and near_right:
        return Handle.TOP_RIGHT
    if near_bottom and near_left:
        return Handle.BOTTOM_LEFT
    if near_bottom and near_right:
        return Handle.BOTTOM_RIGHT
    if near_top and within_x:
        return Handle.TOP
    if near_bottom and within_x:
        return Handle.BOTTOM
    if near_left and within_y:
        return Handle.LEFT
    if near_right and within_y:
        return Handle.RIGHT
    if crop.x < px < crop.right and crop.y < py < crop.bottom:
        return Handle.MOVE
    return None
