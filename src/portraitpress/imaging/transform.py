"""
Rotate-then-crop.

The work surface has the source's own (unrotated) size. The source is rotated
about the surface centre, clockwise for positive degrees (screen convention,
y axis pointing down). Corners that rotate out are lost; uncovered areas are
transparent. The crop rect is read in percent of that surface.
"""

from __future__ import annotations

import logging
from typing import Tuple

import cv2
import numpy as np
from PIL import Image

from portraitpress.core.errors import InvalidCropError
from portraitpress.core.geometry import CropRect
from portraitpress.imaging.raster import pil_to_rgba_np, rgba_np_to_pil

logger = logging.getLogger(__name__)


def _rotate_rgba_np(arr: np.ndarray, degrees: float) -> np.ndarray:
    h, w = arr.shape[:2]
    if degrees % 360.0 == 0.0:
        return arr.copy()
    center = ((w - 1) / 2.0, (h - 1) / 2.0)
    # OpenCV treats positive angles as counter-clockwise.
    m = cv2.getRotationMatrix2D(center, -degrees, 1.0)
    return cv2.warpAffine(
        arr,
        m,
        (w, h),
        flags=cv2.INTER_LINEAR,
        borderMode=cv2.BORDER_CONSTANT,
        borderValue=(0, 0, 0, 0),
    )


def rotate_raster(img: Image.Image, degrees: float) -> Image.Image:
    """Rotate `img` inside its own bounds. Returns a new RGBA image of the same size."""
    return rgba_np_to_pil(_rotate_rgba_np(pil_to_rgba_np(img), degrees))


def crop_percent_box(crop: CropRect, surface_w: int, surface_h: int) -> Tuple[int, int, int, int]:
    """
    Convert a percent rect to (left, top, width, height) in surface pixels.

    Raises InvalidCropError when width or height rounds to zero.
    """
    left = int(round(crop.x / 100.0 * surface_w))
    top = int(round(crop.y / 100.0 * surface_h))
    width = int(round(crop.width / 100.0 * surface_w))
    height = int(round(crop.height / 100.0 * surface_h))
    if width <= 0 or height <= 0:
        raise InvalidCropError(
            f"Crop {crop.width:.2f}% x {crop.height:.2f}% of {surface_w}x{surface_h} is {width}x{height} pixels."
        )
    return left, top, width, height


def _copy_region(arr: np.ndarray, left: int, top: int, width: int, height: int) -> np.ndarray:
    """
    Copy a width x height region starting at (left, top).
    Parts of the region outside `arr` are transparent.
    """
    h, w = arr.shape[:2]
    out = np.zeros((height, width, 4), dtype=np.uint8)

    src_left = max(0, left)
    src_top = max(0, top)
    src_right = min(w, left + width)
    src_bottom = min(h, top + height)

    if src_left >= src_right or src_top >= src_bottom:
        return out

    dst_left = src_left - left
    dst_top = src_top - top
    out[dst_top : dst_top + (src_bottom - src_top), dst_left : dst_left + (src_right - src_left)] = arr[
        src_top:src_bottom, src_left:src_right
    ]
    return out


def apply_rotation_and_crop(img: Image.Image, degrees: float, crop: CropRect) -> Image.Image:
    """
    Rotate `img` by `degrees` about its centre, then cut out `crop`.

    Output size is exactly round(width% * W) x round(height% * H).
    """
    arr = pil_to_rgba_np(img)
    h, w = arr.shape[:2]
    left, top, width, height = crop_percent_box(crop, w, h)

    rotated = _rotate_rgba_np(arr, degrees)
    out = _copy_region(rotated, left, top, width, height)
    logger.debug(
        "Rotated %dx%d by %.2f deg, cropped (%d,%d) %dx%d", w, h, degrees, left, top, width, height
    )
    return rgba_np_to_pil(out)
