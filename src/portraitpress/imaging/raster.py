"""
Raster helpers: decode/encode and Pillow <-> numpy conversion.

A raster is a PIL Image. Stages never modify the image they receive.
"""

from __future__ import annotations

import asyncio
import io
import logging
from pathlib import Path
from typing import Union

import cv2
import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from portraitpress.core.errors import DecodeError

logger = logging.getLogger(__name__)


def decode_bytes(data: bytes) -> Image.Image:
    """Decode image bytes, apply EXIF orientation, return an RGBA PIL Image."""
    if not data:
        raise DecodeError("Image data is empty.")
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
        img = ImageOps.exif_transpose(img)
    except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as e:
        raise DecodeError(f"Could not decode image: {e}") from e
    if img.mode != "RGBA":
        img = img.convert("RGBA")
    logger.debug("Decoded %dx%d raster from %d bytes", img.width, img.height, len(data))
    return img


async def decode(data: bytes) -> Image.Image:
    """Awaitable decode. Yields to the loop once so callers can sequence it with other awaitables."""
    await asyncio.sleep(0)
    return decode_bytes(data)


def load_image(path: Union[str, Path]) -> Image.Image:
    """Read and decode an image file."""
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        raise DecodeError(f"Could not read {path}: {e}") from e
    return decode_bytes(data)


def encode_png(img: Image.Image) -> bytes:
    out = io.BytesIO()
    img.save(out, format="PNG", optimize=True)
    return out.getvalue()


def pil_to_rgba_np(img: Image.Image) -> np.ndarray:
    """PIL (any mode) -> HxWx4 uint8 RGBA array."""
    if img.mode != "RGBA":
        img = img.convert("RGBA")
    return np.array(img, dtype=np.uint8)


def rgba_np_to_pil(arr: np.ndarray) -> Image.Image:
    return Image.fromarray(np.ascontiguousarray(arr, dtype=np.uint8), "RGBA")


def resize_raster(img: Image.Image, size: tuple[int, int]) -> Image.Image:
    """Resize to (width, height) with Lanczos; result is RGBA."""
    new_w, new_h = size
    if new_w <= 0 or new_h <= 0:
        raise ValueError("Target size must be > 0")
    arr = pil_to_rgba_np(img)
    if (arr.shape[1], arr.shape[0]) == (new_w, new_h):
        return rgba_np_to_pil(arr)
    out = cv2.resize(arr, (new_w, new_h), interpolation=cv2.INTER_LANCZOS4)
    return rgba_np_to_pil(out)
