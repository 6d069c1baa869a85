from __future__ import annotations

import logging

from PIL import Image

from portraitpress.composition.positioner import calculate_optimal_position
from portraitpress.core.config import OVERSCAN_FACTOR
from portraitpress.core.errors import CompositionError
from portraitpress.core.models import PASSPORT_SPEC, BackgroundMode, PassportSpec
from portraitpress.imaging.raster import resize_raster

logger = logging.getLogger(__name__)


def _new_surface(size: int, background: BackgroundMode) -> Image.Image:
    fill = (0, 0, 0, 0)
    if background.is_solid:
        r, g, b = background.rgb  # type: ignore[misc]
        fill = (r, g, b, 255)
    try:
        return Image.new("RGBA", (size, size), fill)
    except (MemoryError, ValueError, OSError) as e:
        raise CompositionError(f"Could not allocate a {size}x{size} drawing surface: {e}") from e


def compose_passport_photo(
    foreground: Image.Image,
    background: BackgroundMode,
    spec: PassportSpec = PASSPORT_SPEC,
    overscan: float = OVERSCAN_FACTOR,
) -> Image.Image:
    """
    Place a segmented foreground into the square passport frame.

    Args:
      foreground: subject raster (alpha-aware; transparent where segmentation
        judged background)
      background: solid fill, or "original" to leave the frame transparent so
        the foreground's own pixels form the visible background
      spec: target frame; output is always spec.frame_pixels square
      overscan: multiplier on the fill scale (>= 1.0)

    Returns an RGBA image. Drawing failures raise CompositionError; nothing is retried.
    """
    size = spec.frame_pixels
    surface = _new_surface(size, background)

    placement = calculate_optimal_position(foreground.width, foreground.height, size, overscan)
    scaled_w, scaled_h = placement.scaled_size(foreground.width, foreground.height)
    x, y = placement.pixel_offset()

    try:
        scaled = resize_raster(foreground, (scaled_w, scaled_h))
        layer = Image.new("RGBA", (size, size), (0, 0, 0, 0))
        layer.paste(scaled, (x, y))
        # A transparent surface under the layer is the layer itself.
        out = Image.alpha_composite(surface, layer) if background.is_solid else layer
    except (MemoryError, ValueError, OSError) as e:
        raise CompositionError(f"Could not draw the photo into the frame: {e}") from e

    logger.debug(
        "Composed %dx%d foreground at scale %.4f offset (%d,%d), background=%s",
        foreground.width, foreground.height, placement.scale, x, y, background.describe(),
    )
    return out
