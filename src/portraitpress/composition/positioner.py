from __future__ import annotations

from portraitpress.core.config import OVERSCAN_FACTOR
from portraitpress.core.geometry import Placement


def calculate_optimal_position(
    source_w: float,
    source_h: float,
    frame_size: float,
    overscan: float = OVERSCAN_FACTOR,
) -> Placement:
    """
    Scale/offset that makes a source of any aspect fully cover a square frame.

    Fill policy: the larger of the two axis scales is used, times `overscan`, so
    there is never a margin; whatever overhangs the frame is clipped. The source
    is centred on both axes, so offsets are <= 0 whenever it overhangs.
    """
    if source_w <= 0 or source_h <= 0:
        raise ValueError(f"Source size must be > 0, got {source_w}x{source_h}")
    if frame_size <= 0:
        raise ValueError(f"Frame size must be > 0, got {frame_size}")
    if overscan < 1.0:
        raise ValueError(f"Overscan must be >= 1.0, got {overscan}")

    scale_x = frame_size / float(source_w)
    scale_y = frame_size / float(source_h)
    scale = max(scale_x, scale_y) * overscan

    x = (frame_size - source_w * scale) / 2.0
    y = (frame_size - source_h * scale) / 2.0
    return Placement(scale=scale, x=x, y=y)
