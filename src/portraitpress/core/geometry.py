from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Tuple


@dataclass(frozen=True)
class CropRect:
    """
    Crop rectangle in percent (0-100) of the displayed, rotated image box.

    Not raw pixels: the same rect applies to any rendered size of the image.
    """
    x: float = 0.0
    y: float = 0.0
    width: float = 100.0
    height: float = 100.0

    @staticmethod
    def full() -> "CropRect":
        return CropRect(0.0, 0.0, 100.0, 100.0)

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def as_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


class Handle(Enum):
    """Drag-control points on a crop rectangle."""
    TOP_LEFT = "top-left"
    TOP = "top"
    TOP_RIGHT = "top-right"
    RIGHT = "right"
    BOTTOM_RIGHT = "bottom-right"
    BOTTOM = "bottom"
    BOTTOM_LEFT = "bottom-left"
    LEFT = "left"
    MOVE = "move"

    @property
    def moves_left_edge(self) -> bool:
        return self in (Handle.TOP_LEFT, Handle.LEFT, Handle.BOTTOM_LEFT)

    @property
    def moves_right_edge(self) -> bool:
        return self in (Handle.TOP_RIGHT, Handle.RIGHT, Handle.BOTTOM_RIGHT)

    @property
    def moves_top_edge(self) -> bool:
        return self in (Handle.TOP_LEFT, Handle.TOP, Handle.TOP_RIGHT)

    @property
    def moves_bottom_edge(self) -> bool:
        return self in (Handle.BOTTOM_LEFT, Handle.BOTTOM, Handle.BOTTOM_RIGHT)


@dataclass(frozen=True)
class Placement:
    """Where to draw a source raster inside a frame: scale, then top-left offset."""
    scale: float
    x: float
    y: float

    def scaled_size(self, source_w: int, source_h: int) -> Tuple[int, int]:
        return max(1, int(round(source_w * self.scale))), max(1, int(round(source_h * self.scale)))

    def pixel_offset(self) -> Tuple[int, int]:
        return int(round(self.x)), int(round(self.y))


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(value, hi))


def degrees_to_radians(degrees: float) -> float:
    return degrees * math.pi / 180.0


def rotate_quarter(degrees: float, direction: str) -> float:
    """Step by 90 degrees ('left' = counter-clockwise) and normalise into [0, 360)."""
    if direction not in ("left", "right"):
        raise ValueError(f"direction must be 'left' or 'right', got {direction!r}")
    step = -90.0 if direction == "left" else 90.0
    return (degrees + step) % 360.0


def rotate_fine(degrees: float, direction: str, increment: float = 1.0) -> float:
    """Step by `increment` degrees. No normalisation."""
    if direction not in ("left", "right"):
        raise ValueError(f"direction must be 'left' or 'right', got {direction!r}")
    return degrees - increment if direction == "left" else degrees + increment


def exact_rotation(degrees: float) -> float:
    """Validate an exact rotation entry. Any finite value is accepted, including |deg| > 360."""
    value = float(degrees)
    if not math.isfinite(value):
        raise ValueError(f"rotation must be finite, got {degrees!r}")
    return value
