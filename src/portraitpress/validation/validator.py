from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

import numpy as np
from PIL import Image

from portraitpress.core.models import PASSPORT_SPEC, BackgroundMode, PassportSpec
from portraitpress.imaging.raster import pil_to_rgba_np
from portraitpress.validation.report import RuleResult, ValidationReport

logger = logging.getLogger(__name__)

SAMPLE_BLOCK = 20
WHITE_THRESHOLD = 250


@dataclass(frozen=True)
class ValidationResult:
    """
    Independent checks on a composed photo. Observational only: never fed back
    into composition and never blocks output.
    """
    dimensions_ok: bool
    background_ok: bool
    positioning_ok: bool
    quality_ok: bool
    width: int = 0
    height: int = 0
    expected: int = PASSPORT_SPEC.frame_pixels
    background_min_channel: Optional[int] = None

    @property
    def passed(self) -> bool:
        return self.dimensions_ok and self.background_ok and self.positioning_ok and self.quality_ok

    def to_report(self, background: Optional[BackgroundMode] = None) -> ValidationReport:
        """
        Build the rule-by-rule report. When `background` is given and is not solid
        white, the background rule is marked informational and left out of the verdict.
        """
        bg_informational = background is not None and not background.is_white
        bg_msg = (
            f"Centre {SAMPLE_BLOCK}x{SAMPLE_BLOCK} block min channel "
            f"{self.background_min_channel if self.background_min_channel is not None else 'n/a'}"
            f" (target >= {WHITE_THRESHOLD})."
        )
        if bg_informational:
            bg_msg += " Background is not white; informational only."
        elif not self.background_ok:
            bg_msg += " Background may not be white enough."

        results: List[RuleResult] = [
            RuleResult(
                rule_id="Size",
                passed=self.dimensions_ok,
                message=f"{self.width}x{self.height} pixels (expected {self.expected}x{self.expected}).",
                metrics={"width": self.width, "height": self.height, "expected": self.expected},
            ),
            RuleResult(
                rule_id="Background whiteness",
                passed=self.background_ok,
                message=bg_msg,
                metrics={"min_channel": self.background_min_channel, "threshold": WHITE_THRESHOLD},
                informational=bg_informational,
            ),
            RuleResult(
                rule_id="Positioning",
                passed=self.positioning_ok,
                message="Subject scaled to fill the whole frame.",
            ),
            RuleResult(
                rule_id="Quality",
                passed=self.quality_ok,
                message=f"Width {self.width}px (minimum {self.expected}px).",
                metrics={"width": self.width, "minimum": self.expected},
            ),
        ]
        passed = all(r.passed for r in results if not r.informational)
        return ValidationReport(passed=passed, results=results)


def _center_block_min_channel(img_rgba: np.ndarray, block: int = SAMPLE_BLOCK) -> Optional[int]:
    """Smallest R/G/B value in the block centred on the image (only the part inside the image)."""
    h, w = img_rgba.shape[:2]
    left = w // 2 - block // 2
    top = h // 2 - block // 2
    region = img_rgba[max(0, top) : max(0, top + block), max(0, left) : max(0, left + block), :3]
    if region.size == 0:
        return None
    return int(region.min())


def validate_passport_photo(photo: Image.Image, spec: PassportSpec = PASSPORT_SPEC) -> ValidationResult:
    """
    Sample the composed photo against the target frame.

    The background probe is a 20x20 block at the centre of the frame; every
    R/G/B sample must be >= 250. It is only meaningful for a white fill.
    """
    w, h = photo.size
    expected = spec.frame_pixels

    min_channel = _center_block_min_channel(pil_to_rgba_np(photo))
    background_ok = min_channel is not None and min_channel >= WHITE_THRESHOLD

    result = ValidationResult(
        dimensions_ok=(w == expected and h == expected),
        background_ok=background_ok,
        # The fill policy of the positioner guarantees full-frame coverage.
        positioning_ok=True,
        quality_ok=w >= expected,
        width=w,
        height=h,
        expected=expected,
        background_min_channel=min_channel,
    )
    logger.debug("Validation: %s", result)
    return result


def format_report_text(report: ValidationReport) -> str:
    lines: List[str] = []
    lines.append("PortraitPress Validation Report")
    lines.append("-" * 32)
    lines.append(f"Overall: {'PASS' if report.passed else 'FAIL'}")
    lines.append("")
    for r in report.results:
        if r.informational:
            mark = "ℹ️"
        else:
            mark = "✅" if r.passed else "❌"
        lines.append(f"{mark} {r.rule_id}: {r.message}")
    return "\n".join(lines)
