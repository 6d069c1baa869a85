"""
Boundary to the external subject/background segmentation collaborator.

The collaborator is opaque: it gets an RGBA raster and returns an RGBA raster
whose alpha separates subject from background. Calls are not retried. Each call
carries a CancellationToken; a result that arrives after its token was cancelled
is dropped instead of being applied.
"""

from __future__ import annotations

import logging
from typing import Protocol

from PIL import Image

from portraitpress.core.errors import OperationCancelledError, SegmentationError

logger = logging.getLogger(__name__)


class CancellationToken:
    """Cancelled when a newer request supersedes the one holding this token."""

    def __init__(self, label: str = "") -> None:
        self.label = label
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise OperationCancelledError(f"Request {self.label or '<unnamed>'} was superseded.")

    def __repr__(self) -> str:
        return f"CancellationToken(label={self.label!r}, cancelled={self._cancelled})"


class Segmenter(Protocol):
    async def segment(self, image: Image.Image, token: CancellationToken) -> Image.Image:
        ...


class PassthroughSegmenter:
    """No background removal: the whole image counts as foreground."""

    async def segment(self, image: Image.Image, token: CancellationToken) -> Image.Image:
        return image.convert("RGBA") if image.mode != "RGBA" else image.copy()


async def run_segmentation(segmenter: Segmenter, image: Image.Image, token: CancellationToken) -> Image.Image:
    """
    Call the collaborator once.

    Failures become SegmentationError with the collaborator's message unchanged.
    Raises OperationCancelledError if the token is cancelled before the call or
    while it is in flight.
    """
    token.raise_if_cancelled()
    try:
        result = await segmenter.segment(image, token)
    except (OperationCancelledError, SegmentationError):
        raise
    except Exception as e:
        logger.debug("Segmentation failed", exc_info=True)
        raise SegmentationError(str(e) or e.__class__.__name__) from e

    if token.cancelled:
        logger.info("Dropping stale segmentation result for %r", token)
        token.raise_if_cancelled()

    if not isinstance(result, Image.Image):
        raise SegmentationError(f"Segmentation returned {type(result).__name__}, expected an image.")
    if result.mode != "RGBA":
        result = result.convert("RGBA")
    return result
