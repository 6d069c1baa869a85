from __future__ import annotations

import asyncio
import io
import logging

from PIL import Image

from portraitpress.core.errors import SegmentationError
from portraitpress.segmentation.base import CancellationToken

logger = logging.getLogger(__name__)


class RembgSegmenter:
    """
    Background removal via rembg. The model call blocks, so it runs in the
    loop's default executor; rembg is imported on first use.
    """

    def __init__(self, model_name: str | None = None) -> None:
        self.model_name = model_name
        self._session = None

    def _remove(self, image: Image.Image) -> Image.Image:
        try:
            from rembg import new_session, remove  # type: ignore
        except ImportError as e:
            raise SegmentationError(
                "rembg is not installed. Install with: pip install 'portraitpress[rembg]'"
            ) from e

        if self.model_name and self._session is None:
            self._session = new_session(self.model_name)

        rgb = image.convert("RGB") if image.mode != "RGB" else image
        # rembg works with PIL; it returns an RGBA image (usually)
        cut = remove(rgb, session=self._session) if self._session is not None else remove(rgb)
        if isinstance(cut, bytes):
            cut = Image.open(io.BytesIO(cut))
        return cut.convert("RGBA")

    async def segment(self, image: Image.Image, token: CancellationToken) -> Image.Image:
        logger.info("Removing background (%dx%d)", image.width, image.height)
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._remove, image)
