"""
Linear composition pipeline:

    decode -> rotate + crop -> segment -> compose -> validate  (-> print sheet on demand)

Each step either returns a new raster or raises; a failure aborts the rest of
the run and nothing partial is returned. Segmentation runs under a
CancellationToken; starting a new request cancels the previous one, so a slow
stale result can never replace a newer one.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Union

from PIL import Image

from portraitpress.app.history import HistoryEntry, HistoryRecorder
from portraitpress.composition.composer import compose_passport_photo
from portraitpress.composition.print_sheet import render_print_sheet
from portraitpress.core.config import OVERSCAN_FACTOR
from portraitpress.core.models import PASSPORT_SPEC, PRINT_SHEET_SPEC, BackgroundMode, PassportSpec, PrintSheetSpec
from portraitpress.editing.editor_state import EditorState
from portraitpress.imaging.raster import decode, encode_png
from portraitpress.imaging.transform import apply_rotation_and_crop
from portraitpress.segmentation.base import CancellationToken, Segmenter, run_segmentation
from portraitpress.validation.validator import ValidationResult, validate_passport_photo

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineResult:
    original: Image.Image
    edited: Image.Image
    foreground: Image.Image
    composed: Image.Image
    validation: ValidationResult
    background: BackgroundMode
    editor: EditorState

    def settings(self) -> dict:
        return {
            "rotation": self.editor.rotation,
            "crop": self.editor.crop.as_dict(),
            "background": self.background.describe(),
        }


class PassportPipeline:
    def __init__(
        self,
        segmenter: Segmenter,
        spec: PassportSpec = PASSPORT_SPEC,
        sheet: PrintSheetSpec = PRINT_SHEET_SPEC,
        overscan: float = OVERSCAN_FACTOR,
        history: Optional[HistoryRecorder] = None,
    ) -> None:
        self.segmenter = segmenter
        self.spec = spec
        self.sheet = sheet
        self.overscan = overscan
        self.history = history
        self._current: Optional[CancellationToken] = None
        self._request_seq = 0

    # ---------- Requests ----------

    def new_request(self) -> CancellationToken:
        """Cancel whatever is in flight and hand out a token for the next run."""
        self.cancel_pending()
        self._request_seq += 1
        self._current = CancellationToken(label=f"#{self._request_seq}")
        return self._current

    def cancel_pending(self) -> None:
        if self._current is not None and not self._current.cancelled:
            logger.debug("Cancelling request %s", self._current.label)
            self._current.cancel()

    def is_current(self, token: CancellationToken) -> bool:
        return token is self._current and not token.cancelled

    # ---------- Steps ----------

    @staticmethod
    def apply_edits(image: Image.Image, editor: EditorState) -> Image.Image:
        """Rotate + crop. Returns a new raster; `image` is left untouched."""
        return apply_rotation_and_crop(image, editor.rotation, editor.crop)

    def compose(self, foreground: Image.Image, background: BackgroundMode) -> Image.Image:
        return compose_passport_photo(foreground, background, spec=self.spec, overscan=self.overscan)

    def print_sheet(self, composed: Image.Image) -> Image.Image:
        return render_print_sheet(composed, self.sheet)

    async def run(
        self,
        source: Union[bytes, Image.Image],
        editor: EditorState,
        background: BackgroundMode,
        token: Optional[CancellationToken] = None,
        name: str = "photo",
    ) -> PipelineResult:
        """
        Run one composition attempt end to end.

        Raises DecodeError, InvalidCropError, SegmentationError, CompositionError
        or OperationCancelledError; nothing is recorded in those cases.
        """
        if token is None:
            token = self.new_request()

        if isinstance(source, (bytes, bytearray)):
            original = await decode(bytes(source))
        else:
            original = source
        token.raise_if_cancelled()

        edited = self.apply_edits(original, editor)
        logger.debug("Edited raster %dx%d", edited.width, edited.height)

        foreground = await run_segmentation(self.segmenter, edited, token)

        composed = self.compose(foreground, background)
        validation = validate_passport_photo(composed, self.spec)
        token.raise_if_cancelled()

        result = PipelineResult(
            original=original,
            edited=edited,
            foreground=foreground,
            composed=composed,
            validation=validation,
            background=background,
            editor=editor,
        )
        logger.info(
            "Composed %s: %dx%d (%s)",
            name, composed.width, composed.height, "pass" if validation.passed else "check report",
        )

        if self.history is not None:
            self.record_history(name, source, result)
        return result

    def record_history(self, name: str, source: Union[bytes, Image.Image], result: PipelineResult) -> bool:
        if self.history is None:
            return False
        original_bytes = bytes(source) if isinstance(source, (bytes, bytearray)) else encode_png(result.original)
        entry = HistoryEntry.create(
            name=name,
            original_image=original_bytes,
            edited_image=encode_png(result.edited),
            composed_image=encode_png(result.composed),
            settings=result.settings(),
        )
        return self.history.record(entry)
