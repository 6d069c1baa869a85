from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, TYPE_CHECKING

from portraitpress.core.models import BackgroundMode
from portraitpress.editing.editor_state import EditorState

if TYPE_CHECKING:  # avoid importing Pillow at module import time
    from PIL import Image

    from portraitpress.app.pipeline import PipelineResult
    from portraitpress.segmentation.base import CancellationToken


@dataclass
class AppState:
    """
    Mutable state for a single GUI session.

    The GUI should read/write this state, while the pipeline is responsible for
    producing results (load -> edit -> process -> validate -> export). Results
    are only stored once a run has fully succeeded, so a failed attempt leaves
    the editor and previous output as they were.
    """
    # Input
    source_name: Optional[str] = None
    source_bytes: Optional[bytes] = None
    original_pil: Optional["Image.Image"] = None

    # Edits
    editor: EditorState = field(default_factory=EditorState)
    background: BackgroundMode = field(default_factory=BackgroundMode.solid)

    # Output
    result: Optional["PipelineResult"] = None
    sheet_pil: Optional["Image.Image"] = None

    # In-flight request
    pending: Optional["CancellationToken"] = None

    def load_source(self, name: str, data: bytes, image: "Image.Image") -> None:
        """A new image invalidates edits and everything downstream."""
        self.source_name = name
        self.source_bytes = data
        self.original_pil = image
        self.editor = EditorState()
        self.result = None
        self.sheet_pil = None

    def apply_result(self, result: "PipelineResult") -> None:
        self.result = result
        self.sheet_pil = None
        self.pending = None

    def reset(self) -> None:
        """Clear all session state (used by a Reset button)."""
        self.source_name = None
        self.source_bytes = None
        self.original_pil = None
        self.editor = EditorState()
        self.background = BackgroundMode.solid()
        self.result = None
        self.sheet_pil = None
        self.pending = None
