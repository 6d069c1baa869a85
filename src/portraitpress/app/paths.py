from __future__ import annotations

import logging
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from portraitpress.core.config import PHOTO_FILENAME, SHEET_FILENAME

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OutputPaths:
    """
    Where exported artifacts and photo history are written.
    """
    base_dir: Path
    photo: Path
    sheet: Path
    history_dir: Path

    @staticmethod
    def for_dir(base: Path) -> "OutputPaths":
        base = Path(base)
        base.mkdir(parents=True, exist_ok=True)
        return OutputPaths(
            base_dir=base,
            photo=base / PHOTO_FILENAME,
            sheet=base / SHEET_FILENAME,
            history_dir=base / "history",
        )

    @staticmethod
    def default(app_name: str = "portraitpress", base: Optional[Path] = None) -> "OutputPaths":
        return OutputPaths.for_dir(Path(base) if base is not None else Path(tempfile.gettempdir()) / app_name)

    def cleanup(self) -> None:
        """
        Best-effort removal of exported files. Safe to call multiple times.
        """
        for path in (self.photo, self.sheet):
            try:
                path.unlink(missing_ok=True)
            except OSError:
                logger.debug("Could not remove %s", path, exc_info=True)
