"""
Compile-time constants for PortraitPress.

These are not user-editable. PassportSpec / PrintSheetSpec in core.models are
built from them once at import time.
"""

from __future__ import annotations

# Output frame: 2x2" at 300 DPI.
DPI = 300
FRAME_INCHES = 2
FRAME_PIXELS = FRAME_INCHES * DPI  # 600

# Head size / eye level (policy intent only; nothing measures these yet).
MIN_HEAD_PX = 240     # 0.8"
MAX_HEAD_PX = 390     # 1.3"
TARGET_HEAD_PX = 330  # 1.1"
EYE_LEVEL_FROM_BOTTOM_PX = 375  # 1.25"

# Multiplier on top of the minimum fill scale.
OVERSCAN_FACTOR = 1.10

# Smallest crop rectangle side, in percent of the displayed image.
MIN_CROP_PERCENT = 20.0

# Print sheet: 4x6" page, 2 columns x 3 rows.
PRINT_PAGE_INCHES = (4, 6)
PRINT_GRID = (2, 3)
CUT_LINE_COLOR = (200, 200, 200)
CUT_LINE_WIDTH = 1

DEFAULT_BACKGROUND = "#FFFFFF"

HISTORY_LIMIT = 10

PHOTO_FILENAME = "passport-photo.png"
SHEET_FILENAME = "passport-photos-printable.png"
