from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Optional, Tuple

from portraitpress.core.geometry import CropRect, Handle, exact_rotation, rotate_fine, rotate_quarter
from portraitpress.editing import crop as crop_ops

logger = logging.getLogger(__name__)

Point = Tuple[float, float]


@dataclass(frozen=True)
class DragSession:
    """An in-progress handle drag. `anchor` is the last pointer position, in percent of the container."""
    handle: Handle
    anchor: Point


@dataclass(frozen=True)
class EditorState:
    """
    Rotation + crop for the image being edited.

    Transitions below are pure: they take a state and return a new one. The
    interactive surface is the only holder of a "current" reference.
    A fresh EditorState() is the state on every new image load.
    """
    rotation: float = 0.0
    crop: CropRect = field(default_factory=CropRect.full)
    drag: Optional[DragSession] = None

    @property
    def dragging(self) -> bool:
        return self.drag is not None


def begin_drag(state: EditorState, handle: Handle, pointer: Point) -> EditorState:
    """Start a session on `handle`. Ignored while another session is active."""
    if state.drag is not None:
        logger.debug("Ignoring drag start on %s: %s already active", handle.value, state.drag.handle.value)
        return state
    return replace(state, drag=DragSession(handle=handle, anchor=(float(pointer[0]), float(pointer[1]))))


def drag_to(state: EditorState, pointer: Point) -> EditorState:
    """Apply the pointer movement since the last anchor to the active handle."""
    if state.drag is None:
        return state
    px, py = float(pointer[0]), float(pointer[1])
    ax, ay = state.drag.anchor
    new_crop = crop_ops.apply_handle_delta(state.crop, state.drag.handle, px - ax, py - ay)
    return replace(state, crop=new_crop, drag=replace(state.drag, anchor=(px, py)))


def apply_drag(state: EditorState, handle: Handle, dx: float, dy: float) -> EditorState:
    """One-shot handle drag by a percent delta, without a session."""
    return replace(state, crop=crop_ops.apply_handle_delta(state.crop, handle, dx, dy))


def end_drag(state: EditorState) -> EditorState:
    """Clear the session. Safe without one (pointer-up anywhere calls this)."""
    if state.drag is None:
        return state
    return replace(state, drag=None)


def rotate_by_quarter(state: EditorState, direction: str) -> EditorState:
    return replace(state, rotation=rotate_quarter(state.rotation, direction))


def rotate_by_degree(state: EditorState, direction: str) -> EditorState:
    return replace(state, rotation=rotate_fine(state.rotation, direction))


def set_rotation(state: EditorState, degrees: float) -> EditorState:
    return replace(state, rotation=exact_rotation(degrees))


def set_crop_field(state: EditorState, name: str, value: float) -> EditorState:
    return replace(state, crop=crop_ops.set_crop_field(state.crop, name, value))


def reset_edits(state: EditorState) -> EditorState:
    """Back to no rotation and the full crop. Any drag is dropped."""
    return EditorState()
