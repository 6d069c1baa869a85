from __future__ import annotations

import tkinter as tk
from tkinter import ttk
from typing import Callable, Optional, Tuple

from PIL import Image, ImageTk

from portraitpress.core.geometry import CropRect, Handle
from portraitpress.editing.crop import handle_at

HANDLE_PX = 8
GRAB_PX = 10

Point = Tuple[float, float]


class CropCanvas(ttk.Frame):
    """
    A resizable canvas that shows a PIL image scaled to fit, optionally with a
    crop rectangle and drag handles on top.

    Pointer positions are converted to percent of the displayed image box
    before they are passed to the callbacks.
    """

    def __init__(
        self,
        master,
        *,
        bg: str = "#f3f3f3",
        on_handle_press: Optional[Callable[[Handle, Point], None]] = None,
        on_pointer_move: Optional[Callable[[Point], None]] = None,
        on_leave: Optional[Callable[[], None]] = None,
    ):
        super().__init__(master)
        self._canvas = tk.Canvas(self, highlightthickness=0, bg=bg)
        self._canvas.pack(fill="both", expand=True)

        self._photo: Optional[ImageTk.PhotoImage] = None
        self._pil: Optional[Image.Image] = None
        self._crop: Optional[CropRect] = None
        self._box: Tuple[int, int, int, int] = (0, 0, 1, 1)  # x, y, w, h of the drawn image

        self._on_handle_press = on_handle_press
        self._on_pointer_move = on_pointer_move
        self._on_leave = on_leave

        self._canvas.bind("<Configure>", self._on_resize)
        self._canvas.bind("<ButtonPress-1>", self._on_press)
        self._canvas.bind("<B1-Motion>", self._on_motion)
        self._canvas.bind("<Leave>", self._on_canvas_leave)

        self._placeholder_id = self._canvas.create_text(
            10, 10, anchor="nw",
            text="No image loaded",
            fill="#555",
            font=("TkDefaultFont", 11),
        )

    def set_image(self, pil: Optional[Image.Image], crop: Optional[CropRect] = None) -> None:
        self._pil = pil
        self._crop = crop
        self._redraw()

    def set_crop(self, crop: Optional[CropRect]) -> None:
        self._crop = crop
        self._draw_overlay()

    def clear(self) -> None:
        self.set_image(None)

    # ---------- Geometry ----------

    def _fit_size(self, img_w: int, img_h: int, box_w: int, box_h: int) -> Tuple[int, int]:
        if img_w <= 0 or img_h <= 0 or box_w <= 2 or box_h <= 2:
            return (1, 1)
        scale = min(box_w / img_w, box_h / img_h)
        new_w = max(1, int(img_w * scale))
        new_h = max(1, int(img_h * scale))
        return new_w, new_h

    def _to_percent(self, x: float, y: float) -> Point:
        bx, by, bw, bh = self._box
        return ((x - bx) / bw * 100.0, (y - by) / bh * 100.0)

    def _to_canvas(self, px: float, py: float) -> Point:
        bx, by, bw, bh = self._box
        return (bx + px / 100.0 * bw, by + py / 100.0 * bh)

    # ---------- Events ----------

    def _on_resize(self, _evt) -> None:
        self._redraw()

    def _on_press(self, evt) -> None:
        if self._crop is None or self._on_handle_press is None:
            return
        _, _, bw, bh = self._box
        px, py = self._to_percent(evt.x, evt.y)
        handle = handle_at(self._crop, px, py, GRAB_PX / bw * 100.0, GRAB_PX / bh * 100.0)
        if handle is not None:
            self._on_handle_press(handle, (px, py))

    def _on_motion(self, evt) -> None:
        if self._on_pointer_move is not None:
            self._on_pointer_move(self._to_percent(evt.x, evt.y))

    def _on_canvas_leave(self, _evt) -> None:
        if self._on_leave is not None:
            self._on_leave()

    # ---------- Drawing ----------

    def _redraw(self) -> None:
        self._canvas.delete("img")
        if self._pil is None:
            self._canvas.delete("crop")
            self._canvas.itemconfigure(self._placeholder_id, state="normal")
            return

        self._canvas.itemconfigure(self._placeholder_id, state="hidden")

        w = max(1, self._canvas.winfo_width())
        h = max(1, self._canvas.winfo_height())

        pil = self._pil
        new_w, new_h = self._fit_size(pil.width, pil.height, w, h)
        resized = pil.resize((new_w, new_h), Image.LANCZOS)

        self._photo = ImageTk.PhotoImage(resized)
        x = (w - new_w) // 2
        y = (h - new_h) // 2
        self._box = (x, y, new_w, new_h)
        self._canvas.create_image(x, y, anchor="nw", image=self._photo, tags=("img",))
        self._draw_overlay()

    def _draw_overlay(self) -> None:
        self._canvas.delete("crop")
        if self._pil is None or self._crop is None:
            return

        c = self._crop
        x0, y0 = self._to_canvas(c.x, c.y)
        x1, y1 = self._to_canvas(c.right, c.bottom)
        self._canvas.create_rectangle(x0, y0, x1, y1, outline="#1e88e5", width=2, tags=("crop",))

        xm, ym = (x0 + x1) / 2.0, (y0 + y1) / 2.0
        r = HANDLE_PX / 2.0
        for hx, hy in ((x0, y0), (xm, y0), (x1, y0), (x1, ym), (x1, y1), (xm, y1), (x0, y1), (x0, ym)):
            self._canvas.create_rectangle(
                hx - r, hy - r, hx + r, hy + r, fill="#ffffff", outline="#1e88e5", tags=("crop",)
            )
