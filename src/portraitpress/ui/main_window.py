from __future__ import annotations

import asyncio
import logging
import os
import threading
import tkinter as tk
from pathlib import Path
from tkinter import filedialog, messagebox, ttk

from portraitpress.app.history import FileHistoryStore, HistoryRecorder
from portraitpress.app.paths import OutputPaths
from portraitpress.app.pipeline import PassportPipeline
from portraitpress.app.state import AppState
from portraitpress.core.config import DEFAULT_BACKGROUND, PHOTO_FILENAME, SHEET_FILENAME
from portraitpress.core.errors import (
    DecodeError,
    OperationCancelledError,
    PortraitPressError,
    SegmentationError,
)
from portraitpress.core.geometry import Handle
from portraitpress.core.models import BackgroundMode
from portraitpress.editing import editor_state as es
from portraitpress.imaging.raster import decode_bytes, encode_png
from portraitpress.imaging.transform import rotate_raster
from portraitpress.segmentation.rembg_segmenter import RembgSegmenter
from portraitpress.ui.crop_canvas import CropCanvas
from portraitpress.validation.validator import format_report_text

logger = logging.getLogger(__name__)

GENERIC_FAILURE = "Something went wrong while creating the photo. Please try again."


class PortraitPressApp(ttk.Frame):
    """PortraitPress GUI: open -> edit (rotate/crop) -> process -> validate -> export."""

    def __init__(self, master: tk.Tk, state: AppState, pipeline: PassportPipeline, paths: OutputPaths):
        super().__init__(master)
        self.master = master
        self.state = state
        self.pipeline = pipeline
        self.paths = paths

        self._build_layout()
        self._bind_shortcuts()

        self.set_status("Ready.")
        self._sync_buttons()

    # ---------- UI construction ----------

    def _build_layout(self) -> None:
        self.pack(fill="both", expand=True)

        toolbar = ttk.Frame(self, padding=(10, 8))
        toolbar.pack(side="top", fill="x")

        self.btn_open = ttk.Button(toolbar, text="Open", command=self.on_open)
        self.btn_process = ttk.Button(toolbar, text="Create Photo", command=self.on_process)
        self.btn_sheet = ttk.Button(toolbar, text="Print Sheet", command=self.on_sheet)
        self.btn_save = ttk.Button(toolbar, text="Save Photo", command=self.on_save_photo)
        self.btn_save_sheet = ttk.Button(toolbar, text="Save Sheet", command=self.on_save_sheet)
        self.btn_reset = ttk.Button(toolbar, text="Reset", command=self.on_reset)

        self.btn_open.pack(side="left")
        ttk.Separator(toolbar, orient="vertical").pack(side="left", fill="y", padx=8)
        for btn in (self.btn_process, self.btn_sheet, self.btn_save, self.btn_save_sheet):
            btn.pack(side="left", padx=(0, 6))
        self.btn_reset.pack(side="left", padx=(6, 0))

        self.progress = ttk.Progressbar(toolbar, mode="indeterminate", length=120)
        self.progress.pack(side="right")

        main = ttk.PanedWindow(self, orient="horizontal")
        main.pack(side="top", fill="both", expand=True, padx=10, pady=(0, 10))

        # Left pane: editor
        left = ttk.Frame(main)
        main.add(left, weight=1)

        lf_edit = ttk.LabelFrame(left, text="Edit", padding=8)
        lf_edit.pack(fill="both", expand=True)

        self.editor_canvas = CropCanvas(
            lf_edit,
            on_handle_press=self.on_handle_press,
            on_pointer_move=self.on_pointer_move,
            on_leave=self.on_pointer_release,
        )
        self.editor_canvas.pack(fill="both", expand=True)

        controls = ttk.Frame(lf_edit)
        controls.pack(side="bottom", fill="x", pady=(6, 0))

        ttk.Label(controls, text="Rotation:").grid(row=0, column=0, sticky="w")
        ttk.Button(controls, text="↺ 90°", command=lambda: self._edit(es.rotate_by_quarter, "left")).grid(row=0, column=1)
        ttk.Button(controls, text="↻ 90°", command=lambda: self._edit(es.rotate_by_quarter, "right")).grid(row=0, column=2)
        ttk.Button(controls, text="-1°", command=lambda: self._edit(es.rotate_by_degree, "left")).grid(row=0, column=3)
        ttk.Button(controls, text="+1°", command=lambda: self._edit(es.rotate_by_degree, "right")).grid(row=0, column=4)
        self.var_rotation = tk.StringVar(value="0")
        entry = ttk.Entry(controls, textvariable=self.var_rotation, width=7)
        entry.grid(row=0, column=5, padx=(6, 0))
        entry.bind("<Return>", lambda e: self.on_set_rotation())
        ttk.Button(controls, text="Reset Edits", command=self.on_reset_edits).grid(row=0, column=6, padx=(6, 0))

        self.crop_vars: dict[str, tk.DoubleVar] = {}
        for i, (name, lo) in enumerate((("x", 0), ("y", 0), ("width", 20), ("height", 20))):
            ttk.Label(controls, text=f"Crop {name}:").grid(row=1 + i, column=0, sticky="w")
            var = tk.DoubleVar(value=self.state.editor.crop.as_dict()[name])
            scale = ttk.Scale(
                controls, from_=lo, to=100, variable=var,
                command=lambda v, n=name: self._edit(es.set_crop_field, n, float(v)),
            )
            scale.grid(row=1 + i, column=1, columnspan=6, sticky="ew")
            self.crop_vars[name] = var
        controls.columnconfigure(6, weight=1)

        bg_row = ttk.Frame(lf_edit)
        bg_row.pack(side="bottom", fill="x", pady=(6, 0))
        ttk.Label(bg_row, text="Background:").pack(side="left")
        self.var_bg_kind = tk.StringVar(value="solid")
        ttk.Radiobutton(bg_row, text="Colour", value="solid", variable=self.var_bg_kind).pack(side="left")
        self.var_bg_color = tk.StringVar(value=DEFAULT_BACKGROUND)
        ttk.Entry(bg_row, textvariable=self.var_bg_color, width=9).pack(side="left")
        ttk.Radiobutton(bg_row, text="Original", value="original", variable=self.var_bg_kind).pack(side="left", padx=(8, 0))

        # Right pane: results
        right = ttk.Frame(main)
        main.add(right, weight=1)

        nb = ttk.Notebook(right)
        nb.pack(fill="both", expand=True)

        tab_photo = ttk.Frame(nb, padding=8)
        nb.add(tab_photo, text="Passport Photo")
        self.result_canvas = CropCanvas(tab_photo)
        self.result_canvas.pack(fill="both", expand=True)
        self.result_meta = ttk.Label(tab_photo, text="Not processed yet.")
        self.result_meta.pack(side="bottom", anchor="w", pady=(6, 0))

        tab_sheet = ttk.Frame(nb, padding=8)
        nb.add(tab_sheet, text="Print Sheet")
        self.sheet_canvas = CropCanvas(tab_sheet)
        self.sheet_canvas.pack(fill="both", expand=True)

        tab_val = ttk.Frame(nb, padding=8)
        nb.add(tab_val, text="Validation")
        tab_val.columnconfigure(0, weight=1)
        tab_val.rowconfigure(0, weight=1)

        columns = ("rule", "status", "details")
        self.tree = ttk.Treeview(tab_val, columns=columns, show="headings", height=10)
        self.tree.heading("rule", text="Rule")
        self.tree.heading("status", text="Status")
        self.tree.heading("details", text="Details")
        self.tree.column("rule", width=180, stretch=False)
        self.tree.column("status", width=80, stretch=False)
        self.tree.column("details", width=420, stretch=True)
        self.tree.grid(row=0, column=0, sticky="nsew")

        self.btn_copy_report = ttk.Button(tab_val, text="Copy report", command=self.on_copy_report)
        self.btn_copy_report.grid(row=1, column=0, sticky="w", pady=(8, 0))

        tab_hist = ttk.Frame(nb, padding=8)
        nb.add(tab_hist, text="History")
        self.history_list = tk.Listbox(tab_hist, height=10)
        self.history_list.pack(fill="both", expand=True)
        ttk.Button(tab_hist, text="Clear history", command=self.on_clear_history).pack(side="bottom", anchor="w", pady=(8, 0))

        status = ttk.Frame(self, padding=(10, 6))
        status.pack(side="bottom", fill="x")
        self.status_var = tk.StringVar(value="Ready.")
        ttk.Label(status, textvariable=self.status_var).pack(side="left")

        self._refresh_history()

    def _bind_shortcuts(self) -> None:
        self.master.bind_all("<Control-o>", lambda e: self.on_open())
        self.master.bind_all("<Command-o>", lambda e: self.on_open())

        self.master.bind_all("<Control-r>", lambda e: self.on_process())
        self.master.bind_all("<Command-r>", lambda e: self.on_process())

        self.master.bind_all("<Control-s>", lambda e: self.on_save_photo())
        self.master.bind_all("<Command-s>", lambda e: self.on_save_photo())

        # A drag ends on pointer-up anywhere, not only over the editor.
        self.master.bind_all("<ButtonRelease-1>", lambda e: self.on_pointer_release(), add="+")

    # ---------- Utilities ----------

    def set_status(self, text: str) -> None:
        self.status_var.set(text)

    def _sync_buttons(self) -> None:
        busy = self.state.pending is not None
        has_source = self.state.original_pil is not None
        has_result = self.state.result is not None

        def enable(btn: ttk.Button, on: bool) -> None:
            btn.state(["!disabled"] if on else ["disabled"])

        enable(self.btn_process, has_source and not busy)
        enable(self.btn_sheet, has_result and not busy)
        enable(self.btn_save, has_result and not busy)
        enable(self.btn_save_sheet, self.state.sheet_pil is not None and not busy)
        enable(self.btn_copy_report, has_result)

        if busy:
            self.progress.start(12)
        else:
            self.progress.stop()

    def _background_from_ui(self) -> BackgroundMode:
        if self.var_bg_kind.get() == "original":
            return BackgroundMode.original()
        return BackgroundMode.solid(self.var_bg_color.get().strip())

    # ---------- Editing ----------

    def _edit(self, transition, *args) -> None:
        if self.state.original_pil is None:
            return
        before = self.state.editor.rotation
        try:
            self.state.editor = transition(self.state.editor, *args)
        except ValueError as e:
            self.set_status(str(e))
            return
        self._render_editor(rotate=self.state.editor.rotation != before)

    def _render_editor(self, rotate: bool = True) -> None:
        editor = self.state.editor
        if rotate:
            preview = rotate_raster(self.state.original_pil, editor.rotation)
            self.editor_canvas.set_image(preview, editor.crop)
        else:
            self.editor_canvas.set_crop(editor.crop)
        self.var_rotation.set(f"{editor.rotation:g}")
        for name, value in editor.crop.as_dict().items():
            self.crop_vars[name].set(value)

    def on_handle_press(self, handle: Handle, pointer) -> None:
        self.state.editor = es.begin_drag(self.state.editor, handle, pointer)

    def on_pointer_move(self, pointer) -> None:
        if not self.state.editor.dragging:
            return
        self.state.editor = es.drag_to(self.state.editor, pointer)
        self._render_editor(rotate=False)

    def on_pointer_release(self) -> None:
        self.state.editor = es.end_drag(self.state.editor)

    def on_set_rotation(self) -> None:
        try:
            degrees = float(self.var_rotation.get())
        except ValueError:
            self.set_status("Rotation must be a number.")
            return
        self._edit(es.set_rotation, degrees)

    def on_reset_edits(self) -> None:
        self._edit(es.reset_edits)

    # ---------- Open ----------

    def on_open(self) -> None:
        path = filedialog.askopenfilename(
            title="Select a photo",
            filetypes=[
                ("Image files", "*.jpg *.jpeg *.png *.bmp *.tif *.tiff *.webp"),
                ("All files", "*.*"),
            ],
        )
        if not path:
            return

        try:
            data = Path(path).read_bytes()
            pil = decode_bytes(data)
        except (OSError, DecodeError) as e:
            messagebox.showerror("Open failed", f"Could not open image.\n\n{e}")
            self.set_status("Open failed.")
            return

        # Any in-flight run belongs to the previous image.
        self.pipeline.cancel_pending()
        self.state.pending = None
        self.state.load_source(os.path.basename(path), data, pil)

        self._render_editor()
        self.result_canvas.clear()
        self.sheet_canvas.clear()
        self.result_meta.configure(text=f"File: {self.state.source_name}   Size: {pil.width}x{pil.height}")
        self._clear_validation_view()
        self._sync_buttons()
        self.set_status("Loaded photo. Adjust rotation/crop, then create the photo.")

    # ---------- Process ----------

    def on_process(self) -> None:
        if self.state.source_bytes is None:
            messagebox.showwarning("No input", "Open a photo first.")
            return
        try:
            background = self._background_from_ui()
        except ValueError as e:
            messagebox.showerror("Background", str(e))
            return

        self.state.background = background
        token = self.pipeline.new_request()
        self.state.pending = token
        source, editor, name = self.state.source_bytes, es.end_drag(self.state.editor), self.state.source_name
        self._sync_buttons()
        self.set_status("Creating passport photo…")

        def worker() -> None:
            result = None
            err: Exception | None = None
            try:
                result = asyncio.run(self.pipeline.run(source, editor, background, token=token, name=name or "photo"))
            except Exception as e:
                err = e

            def finish_on_ui_thread() -> None:
                if not self.pipeline.is_current(token) or isinstance(err, OperationCancelledError):
                    logger.info("Discarding result of superseded request %s", token.label)
                    return
                self.state.pending = None
                if err is not None:
                    self._show_failure(err)
                    self._sync_buttons()
                    return
                self.state.apply_result(result)
                self._render_result()
                self._refresh_history()
                self._sync_buttons()

            self.master.after(0, finish_on_ui_thread)

        threading.Thread(target=worker, daemon=True).start()

    def _show_failure(self, err: Exception) -> None:
        if isinstance(err, SegmentationError):
            messagebox.showerror("Background removal failed", str(err))
        elif isinstance(err, PortraitPressError):
            logger.warning("Composition failed: %s", err)
            messagebox.showerror("Processing failed", f"{GENERIC_FAILURE}\n\n{err}")
        else:
            logger.exception("Unexpected failure", exc_info=err)
            messagebox.showerror("Processing failed", GENERIC_FAILURE)
        self.set_status("Processing failed.")

    def _render_result(self) -> None:
        result = self.state.result
        if result is None:
            return
        self.result_canvas.set_image(result.composed)
        self.result_meta.configure(text=f"Size: {result.composed.width}x{result.composed.height}")
        self.sheet_canvas.clear()

        report = result.validation.to_report(result.background)
        self._clear_validation_view()
        for r in report.results:
            mark = "ℹ️" if r.informational else ("✅" if r.passed else "❌")
            self.tree.insert("", "end", values=(r.rule_id, mark, r.message))

        if report.passed:
            self.set_status("Passport photo ready. All checks passed.")
        else:
            self.set_status("Passport photo ready (some checks failed).")

    def _clear_validation_view(self) -> None:
        for iid in self.tree.get_children():
            self.tree.delete(iid)

    def on_copy_report(self) -> None:
        result = self.state.result
        if result is None:
            return
        self.master.clipboard_clear()
        self.master.clipboard_append(format_report_text(result.validation.to_report(result.background)))
        self.set_status("Copied validation report.")

    # ---------- Sheet / export ----------

    def on_sheet(self) -> None:
        if self.state.result is None:
            return
        self.state.sheet_pil = self.pipeline.print_sheet(self.state.result.composed)
        self.sheet_canvas.set_image(self.state.sheet_pil)
        self._sync_buttons()
        self.set_status("Print sheet ready (4x6, 6 photos).")

    def _save(self, img, default_name: str) -> None:
        path = filedialog.asksaveasfilename(
            title="Save as", defaultextension=".png", initialdir=str(self.paths.base_dir),
            initialfile=default_name, filetypes=[("PNG", "*.png")],
        )
        if not path:
            return
        try:
            Path(path).write_bytes(encode_png(img))
        except OSError as e:
            messagebox.showerror("Save failed", str(e))
            return
        self.set_status(f"Saved {os.path.basename(path)}.")

    def on_save_photo(self) -> None:
        if self.state.result is not None:
            self._save(self.state.result.composed, PHOTO_FILENAME)

    def on_save_sheet(self) -> None:
        if self.state.sheet_pil is not None:
            self._save(self.state.sheet_pil, SHEET_FILENAME)

    # ---------- History / reset ----------

    def _refresh_history(self) -> None:
        self.history_list.delete(0, "end")
        if self.pipeline.history is None:
            return
        for entry in self.pipeline.history.entries():
            self.history_list.insert("end", f"{entry.name}  ({entry.settings.get('background', '')})")

    def on_clear_history(self) -> None:
        if self.pipeline.history is not None:
            self.pipeline.history.clear()
        self._refresh_history()

    def on_reset(self) -> None:
        self.pipeline.cancel_pending()
        self.state.reset()

        self.editor_canvas.clear()
        self.result_canvas.clear()
        self.sheet_canvas.clear()
        self.result_meta.configure(text="Not processed yet.")
        self._clear_validation_view()
        self.var_bg_kind.set("solid")
        self.var_bg_color.set(DEFAULT_BACKGROUND)
        self._sync_buttons()
        self.set_status("Reset complete.")


def run() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    root = tk.Tk()
    root.title("PortraitPress")
    root.geometry("1100x760")
    root.minsize(900, 600)

    paths = OutputPaths.default()
    history = HistoryRecorder(FileHistoryStore(paths.history_dir))
    pipeline = PassportPipeline(RembgSegmenter(), history=history)
    PortraitPressApp(root, AppState(), pipeline, paths)

    root.mainloop()


if __name__ == "__main__":
    run()
