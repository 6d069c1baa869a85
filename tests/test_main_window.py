import importlib.util
import unittest
from types import SimpleNamespace
from unittest.mock import Mock

from PIL import Image

from tests._test_path import SRC  # noqa: F401

from portraitpress.app.state import AppState
from portraitpress.editing import editor_state as es


@unittest.skipUnless(importlib.util.find_spec("tkinter"), "tkinter not available")
class TestEditorRedraw(unittest.TestCase):
    def setUp(self):
        from portraitpress.ui.main_window import PortraitPressApp

        self.edit = PortraitPressApp._edit
        state = AppState()
        state.original_pil = Image.new("RGBA", (40, 30))
        self.app = SimpleNamespace(state=state, set_status=Mock(), _render_editor=Mock())

    def test_crop_edit_does_not_rotate_again(self):
        self.edit(self.app, es.set_crop_field, "x", 10.0)
        self.app._render_editor.assert_called_once_with(rotate=False)
        self.assertEqual(self.app.state.editor.crop.x, 10.0)

    def test_rotation_edit_rotates(self):
        self.edit(self.app, es.rotate_by_quarter, "right")
        self.app._render_editor.assert_called_once_with(rotate=True)

    def test_rejected_edit_reports_status(self):
        self.edit(self.app, es.set_rotation, float("nan"))
        self.app._render_editor.assert_not_called()
        self.app.set_status.assert_called_once()
