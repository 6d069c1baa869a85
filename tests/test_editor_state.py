import unittest

from tests._test_path import SRC  # noqa: F401

from portraitpress.core.geometry import CropRect, Handle
from portraitpress.editing import editor_state as es


class TestEditorState(unittest.TestCase):
    def test_default_state(self):
        s = es.EditorState()
        self.assertEqual(s.rotation, 0)
        self.assertEqual(s.crop, CropRect.full())
        self.assertFalse(s.dragging)

    def test_drag_session_applies_incremental_deltas(self):
        s = es.begin_drag(es.EditorState(), Handle.BOTTOM_RIGHT, (100, 100))
        self.assertTrue(s.dragging)
        s = es.drag_to(s, (90, 95))
        self.assertEqual(s.crop, CropRect(0, 0, 90, 95))
        s = es.drag_to(s, (80, 95))
        self.assertEqual(s.crop, CropRect(0, 0, 80, 95))
        self.assertEqual(s.drag.anchor, (80.0, 95.0))
        s = es.end_drag(s)
        self.assertFalse(s.dragging)

    def test_only_one_session_at_a_time(self):
        s = es.begin_drag(es.EditorState(), Handle.LEFT, (0, 50))
        s2 = es.begin_drag(s, Handle.MOVE, (50, 50))
        self.assertIs(s2, s)
        self.assertIs(s2.drag.handle, Handle.LEFT)

    def test_drag_without_session_is_noop(self):
        s = es.EditorState()
        self.assertIs(es.drag_to(s, (10, 10)), s)
        self.assertIs(es.end_drag(s), s)

    def test_transitions_do_not_mutate_input(self):
        s = es.EditorState()
        s2 = es.apply_drag(s, Handle.BOTTOM_RIGHT, -90, 0)
        self.assertEqual(s.crop, CropRect.full())
        self.assertEqual(s2.crop.width, 20)

    def test_rotation_transitions(self):
        s = es.rotate_by_quarter(es.EditorState(), "left")
        self.assertEqual(s.rotation, 270)
        s = es.rotate_by_degree(s, "right")
        self.assertEqual(s.rotation, 271)
        s = es.set_rotation(s, -725)
        self.assertEqual(s.rotation, -725)

    def test_set_crop_field_and_reset(self):
        s = es.set_crop_field(es.EditorState(rotation=12), "width", 50)
        self.assertEqual(s.crop.width, 50)
        s = es.begin_drag(s, Handle.MOVE, (10, 10))
        r = es.reset_edits(s)
        self.assertEqual(r, es.EditorState())
