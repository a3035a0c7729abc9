"""Tests for EditorState."""

from prinsp.core.editor_state import EditorState
from prinsp.editor.annotations import Selection
from prinsp.editor.tools import ToolType


class TestEditorState:
    """Tests for style and session state."""

    def test_defaults(self):
        state = EditorState()

        assert state.tool == ToolType.RECT
        assert state.color == "#ff0000"
        assert state.line_width == 3
        assert state.font_size == 16
        assert not state.has_capture
        assert not state.is_editing

    def test_current_style(self):
        state = EditorState()
        state.set_color("#00ff00")
        state.set_line_width(5)
        state.set_font_size(20)

        style = state.current_style()

        assert (style.color, style.line_width, style.font_size) == ("#00ff00", 5, 20)

    def test_widths_are_at_least_one(self):
        state = EditorState()
        state.set_line_width(0)
        state.set_font_size(-4)

        assert state.line_width == 1
        assert state.font_size == 1

    def test_set_selection_resets_history(self, white_image, make_rect):
        state = EditorState()
        state.begin_session(white_image)
        state.set_selection(Selection(0, 0, 50, 50))
        state.commit_annotation(make_rect())
        state.ocr_result = "text"

        state.set_selection(Selection(10, 10, 50, 50))

        assert state.annotations == ()
        assert not state.history.can_undo
        assert state.ocr_result is None

    def test_commit_clears_transient(self, make_rect):
        state = EditorState()
        state.transient = make_rect()

        state.commit_annotation(make_rect())

        assert state.transient is None
        assert len(state.annotations) == 1

    def test_reset_keeps_style(self, white_image):
        state = EditorState()
        state.set_color("#123456")
        state.begin_session(white_image)
        state.set_selection(Selection(0, 0, 20, 20))

        state.reset()

        assert state.base_image is None
        assert state.selection is None
        assert state.color == "#123456"
