"""Tests for editor tools."""

import pytest

from prinsp.core.editor_state import EditorState
from prinsp.editor.annotations import AnnotationType, Point
from prinsp.editor.tools import (
    ArrowTool,
    MosaicTool,
    RectTool,
    SelectTool,
    TextTool,
    ToolType,
    create_tool,
)


class FakeController:
    """Minimal controller surface the tools use."""

    def __init__(self, text=None):
        self.state = EditorState()
        self.committed = []
        self.redraws = 0
        self._text = text

    def redraw(self):
        self.redraws += 1

    def commit_annotation(self, annotation):
        self.state.commit_annotation(annotation)
        self.committed.append(annotation)

    def ask_text(self):
        return self._text


class TestDragTools:
    """Tests for rect/arrow/mosaic tools."""

    @pytest.mark.parametrize("tool_cls, kind", [
        (RectTool, AnnotationType.RECT),
        (ArrowTool, AnnotationType.ARROW),
        (MosaicTool, AnnotationType.MOSAIC),
    ])
    def test_drag_commits_annotation(self, tool_cls, kind):
        controller = FakeController()
        tool = tool_cls()

        tool.on_pointer_down(Point(5, 5), controller)
        tool.on_pointer_move(Point(20, 15), controller)
        tool.on_pointer_up(Point(30, 25), controller)

        assert len(controller.committed) == 1
        ann = controller.committed[0]
        assert ann.type == kind
        assert ann.points == (Point(5, 5), Point(30, 25))
        assert controller.state.transient is None

    def test_transient_follows_pointer(self):
        controller = FakeController()
        tool = RectTool()

        tool.on_pointer_down(Point(0, 0), controller)
        assert controller.state.transient.points == (Point(0, 0), Point(0, 0))

        tool.on_pointer_move(Point(12, 8), controller)
        assert controller.state.transient.endpoint == Point(12, 8)
        assert controller.state.annotations == ()
        assert controller.redraws == 2

    def test_degenerate_drag_discarded(self):
        controller = FakeController()
        tool = ArrowTool()

        tool.on_pointer_down(Point(7, 7), controller)
        tool.on_pointer_up(Point(7, 7), controller)

        assert controller.committed == []
        assert controller.state.transient is None

    def test_uses_current_style(self):
        controller = FakeController()
        controller.state.set_color("#00ff00")
        controller.state.set_line_width(6)
        tool = RectTool()

        tool.on_pointer_down(Point(0, 0), controller)
        tool.on_pointer_up(Point(10, 10), controller)

        style = controller.committed[0].style
        assert style.color == "#00ff00"
        assert style.line_width == 6

    def test_deactivate_drops_transient(self):
        controller = FakeController()
        tool = RectTool()
        tool.on_pointer_down(Point(0, 0), controller)

        tool.on_deactivate(controller)

        assert controller.state.transient is None


class TestTextTool:
    """Tests for the text tool."""

    def test_commits_text_at_press_point(self):
        controller = FakeController(text="hello")
        controller.state.set_font_size(22)

        TextTool().on_pointer_down(Point(40, 12), controller)

        ann = controller.committed[0]
        assert ann.type == AnnotationType.TEXT
        assert ann.points == (Point(40, 12),)
        assert ann.text == "hello"
        assert ann.style.font_size == 22

    @pytest.mark.parametrize("text", [None, ""])
    def test_cancelled_or_empty_input(self, text):
        controller = FakeController(text=text)

        TextTool().on_pointer_down(Point(0, 0), controller)

        assert controller.committed == []


class TestFactory:
    """Tests for create_tool()."""

    @pytest.mark.parametrize("tool_type", list(ToolType))
    def test_create_every_tool(self, tool_type):
        assert create_tool(tool_type).tool_type == tool_type

    def test_select_tool_does_not_draw(self):
        assert not SelectTool().draws
        assert RectTool().draws
