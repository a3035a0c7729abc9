"""Tests for the RegionSelector state machine."""

import pytest

from prinsp.core.region_selector import RegionSelector, SelectorState
from prinsp.editor.annotations import Point, Selection


@pytest.fixture
def selector(qapp):
    sel = RegionSelector()
    sel.emitted = []
    sel.was_cancelled = []
    sel.selection_finished.connect(sel.emitted.append)
    sel.cancelled.connect(lambda: sel.was_cancelled.append(True))
    return sel


class TestRegionSelector:
    """Tests for drag-to-select."""

    def test_drag_emits_normalized_selection(self, selector):
        selector.pointer_down(Point(200, 150))
        selector.pointer_move(Point(120, 90))
        result = selector.pointer_up(Point(100, 50))

        assert result == Selection(100, 50, 100, 100)
        assert selector.emitted == [result]
        assert selector.state == SelectorState.IDLE

    def test_live_selection_while_dragging(self, selector):
        selector.pointer_down(Point(10, 10))
        live = selector.pointer_move(Point(60, 40))

        assert selector.is_dragging
        assert live == Selection(10, 10, 50, 30)
        assert selector.live_selection == live

    @pytest.mark.parametrize("end", [Point(60, 20), Point(20, 60), Point(20, 20)])
    def test_small_drag_is_discarded(self, selector, end):
        """Test that a drag of 10 px or less in either direction emits nothing."""
        selector.pointer_down(Point(10, 10))

        assert selector.pointer_up(end) is None
        assert selector.emitted == []
        assert selector.state == SelectorState.IDLE

    def test_threshold_is_exclusive(self, selector):
        selector.pointer_down(Point(0, 0))
        assert selector.pointer_up(Point(10, 50)) is None

        selector.pointer_down(Point(0, 0))
        assert selector.pointer_up(Point(11, 11)) == Selection(0, 0, 11, 11)

    def test_press_in_reserved_region_is_ignored(self, selector):
        selector.set_reserved_regions([Selection(0, 0, 100, 50)])

        assert not selector.pointer_down(Point(20, 20))
        assert selector.state == SelectorState.IDLE
        assert selector.pointer_down(Point(20, 80))

    def test_select_full(self, selector):
        result = selector.select_full(1920, 1080)

        assert result == Selection(0, 0, 1920, 1080)
        assert selector.emitted == [result]

    def test_cancel_while_dragging(self, selector):
        selector.pointer_down(Point(0, 0))
        selector.pointer_move(Point(50, 50))

        selector.cancel()

        assert selector.state == SelectorState.IDLE
        assert selector.pointer_up(Point(80, 80)) is None
        assert selector.emitted == []
        assert selector.was_cancelled == [True]

    def test_cancel_when_idle(self, selector):
        selector.cancel()

        assert selector.state == SelectorState.IDLE
        assert selector.emitted == []
