"""
Region selector for PrinSp.

Drag-to-select state machine behind the capture overlay. It turns raw
pointer events into a normalized Selection:

1. idle -> dragging on a pointer-down outside any reserved control region
2. every pointer-move while dragging updates the live Selection
3. pointer-up emits the Selection if it is larger than MIN_SELECTION_SIZE
   in both directions, otherwise discards it
4. cancel() aborts from either state without emitting

The selector knows nothing about widgets: the overlay forwards its mouse
and key events here.
"""

from enum import Enum
from typing import Iterable, List, Optional

from PySide6.QtCore import QObject, Signal

from prinsp.editor.annotations import Point, Selection
from prinsp.services.logging_service import get_logger


# A finished drag must exceed this in both width and height
MIN_SELECTION_SIZE = 10


class SelectorState(Enum):
    IDLE = "idle"
    DRAGGING = "dragging"


class RegionSelector(QObject):
    """
    Interactive drag-to-select state machine.

    Signals:
        selection_finished: Emitted with the final Selection.
        cancelled: Emitted when cancel() is called.
    """

    selection_finished = Signal(object)
    cancelled = Signal()

    def __init__(self, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._logger = get_logger(__name__)
        self._state = SelectorState.IDLE
        self._anchor: Optional[Point] = None
        self._current: Optional[Point] = None
        self._reserved: List[Selection] = []

    # ─── State ────────────────────────────────────────────────────────────

    @property
    def state(self) -> SelectorState:
        return self._state

    @property
    def is_dragging(self) -> bool:
        return self._state == SelectorState.DRAGGING

    @property
    def live_selection(self) -> Optional[Selection]:
        """The rectangle currently being dragged, or None when idle."""
        if not self.is_dragging:
            return None
        return Selection.from_points(self._anchor, self._current)

    def set_reserved_regions(self, regions: Iterable[Selection]) -> None:
        """Set the control regions (e.g. panels) where a press must not start a drag."""
        self._reserved = list(regions)

    def is_reserved(self, point: Point) -> bool:
        return any(region.contains(point) for region in self._reserved)

    # ─── Pointer Events ───────────────────────────────────────────────────

    def pointer_down(self, point: Point) -> bool:
        """
        Start a drag at the given point.

        Returns:
            True if a drag started, False if the press was ignored.
        """
        if self.is_reserved(point):
            self._logger.debug(f"Press at ({point.x}, {point.y}) is inside a control region")
            return False

        self._state = SelectorState.DRAGGING
        self._anchor = point
        self._current = point
        self._logger.debug(f"Selection started at ({point.x}, {point.y})")
        return True

    def pointer_move(self, point: Point) -> Optional[Selection]:
        """Track the pointer; returns the live Selection while dragging."""
        if not self.is_dragging:
            return None
        self._current = point
        return self.live_selection

    def pointer_up(self, point: Point) -> Optional[Selection]:
        """
        Finish the drag.

        Returns:
            The emitted Selection, or None if the drag was too small or no
            drag was in progress.
        """
        if not self.is_dragging:
            return None

        self._current = point
        selection = self.live_selection
        self._reset()

        if selection.width > MIN_SELECTION_SIZE and selection.height > MIN_SELECTION_SIZE:
            self._logger.info(
                f"Selection finished: {selection.width:g}x{selection.height:g} "
                f"at ({selection.x:g}, {selection.y:g})"
            )
            self.selection_finished.emit(selection)
            return selection

        self._logger.debug(
            f"Selection too small ({selection.width:g}x{selection.height:g}), discarded"
        )
        return None

    def select_full(self, width: float, height: float) -> Selection:
        """Bypass dragging and select the whole source raster."""
        self._reset()
        selection = Selection(0, 0, width, height)
        self._logger.info(f"Full capture selected: {width:g}x{height:g}")
        self.selection_finished.emit(selection)
        return selection

    def cancel(self) -> None:
        """Abort from any state without emitting a Selection."""
        self._reset()
        self._logger.info("Selection cancelled")
        self.cancelled.emit()

    def _reset(self) -> None:
        self._state = SelectorState.IDLE
        self._anchor = None
        self._current = None
