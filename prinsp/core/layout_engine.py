"""
Floating panel layout for PrinSp.

Places the tool panel and the result panel next to the current Selection
so that they stay on screen and, where possible, do not cover it.

Vertical rule (tool panel):
    below the selection if there is room, else above it, else clamped
    into the viewport.
Horizontal rule (both panels):
    left-aligned with the selection, or hugging the right screen edge when
    the panel would not fit to the right of selection.x.
Result panel:
    stacked under the tool panel when the tool panel is below the
    selection, otherwise directly below the selection; always clamped to
    the viewport height.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from prinsp.editor.annotations import Selection


TOOL_PANEL_WIDTH = 580
TOOL_PANEL_HEIGHT = 48
RESULT_PANEL_WIDTH = 360
RESULT_PANEL_HEIGHT = 220
PANEL_GAP = 8
SCREEN_MARGIN = 8


class HorizontalAnchor(Enum):
    LEFT = "left"
    RIGHT = "right"


class VerticalPlacement(Enum):
    BELOW = "below"
    ABOVE = "above"
    CLAMPED = "clamped"


@dataclass(frozen=True)
class PanelPlacement:
    """
    Resolved position of one panel in viewport coordinates.

    left is always filled in; right is only set for right-anchored panels
    (distance from the right screen edge).
    """
    left: float
    top: float
    width: float
    height: float
    anchor: HorizontalAnchor
    vertical: VerticalPlacement
    right: Optional[float] = None


@dataclass(frozen=True)
class PanelLayout:
    tool: PanelPlacement
    result: PanelPlacement


class LayoutEngine:
    """
    Resolves panel placement for a Selection inside a viewport.

    Panel sizes, gap and margin are configurable; the defaults match the
    overlay's panels.
    """

    def __init__(
        self,
        tool_size=(TOOL_PANEL_WIDTH, TOOL_PANEL_HEIGHT),
        result_size=(RESULT_PANEL_WIDTH, RESULT_PANEL_HEIGHT),
        gap: float = PANEL_GAP,
        margin: float = SCREEN_MARGIN,
    ) -> None:
        self.tool_width, self.tool_height = tool_size
        self.result_width, self.result_height = result_size
        self.gap = gap
        self.margin = margin

    # ─── Rules ────────────────────────────────────────────────────────────

    def horizontal(self, selection: Selection, screen_w: float, width: float):
        """
        Resolve (left, right, anchor) for a panel of the given width.

        When the panel does not fit between selection.x and the right screen
        edge it is anchored to that edge instead of being clamped leftward.
        """
        if screen_w - selection.x < width + self.margin:
            right = self.margin
            return screen_w - right - width, right, HorizontalAnchor.RIGHT
        return max(self.margin, selection.x), None, HorizontalAnchor.LEFT

    def tool_vertical(self, selection: Selection, screen_h: float):
        """Resolve (top, placement) for the tool panel."""
        needed = self.tool_height + self.gap
        if screen_h - selection.bottom >= needed:
            return selection.bottom + self.gap, VerticalPlacement.BELOW
        if selection.y >= needed:
            return selection.y - needed, VerticalPlacement.ABOVE
        top = max(0, min(selection.bottom + self.gap, screen_h - self.tool_height))
        return top, VerticalPlacement.CLAMPED

    def result_vertical(
        self,
        selection: Selection,
        screen_h: float,
        tool_top: float,
        tool_vertical: VerticalPlacement,
    ) -> float:
        """Resolve the result panel's top from the tool panel's resolved position."""
        if tool_vertical == VerticalPlacement.BELOW:
            top = tool_top + self.tool_height + self.gap
        else:
            top = selection.bottom + self.gap
        return max(0, min(top, screen_h - self.result_height))

    # ─── Public API ───────────────────────────────────────────────────────

    def resolve_tool_panel(
        self, selection: Selection, screen_w: float, screen_h: float
    ) -> PanelPlacement:
        top, vertical = self.tool_vertical(selection, screen_h)
        left, right, anchor = self.horizontal(selection, screen_w, self.tool_width)
        return PanelPlacement(
            left=left,
            top=top,
            width=self.tool_width,
            height=self.tool_height,
            anchor=anchor,
            vertical=vertical,
            right=right,
        )

    def resolve(self, selection: Selection, screen_w: float, screen_h: float) -> PanelLayout:
        """
        Place both panels.

        Args:
            selection: The active Selection in viewport coordinates.
            screen_w: Viewport width.
            screen_h: Viewport height.

        Returns:
            PanelLayout with the tool and result panel placements.
        """
        tool = self.resolve_tool_panel(selection, screen_w, screen_h)

        result_top = self.result_vertical(selection, screen_h, tool.top, tool.vertical)
        left, right, anchor = self.horizontal(selection, screen_w, self.result_width)
        result = PanelPlacement(
            left=left,
            top=result_top,
            width=self.result_width,
            height=self.result_height,
            anchor=anchor,
            # Below the tool panel or below the selection, unless clamped up
            vertical=(
                VerticalPlacement.BELOW
                if result_top >= selection.bottom
                else VerticalPlacement.CLAMPED
            ),
            right=right,
        )
        return PanelLayout(tool=tool, result=result)
