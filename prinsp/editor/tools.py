"""
Tool framework and implementations for the PrinSp editor.

Each tool turns pointer events (already converted to selection-local
coordinates) into annotations. Tools never touch the History directly:
finished annotations go through the controller's commit_annotation() so
that every committed change is followed by a redraw.

Tools:
- SelectTool: No drawing; a drag re-selects the capture region
- RectTool: Draw rectangle outlines
- ArrowTool: Draw arrows
- MosaicTool: Pixelate a rectangular area
- TextTool: Place a line of text
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import TYPE_CHECKING, Dict, Optional, Type

from prinsp.editor.annotations import Annotation, AnnotationType, Point
from prinsp.services.logging_service import get_logger

if TYPE_CHECKING:
    from prinsp.core.flow_controller import FlowController


class ToolType(Enum):
    """Enum for tool types."""
    SELECT = "select"
    RECT = "rect"
    ARROW = "arrow"
    TEXT = "text"
    MOSAIC = "mosaic"


class ToolBase(ABC):
    """
    Base class for all tools.

    Tools receive pointer positions in selection-local coordinates along
    with the controller that owns the editor state.
    """

    def __init__(self) -> None:
        self._logger = get_logger(__name__)

    @property
    @abstractmethod
    def tool_type(self) -> ToolType:
        """Return the type of this tool."""
        pass

    @property
    def draws(self) -> bool:
        """Whether the tool produces annotations."""
        return True

    @abstractmethod
    def on_pointer_down(self, pos: Point, controller: "FlowController") -> None:
        pass

    def on_pointer_move(self, pos: Point, controller: "FlowController") -> None:
        pass

    def on_pointer_up(self, pos: Point, controller: "FlowController") -> None:
        pass

    def on_deactivate(self, controller: "FlowController") -> None:
        """Called when another tool becomes active."""
        controller.state.transient = None


class SelectTool(ToolBase):
    """Non-drawing tool; the overlay routes its drags to the RegionSelector."""

    @property
    def tool_type(self) -> ToolType:
        return ToolType.SELECT

    @property
    def draws(self) -> bool:
        return False

    def on_pointer_down(self, pos: Point, controller: "FlowController") -> None:
        pass


class DragTool(ToolBase):
    """
    Shared behavior for tools spanned by an anchor and a drag endpoint.

    Press creates a transient annotation with both points on the anchor,
    every move replaces its endpoint, release commits it. A drag that ends
    on its own anchor draws nothing.
    """

    annotation_type: AnnotationType

    def on_pointer_down(self, pos: Point, controller: "FlowController") -> None:
        state = controller.state
        state.transient = Annotation(
            type=self.annotation_type,
            points=(pos, pos),
            style=state.current_style(),
        )
        controller.redraw()

    def on_pointer_move(self, pos: Point, controller: "FlowController") -> None:
        state = controller.state
        if state.transient is None:
            return
        state.transient = state.transient.with_endpoint(pos)
        controller.redraw()

    def on_pointer_up(self, pos: Point, controller: "FlowController") -> None:
        state = controller.state
        transient = state.transient
        if transient is None:
            return

        annotation = transient.with_endpoint(pos)
        if annotation.anchor == annotation.endpoint:
            self._logger.debug(f"Empty {self.annotation_type.value} drag discarded")
            state.transient = None
            controller.redraw()
            return

        controller.commit_annotation(annotation)


class RectTool(DragTool):
    annotation_type = AnnotationType.RECT

    @property
    def tool_type(self) -> ToolType:
        return ToolType.RECT


class ArrowTool(DragTool):
    annotation_type = AnnotationType.ARROW

    @property
    def tool_type(self) -> ToolType:
        return ToolType.ARROW


class MosaicTool(DragTool):
    annotation_type = AnnotationType.MOSAIC

    @property
    def tool_type(self) -> ToolType:
        return ToolType.MOSAIC


class TextTool(ToolBase):
    """Asks the view for a line of text and places it at the press point."""

    @property
    def tool_type(self) -> ToolType:
        return ToolType.TEXT

    def on_pointer_down(self, pos: Point, controller: "FlowController") -> None:
        text: Optional[str] = controller.ask_text()
        if not text:
            self._logger.debug("Text entry cancelled or empty")
            return

        controller.commit_annotation(Annotation(
            type=AnnotationType.TEXT,
            points=(pos,),
            style=controller.state.current_style(),
            text=text,
        ))


_TOOL_CLASSES: Dict[ToolType, Type[ToolBase]] = {
    ToolType.SELECT: SelectTool,
    ToolType.RECT: RectTool,
    ToolType.ARROW: ArrowTool,
    ToolType.TEXT: TextTool,
    ToolType.MOSAIC: MosaicTool,
}


def create_tool(tool_type: ToolType) -> ToolBase:
    """
    Factory function to create a tool by type.

    Args:
        tool_type: The type of tool to create.

    Returns:
        A new tool instance.
    """
    return _TOOL_CLASSES[tool_type]()
