"""
Editor state for PrinSp.

One explicitly constructed object holding everything a single capture
session edits: the base raster, the Selection, the current tool and style,
the annotation History and the transient (in-progress) annotation. The
FlowController owns it and passes it by reference to the pieces that need
it; nothing else keeps editor state.
"""

from typing import Optional

from PySide6.QtGui import QImage

from prinsp.editor.annotations import (
    DEFAULT_COLOR,
    DEFAULT_LINE_WIDTH,
    Annotation,
    AnnotationStyle,
    Selection,
)
from prinsp.editor.history import AnnotationHistory
from prinsp.editor.renderer import DEFAULT_FONT_SIZE
from prinsp.editor.tools import ToolType
from prinsp.services.logging_service import get_logger


class EditorState:
    """
    Mutable state of one editing session.

    Style settings (tool, color, line width, font size) survive reset() so
    the next capture starts with the user's last choices.
    """

    def __init__(self) -> None:
        self._logger = get_logger(__name__)

        # Style
        self.tool: ToolType = ToolType.RECT
        self.color: str = DEFAULT_COLOR
        self.line_width: int = DEFAULT_LINE_WIDTH
        self.font_size: int = DEFAULT_FONT_SIZE

        # Session
        self.base_image: Optional[QImage] = None
        self.selection: Optional[Selection] = None
        self.history = AnnotationHistory()
        self.transient: Optional[Annotation] = None
        self.ocr_result: Optional[str] = None

    # ─── Commands ─────────────────────────────────────────────────────────

    def set_tool(self, tool: ToolType) -> None:
        self.tool = tool
        self.transient = None

    def set_color(self, color: str) -> None:
        self.color = color

    def set_line_width(self, width: int) -> None:
        self.line_width = max(1, int(width))

    def set_font_size(self, size: int) -> None:
        self.font_size = max(1, int(size))

    def current_style(self) -> AnnotationStyle:
        """Style snapshot for the next annotation."""
        return AnnotationStyle(
            color=self.color,
            line_width=self.line_width,
            font_size=self.font_size,
        )

    # ─── Session ──────────────────────────────────────────────────────────

    @property
    def has_capture(self) -> bool:
        return self.base_image is not None and not self.base_image.isNull()

    @property
    def is_editing(self) -> bool:
        return self.has_capture and self.selection is not None

    @property
    def annotations(self):
        return self.history.annotations

    def begin_session(self, image: QImage) -> None:
        """Start a new session on a freshly captured raster."""
        self.reset()
        self.base_image = image
        self._logger.debug(f"Session started on {image.width()}x{image.height()} raster")

    def set_selection(self, selection: Selection) -> None:
        """
        Use a new Selection.

        Annotations are stored relative to the Selection, so choosing a new
        one starts a fresh History.
        """
        self.selection = selection
        self.history.reset()
        self.transient = None
        self.ocr_result = None

    def commit_annotation(self, annotation: Annotation) -> None:
        self.transient = None
        self.history.add(annotation)

    def reset(self) -> None:
        """Discard the session (raster, Selection, annotations, OCR text)."""
        self.base_image = None
        self.selection = None
        self.history.reset()
        self.transient = None
        self.ocr_result = None
