"""
Capture overlay for PrinSp.

A fullscreen, frameless window showing the frozen screenshot. The user
drags a Selection on it, then annotates inside that Selection with the
floating tool panel. The workflow is:

1. The FlowController captures the screen FIRST (window already hidden)
2. show_capture() displays the raster with everything outside the
   Selection dimmed
3. Mouse events are forwarded to the FlowController as viewport Points
4. Panels are placed next to the Selection by the LayoutEngine

The overlay holds no session state of its own; every paint reads the
controller's EditorState.
"""

from typing import Optional

from PySide6.QtCore import QRect, Qt, Slot
from PySide6.QtGui import (
    QColor,
    QCursor,
    QGuiApplication,
    QImage,
    QPainter,
    QPen,
    QPixmap,
)
from PySide6.QtWidgets import QInputDialog, QWidget

from prinsp.core.flow_controller import FlowController, FlowPhase
from prinsp.editor.annotations import Point, Selection
from prinsp.editor.compositor import selection_to_rect
from prinsp.editor.renderer import paint_annotations
from prinsp.services.logging_service import get_logger
from prinsp.ui.panels import ResultPanel, ToolPanel


class SelectionOverlay(QWidget):
    """
    Fullscreen capture and annotation surface.

    Implements the view side of the FlowController: show_capture(),
    redraw(), close_view(), ask_text(), show_ocr_pending() and
    show_ocr_result().
    """

    # Overlay appearance constants
    DIM_COLOR = QColor(0, 0, 0, 100)  # Semi-transparent black overlay
    SELECTION_BORDER_COLOR = QColor(80, 160, 255)  # Light blue
    SELECTION_BORDER_WIDTH = 2

    def __init__(self, controller: FlowController, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._logger = get_logger(__name__)
        self._controller = controller
        self._background_pixmap: Optional[QPixmap] = None

        self._setup_window()
        self._setup_panels()
        self._connect_signals()

        controller.attach_view(self)

    def _setup_window(self) -> None:
        """Configure the overlay window properties."""
        self.setWindowFlags(
            Qt.WindowType.FramelessWindowHint
            | Qt.WindowType.WindowStaysOnTopHint
            | Qt.WindowType.BypassWindowManagerHint
        )
        self.setCursor(QCursor(Qt.CursorShape.CrossCursor))
        self.setMouseTracking(True)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)

    def _setup_panels(self) -> None:
        self._tool_panel = ToolPanel(self)
        self._result_panel = ResultPanel(self)
        self._tool_panel.hide()
        self._result_panel.hide()

        state = self._controller.state
        self._tool_panel.set_tool(state.tool)
        self._tool_panel.set_style(state.color, state.line_width, state.font_size)

    def _connect_signals(self) -> None:
        controller = self._controller
        panel = self._tool_panel

        panel.tool_selected.connect(controller.set_tool)
        panel.color_changed.connect(controller.set_color)
        panel.line_width_changed.connect(controller.set_line_width)
        panel.font_size_changed.connect(controller.set_font_size)
        panel.undo_requested.connect(controller.undo)
        panel.redo_requested.connect(controller.redo)
        panel.clear_requested.connect(controller.clear)
        panel.ocr_requested.connect(controller.request_ocr)
        panel.save_requested.connect(lambda: controller.confirm(save=True))
        panel.confirm_requested.connect(lambda: controller.confirm(save=False))
        panel.cancel_requested.connect(controller.cancel)
        self._result_panel.copy_requested.connect(controller.copy_ocr_result)

        controller.history_changed.connect(panel.set_history_state)
        controller.tool_changed.connect(panel.set_tool)
        controller.phase_changed.connect(self._on_phase_changed)

    # ─── View Interface ───────────────────────────────────────────────────

    def show_capture(self, image: QImage) -> None:
        """Show the frozen screenshot fullscreen and wait for a selection."""
        self._background_pixmap = QPixmap.fromImage(image)

        screen = QGuiApplication.screenAt(QCursor.pos()) or QGuiApplication.primaryScreen()
        if screen is not None:
            self.setGeometry(screen.geometry())

        self._tool_panel.hide()
        self._result_panel.hide()

        self.showFullScreen()
        self.raise_()
        self.activateWindow()
        self.setFocus()
        self._logger.info(f"Overlay shown: {image.width()}x{image.height()}")

    def redraw(self) -> None:
        self._layout_panels()
        self.update()

    def close_view(self) -> None:
        self._tool_panel.hide()
        self._result_panel.hide()
        self._background_pixmap = None
        self.hide()

    def ask_text(self) -> Optional[str]:
        text, ok = QInputDialog.getText(self, "Add Text", "Text:")
        if not ok:
            return None
        return text

    def show_ocr_pending(self) -> None:
        self._tool_panel.set_ocr_busy(True)
        self._result_panel.show_pending()
        self._result_panel.show()
        self._layout_panels()

    def show_ocr_result(self, text: str) -> None:
        self._tool_panel.set_ocr_busy(False)
        self._result_panel.show_text(text)
        self._result_panel.show()
        self._layout_panels()

    # ─── Panels ───────────────────────────────────────────────────────────

    @Slot(object)
    def _on_phase_changed(self, phase: FlowPhase) -> None:
        if phase == FlowPhase.EDITING:
            self._tool_panel.show()
            self._tool_panel.set_ocr_busy(self._controller.ocr_in_flight)
        else:
            self._tool_panel.hide()
            self._result_panel.hide()
        self.redraw()

    def _layout_panels(self) -> None:
        """Move the panels next to the Selection and reserve their area."""
        layout = self._controller.panel_layout(self.width(), self.height())
        if layout is None:
            self._controller.selector.set_reserved_regions([])
            return

        self._tool_panel.move(int(layout.tool.left), int(layout.tool.top))
        self._result_panel.move(int(layout.result.left), int(layout.result.top))

        reserved = []
        for widget, placement in (
            (self._tool_panel, layout.tool),
            (self._result_panel, layout.result),
        ):
            if widget.isVisible():
                reserved.append(
                    Selection(placement.left, placement.top, placement.width, placement.height)
                )
        self._controller.selector.set_reserved_regions(reserved)

    # ─── Painting ─────────────────────────────────────────────────────────

    def paintEvent(self, event) -> None:
        """Paint the screenshot, the dimmed surroundings and the annotations."""
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        painter.setRenderHint(QPainter.RenderHint.TextAntialiasing)

        if self._background_pixmap:
            painter.drawPixmap(0, 0, self._background_pixmap)

        painter.fillRect(self.rect(), self.DIM_COLOR)

        selection = self._controller.current_selection()
        if selection is not None and selection.width > 0 and selection.height > 0:
            rect = selection_to_rect(selection)
            if self._background_pixmap:
                # Original pixels inside the selection (removes dim)
                painter.drawPixmap(rect, self._background_pixmap, rect)

            self._draw_annotations(painter, selection)

            pen = QPen(self.SELECTION_BORDER_COLOR, self.SELECTION_BORDER_WIDTH)
            painter.setPen(pen)
            painter.setBrush(Qt.BrushStyle.NoBrush)
            painter.drawRect(rect)

            self._draw_dimensions(painter, rect)

        painter.end()

    def _draw_annotations(self, painter: QPainter, selection: Selection) -> None:
        state = self._controller.state
        if self._controller.selector.is_dragging or state.selection is None:
            return

        annotations = list(state.annotations)
        if state.transient is not None:
            annotations.append(state.transient)
        if not annotations:
            return

        # Annotations are stored relative to the selection's top-left
        painter.save()
        painter.translate(selection.x, selection.y)
        painter.setClipRect(QRect(0, 0, round(selection.width), round(selection.height)))
        paint_annotations(painter, annotations)
        painter.restore()

    def _draw_dimensions(self, painter: QPainter, rect: QRect) -> None:
        """Draw selection dimensions above the selection rectangle."""
        dims_text = f"{rect.width()} × {rect.height()}"

        text_x = rect.left()
        text_y = rect.top() - 8
        if text_y < 16:
            text_y = rect.top() + 18

        # Draw text with shadow for visibility
        painter.setPen(QColor(0, 0, 0, 200))
        painter.drawText(text_x + 1, text_y + 1, dims_text)
        painter.setPen(QColor(255, 255, 255))
        painter.drawText(text_x, text_y, dims_text)

    # ─── Input ────────────────────────────────────────────────────────────

    @staticmethod
    def _event_point(event) -> Point:
        pos = event.position()
        return Point(pos.x(), pos.y())

    def mousePressEvent(self, event) -> None:
        if event.button() == Qt.MouseButton.LeftButton:
            self._controller.pointer_down(self._event_point(event))

    def mouseMoveEvent(self, event) -> None:
        if event.buttons() & Qt.MouseButton.LeftButton:
            self._controller.pointer_move(self._event_point(event))

    def mouseReleaseEvent(self, event) -> None:
        if event.button() == Qt.MouseButton.LeftButton:
            self._controller.pointer_up(self._event_point(event))

    def keyPressEvent(self, event) -> None:
        """Keyboard shortcuts of the overlay."""
        key = event.key()
        modifiers = event.modifiers()
        ctrl = bool(modifiers & Qt.KeyboardModifier.ControlModifier)
        shift = bool(modifiers & Qt.KeyboardModifier.ShiftModifier)
        controller = self._controller

        if key == Qt.Key.Key_Escape:
            self._logger.info("Capture cancelled by ESC key")
            controller.cancel()
        elif key in (Qt.Key.Key_Return, Qt.Key.Key_Enter):
            controller.confirm(save=False)
        elif ctrl and key == Qt.Key.Key_Z:
            if shift:
                controller.redo()
            else:
                controller.undo()
        elif ctrl and key == Qt.Key.Key_Y:
            controller.redo()
        elif ctrl and key == Qt.Key.Key_S:
            controller.confirm(save=True)
        elif ctrl and key == Qt.Key.Key_A:
            controller.select_full()
        else:
            super().keyPressEvent(event)
