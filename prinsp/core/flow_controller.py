"""
Flow controller for PrinSp.

Sequences one capture session:

1. hide the main window and grab the screen (after a short delay so the
   window is really gone)
2. show the frozen screenshot and let the user drag a Selection
3. annotate inside the Selection (tools -> History)
4. confirm (composite -> clipboard [-> file]) or cancel
5. discard the session and restore the main window

The controller owns the EditorState, the RegionSelector and the
LayoutEngine, and talks to every external collaborator through a small
duck-typed interface so it can be driven by fakes in tests:

- capture: capture_full_screen() -> QImage
- clipboard: write_image(QImage), write_text(str)
- files: prompt_save_path(default_name, filter) -> Optional[str],
  write_file(QImage, path)
- ocr: submit(QImage); results come back through on_ocr_finished() /
  on_ocr_failed()
- window: hide(), restore_and_show_normal()
- notifier: blocking(title, message), passive(title, message)
- hotkeys: register(shortcut)  (optional)
- config: shortcut, set_shortcut(shortcut)  (optional)
- view: show_capture(QImage), close_view(), redraw(), ask_text(),
  show_ocr_result(str), show_ocr_pending()  (attached later)

Every failure raised by a collaborator is handled here, following one
policy: capture and clipboard failures block and end the session, save
failures only inform, OCR failures show up as the result text, and
shortcut failures block without touching anything else. Nothing is
retried automatically.
"""

from enum import Enum
from typing import Optional

from PySide6.QtCore import QObject, QTimer, Signal, Slot
from PySide6.QtGui import QImage

from prinsp.core.editor_state import EditorState
from prinsp.core.errors import (
    CaptureFailure,
    ClipboardFailure,
    SaveFailure,
    ShortcutRegistrationFailure,
)
from prinsp.core.layout_engine import LayoutEngine, PanelLayout
from prinsp.core.region_selector import RegionSelector
from prinsp.editor.annotations import Annotation, Point, Selection
from prinsp.editor.compositor import render_selection
from prinsp.editor.tools import ToolBase, ToolType, create_tool
from prinsp.services.file_service import PNG_FILTER, default_file_name
from prinsp.services.logging_service import get_logger


CAPTURE_DELAY_MS = 200
OCR_FAILURE_MARKER = "[OCR failed]"
OCR_EMPTY_RESULT = "(no text recognized)"


class FlowPhase(Enum):
    IDLE = "idle"
    CAPTURING = "capturing"
    SELECTING = "selecting"
    EDITING = "editing"


class _PointerTarget(Enum):
    NONE = "none"
    SELECTOR = "selector"
    TOOL = "tool"


class FlowController(QObject):
    """
    Top-level coordinator of the capture -> edit -> export flow.

    Signals:
        phase_changed: Emitted with the new FlowPhase.
        history_changed: Emitted with (can_undo, can_redo) after every
            committed History change.
        tool_changed: Emitted with the new ToolType.
        shortcut_changed: Emitted with the shortcut string the user applied.
    """

    phase_changed = Signal(object)
    history_changed = Signal(bool, bool)
    tool_changed = Signal(object)
    shortcut_changed = Signal(str)

    def __init__(
        self,
        capture,
        clipboard,
        files,
        ocr,
        window,
        notifier,
        hotkeys=None,
        config=None,
        state: Optional[EditorState] = None,
        capture_delay_ms: int = CAPTURE_DELAY_MS,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._logger = get_logger(__name__)

        self._capture = capture
        self._clipboard = clipboard
        self._files = files
        self._ocr = ocr
        self._window = window
        self._notifier = notifier
        self._hotkeys = hotkeys
        self._config = config
        self._view = None
        self._capture_delay_ms = capture_delay_ms

        self.state = state or EditorState()
        self.selector = RegionSelector(self)
        self.layout = LayoutEngine()

        self._phase = FlowPhase.IDLE
        self._tool: ToolBase = create_tool(self.state.tool)
        self._pointer_target = _PointerTarget.NONE

        # Session counter; OCR results from an older session are dropped
        self._session = 0
        self._ocr_in_flight = False
        self._ocr_session = -1

        self.selector.selection_finished.connect(self.on_selection)

    # ─── Properties ───────────────────────────────────────────────────────

    @property
    def phase(self) -> FlowPhase:
        return self._phase

    @property
    def ocr_in_flight(self) -> bool:
        return self._ocr_in_flight

    @property
    def active_tool(self) -> ToolBase:
        return self._tool

    def attach_view(self, view) -> None:
        """Attach the overlay that displays the session."""
        self._view = view

    def _set_phase(self, phase: FlowPhase) -> None:
        if phase != self._phase:
            self._logger.debug(f"Flow phase: {self._phase.value} -> {phase.value}")
            self._phase = phase
            self.phase_changed.emit(phase)

    def redraw(self) -> None:
        """Ask the view to repaint from the current state."""
        if self._view is not None:
            self._view.redraw()

    def ask_text(self) -> Optional[str]:
        """Ask the view for a line of text (used by the text tool)."""
        if self._view is None:
            return None
        return self._view.ask_text()

    # ─── Capture ──────────────────────────────────────────────────────────

    def start_capture(self) -> None:
        """Begin a new session. Ignored while one is already running."""
        if self._phase != FlowPhase.IDLE:
            self._logger.info(f"Capture requested during {self._phase.value}, ignored")
            return

        self._logger.info("Starting capture")
        self._set_phase(FlowPhase.CAPTURING)
        self._window.hide()

        if self._capture_delay_ms > 0:
            # Let the window manager actually unmap the window first
            QTimer.singleShot(self._capture_delay_ms, self._perform_capture)
        else:
            self._perform_capture()

    @Slot()
    def _perform_capture(self) -> None:
        if self._phase != FlowPhase.CAPTURING:
            return

        try:
            image: QImage = self._capture.capture_full_screen()
        except CaptureFailure as e:
            self._logger.error(f"Capture failed: {e}")
            self._notifier.blocking("Screenshot failed", str(e))
            self._end_flow()
            return

        self._session += 1
        self.state.begin_session(image)
        self._set_phase(FlowPhase.SELECTING)
        if self._view is not None:
            self._view.show_capture(image)

    # ─── Selection ────────────────────────────────────────────────────────

    @Slot(object)
    def on_selection(self, selection: Selection) -> None:
        """Use a finished Selection and switch to editing."""
        if not self.state.has_capture:
            return

        self.state.set_selection(selection)
        self._logger.info(
            f"Editing selection {selection.width:g}x{selection.height:g} "
            f"at ({selection.x:g}, {selection.y:g})"
        )
        self._set_phase(FlowPhase.EDITING)
        self._after_history_change()

    def select_full(self) -> Optional[Selection]:
        """Select the whole captured raster."""
        if not self.state.has_capture:
            return None
        image = self.state.base_image
        return self.selector.select_full(image.width(), image.height())

    def current_selection(self) -> Optional[Selection]:
        """The Selection to display: the live drag if any, else the committed one."""
        return self.selector.live_selection or self.state.selection

    def panel_layout(self, screen_w: float, screen_h: float) -> Optional[PanelLayout]:
        selection = self.state.selection
        if selection is None:
            return None
        return self.layout.resolve(selection, screen_w, screen_h)

    # ─── Pointer Events (viewport coordinates) ────────────────────────────

    def pointer_down(self, point: Point) -> None:
        if self._phase == FlowPhase.SELECTING or (
            self._phase == FlowPhase.EDITING and not self._tool.draws
        ):
            if self.selector.pointer_down(point):
                self._pointer_target = _PointerTarget.SELECTOR
                self.redraw()
            return

        if self._phase == FlowPhase.EDITING:
            selection = self.state.selection
            if selection is None or not selection.contains(point):
                return
            self._pointer_target = _PointerTarget.TOOL
            self._tool.on_pointer_down(selection.to_local(point), self)

    def pointer_move(self, point: Point) -> None:
        if self._pointer_target == _PointerTarget.SELECTOR:
            self.selector.pointer_move(point)
            self.redraw()
        elif self._pointer_target == _PointerTarget.TOOL and self.state.selection:
            self._tool.on_pointer_move(self.state.selection.to_local(point), self)

    def pointer_up(self, point: Point) -> None:
        target = self._pointer_target
        self._pointer_target = _PointerTarget.NONE

        if target == _PointerTarget.SELECTOR:
            # A successful drag lands in on_selection() via the signal
            self.selector.pointer_up(point)
            self.redraw()
        elif target == _PointerTarget.TOOL and self.state.selection:
            self._tool.on_pointer_up(self.state.selection.to_local(point), self)

    # ─── Editing Commands ─────────────────────────────────────────────────

    def set_tool(self, tool_type: ToolType) -> None:
        if tool_type == self._tool.tool_type:
            return
        self._tool.on_deactivate(self)
        self._tool = create_tool(tool_type)
        self.state.set_tool(tool_type)
        self._logger.debug(f"Tool: {tool_type.value}")
        self.tool_changed.emit(tool_type)
        self.redraw()

    def set_color(self, color: str) -> None:
        self.state.set_color(color)

    def set_line_width(self, width: int) -> None:
        self.state.set_line_width(width)

    def set_font_size(self, size: int) -> None:
        self.state.set_font_size(size)

    def commit_annotation(self, annotation: Annotation) -> None:
        self.state.commit_annotation(annotation)
        self._after_history_change()

    def undo(self) -> None:
        if self.state.history.can_undo:
            self.state.history.undo()
            self._after_history_change()

    def redo(self) -> None:
        if self.state.history.can_redo:
            self.state.history.redo()
            self._after_history_change()

    def clear(self) -> None:
        if self._phase != FlowPhase.EDITING:
            return
        self.state.history.clear()
        self._after_history_change()

    def _after_history_change(self) -> None:
        history = self.state.history
        self.redraw()
        self.history_changed.emit(history.can_undo, history.can_redo)

    # ─── Export ───────────────────────────────────────────────────────────

    def render(self) -> Optional[QImage]:
        """Composite of the current Selection and committed annotations."""
        if not self.state.is_editing:
            return None
        return render_selection(
            self.state.base_image, self.state.selection, self.state.annotations
        )

    def confirm(self, save: bool = False) -> bool:
        """
        Export the composite and end the session.

        The composite always goes to the clipboard. With save=True the user
        is then asked for a destination; a failed file write is reported
        but does not undo the clipboard copy or reopen the editor.

        Returns:
            True if the clipboard write succeeded.
        """
        image = self.render()
        if image is None:
            return False

        try:
            self._clipboard.write_image(image)
        except ClipboardFailure as e:
            self._logger.error(f"Clipboard write failed: {e}")
            self._notifier.blocking("Copy failed", str(e))
            self._end_flow()
            return False

        self._end_flow()

        if save:
            self._save(image)
        return True

    def _save(self, image: QImage) -> None:
        path = self._files.prompt_save_path(default_file_name(), PNG_FILTER)
        if not path:
            return
        try:
            self._files.write_file(image, path)
        except SaveFailure as e:
            self._logger.error(f"Save failed: {e}")
            self._notifier.passive("Save failed", str(e))

    def cancel(self) -> None:
        """Discard the session. Does not wait for outstanding OCR requests."""
        if self._phase == FlowPhase.IDLE:
            return
        self._logger.info("Session cancelled")
        self.selector.cancel()
        self._end_flow()

    def _end_flow(self) -> None:
        self._session += 1
        self._pointer_target = _PointerTarget.NONE
        self.state.reset()
        if self._view is not None:
            self._view.close_view()
        self._set_phase(FlowPhase.IDLE)
        self._window.restore_and_show_normal()

    # ─── OCR ──────────────────────────────────────────────────────────────

    def request_ocr(self) -> bool:
        """
        Recognize text in the current composite.

        Returns:
            True if a request was submitted; False if one is already in
            flight or there is nothing to recognize.
        """
        if self._ocr_in_flight:
            self._logger.info("OCR already running, request ignored")
            return False

        image = self.render()
        if image is None:
            return False

        self._ocr_in_flight = True
        self._ocr_session = self._session
        if self._view is not None:
            self._view.show_ocr_pending()
        self._ocr.submit(image)
        return True

    def _accept_ocr_result(self) -> bool:
        self._ocr_in_flight = False
        if self._ocr_session != self._session:
            self._logger.debug("OCR result for an ended session dropped")
            return False
        return True

    @Slot(str)
    def on_ocr_finished(self, text: str) -> None:
        if not self._accept_ocr_result():
            return

        self.state.ocr_result = text or OCR_EMPTY_RESULT
        if self._view is not None:
            self._view.show_ocr_result(self.state.ocr_result)
        if text:
            self._copy_text(text)

    @Slot(str)
    def on_ocr_failed(self, reason: str) -> None:
        if not self._accept_ocr_result():
            return

        self.state.ocr_result = f"{OCR_FAILURE_MARKER} {reason}"
        if self._view is not None:
            self._view.show_ocr_result(self.state.ocr_result)

    def copy_ocr_result(self) -> None:
        """Copy the displayed OCR text again."""
        text = self.state.ocr_result
        if not text or text == OCR_EMPTY_RESULT or text.startswith(OCR_FAILURE_MARKER):
            return
        self._copy_text(text)

    def _copy_text(self, text: str) -> None:
        # The editor stays open: only image export ends the session
        try:
            self._clipboard.write_text(text)
        except ClipboardFailure as e:
            self._logger.error(f"Clipboard text write failed: {e}")
            self._notifier.blocking("Copy failed", str(e))

    # ─── Shortcut ─────────────────────────────────────────────────────────

    def register_saved_shortcut(self) -> bool:
        """Register the shortcut stored in the settings (startup)."""
        if self._config is None or self._hotkeys is None:
            return False
        return self._register_shortcut(self._config.shortcut)

    def apply_shortcut(self, shortcut: str) -> bool:
        """
        Register and persist a shortcut chosen by the user.

        The attempted string is stored and reported even when registration
        fails; there is no rollback to the previous value.

        Returns:
            True if the shortcut was registered.
        """
        shortcut = shortcut.strip()
        if self._config is not None:
            self._config.set_shortcut(shortcut)
        self.shortcut_changed.emit(shortcut)
        return self._register_shortcut(shortcut)

    def _register_shortcut(self, shortcut: str) -> bool:
        if self._hotkeys is None:
            return False
        try:
            self._hotkeys.register(shortcut)
        except ShortcutRegistrationFailure as e:
            self._logger.error(str(e))
            self._notifier.blocking("Shortcut registration failed", str(e))
            return False
        return True
