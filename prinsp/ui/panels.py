"""
Floating panels shown over the frozen screenshot.

- ToolPanel: tool buttons, style controls, history and export actions
- ResultPanel: OCR output with a copy button

Both panels have fixed sizes so the LayoutEngine can place them before
they are shown.
"""

from typing import Dict, Optional

from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QColor
from PySide6.QtWidgets import (
    QButtonGroup,
    QColorDialog,
    QFrame,
    QHBoxLayout,
    QLabel,
    QPlainTextEdit,
    QPushButton,
    QSpinBox,
    QToolButton,
    QVBoxLayout,
    QWidget,
)

from prinsp.core.layout_engine import (
    RESULT_PANEL_HEIGHT,
    RESULT_PANEL_WIDTH,
    TOOL_PANEL_HEIGHT,
    TOOL_PANEL_WIDTH,
)
from prinsp.editor.annotations import DEFAULT_COLOR, DEFAULT_LINE_WIDTH
from prinsp.editor.renderer import DEFAULT_FONT_SIZE
from prinsp.editor.tools import ToolType


PANEL_STYLE = """
    QFrame#panel {
        background-color: #2a2a2a;
        border: 1px solid #3a3a3a;
        border-radius: 8px;
    }
    QToolButton {
        background-color: transparent;
        color: #dcdcdc;
        border: none;
        border-radius: 6px;
        padding: 4px 6px;
        min-height: 28px;
    }
    QToolButton:hover {
        background-color: rgba(255, 255, 255, 0.1);
    }
    QToolButton:pressed {
        background-color: rgba(255, 255, 255, 0.15);
    }
    QToolButton:checked {
        background-color: rgba(74, 144, 226, 0.3);
    }
    QToolButton:disabled {
        color: #666;
    }
    QSpinBox {
        background-color: #3a3a3a;
        color: #dcdcdc;
        border: 1px solid #555;
        border-radius: 4px;
        padding: 2px;
    }
    QPlainTextEdit {
        background-color: #232323;
        color: #dcdcdc;
        border: 1px solid #3a3a3a;
        border-radius: 4px;
    }
    QLabel {
        color: #dcdcdc;
    }
"""

# (tool, label, tooltip)
TOOL_BUTTONS = [
    (ToolType.SELECT, "Select", "Re-select region"),
    (ToolType.RECT, "Rect", "Rectangle"),
    (ToolType.ARROW, "Arrow", "Arrow"),
    (ToolType.TEXT, "Text", "Text"),
    (ToolType.MOSAIC, "Mosaic", "Mosaic"),
]


class ColorButton(QPushButton):
    """Button that shows a color and opens color picker on click."""

    color_changed = Signal(str)

    def __init__(self, color: str = DEFAULT_COLOR, parent=None):
        super().__init__(parent)
        self._color = QColor(color)
        self.setFixedSize(24, 24)
        self.setToolTip("Color")
        self.clicked.connect(self._on_click)
        self._update_style()

    @property
    def color(self) -> str:
        return self._color.name()

    def set_color(self, color: str) -> None:
        self._color = QColor(color)
        self._update_style()

    def _update_style(self) -> None:
        self.setStyleSheet(f"""
            QPushButton {{
                background-color: {self._color.name()};
                border: 2px solid #555;
                border-radius: 4px;
            }}
            QPushButton:hover {{
                border-color: #888;
            }}
        """)

    def _on_click(self) -> None:
        color = QColorDialog.getColor(self._color, self, "Select Color")
        if color.isValid():
            self._color = color
            self._update_style()
            self.color_changed.emit(color.name())


class ToolPanel(QFrame):
    """
    Horizontal tool strip.

    Signals:
        tool_selected: ToolType chosen by the user.
        color_changed: Hex color string.
        line_width_changed: Stroke width in pixels.
        font_size_changed: Text size in pixels.
        undo_requested, redo_requested, clear_requested,
        ocr_requested, save_requested, confirm_requested,
        cancel_requested: Button clicks.
    """

    tool_selected = Signal(object)
    color_changed = Signal(str)
    line_width_changed = Signal(int)
    font_size_changed = Signal(int)
    undo_requested = Signal()
    redo_requested = Signal()
    clear_requested = Signal()
    ocr_requested = Signal()
    save_requested = Signal()
    confirm_requested = Signal()
    cancel_requested = Signal()

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setObjectName("panel")
        self.setFixedSize(TOOL_PANEL_WIDTH, TOOL_PANEL_HEIGHT)
        self.setStyleSheet(PANEL_STYLE)
        self.setCursor(Qt.CursorShape.ArrowCursor)

        self._tool_buttons: Dict[ToolType, QToolButton] = {}
        self._setup_ui()

    def _setup_ui(self) -> None:
        layout = QHBoxLayout(self)
        layout.setContentsMargins(6, 4, 6, 4)
        layout.setSpacing(2)

        # ─── Tools ────────────────────────────────────────────────────
        self._tool_group = QButtonGroup(self)
        self._tool_group.setExclusive(True)

        for tool_type, label, tooltip in TOOL_BUTTONS:
            btn = QToolButton()
            btn.setText(label)
            btn.setToolTip(tooltip)
            btn.setCheckable(True)
            btn.clicked.connect(lambda checked, t=tool_type: self.tool_selected.emit(t))
            self._tool_group.addButton(btn)
            self._tool_buttons[tool_type] = btn
            layout.addWidget(btn)

        # ─── Style ────────────────────────────────────────────────────
        self._color_btn = ColorButton()
        self._color_btn.color_changed.connect(self.color_changed)
        layout.addWidget(self._color_btn)

        self._width_spin = QSpinBox()
        self._width_spin.setRange(1, 20)
        self._width_spin.setValue(DEFAULT_LINE_WIDTH)
        self._width_spin.setToolTip("Line width")
        self._width_spin.valueChanged.connect(self.line_width_changed)
        layout.addWidget(self._width_spin)

        self._font_spin = QSpinBox()
        self._font_spin.setRange(8, 96)
        self._font_spin.setValue(DEFAULT_FONT_SIZE)
        self._font_spin.setToolTip("Font size")
        self._font_spin.valueChanged.connect(self.font_size_changed)
        layout.addWidget(self._font_spin)

        # ─── History ──────────────────────────────────────────────────
        self._undo_btn = self._action_button("Undo", "Undo (Ctrl+Z)", self.undo_requested)
        self._redo_btn = self._action_button("Redo", "Redo (Ctrl+Shift+Z)", self.redo_requested)
        self._clear_btn = self._action_button("Clear", "Remove all annotations", self.clear_requested)
        for btn in (self._undo_btn, self._redo_btn, self._clear_btn):
            layout.addWidget(btn)

        layout.addStretch()

        # ─── Export ───────────────────────────────────────────────────
        self._ocr_btn = self._action_button("OCR", "Recognize text", self.ocr_requested)
        self._save_btn = self._action_button("Save", "Copy and save (Ctrl+S)", self.save_requested)
        self._cancel_btn = self._action_button("✗", "Cancel (Esc)", self.cancel_requested)
        self._confirm_btn = self._action_button("✓", "Copy to clipboard (Enter)", self.confirm_requested)
        for btn in (self._ocr_btn, self._save_btn, self._cancel_btn, self._confirm_btn):
            layout.addWidget(btn)

        self.set_history_state(False, False)

    def _action_button(self, text: str, tooltip: str, signal) -> QToolButton:
        btn = QToolButton()
        btn.setText(text)
        btn.setToolTip(tooltip)
        btn.clicked.connect(lambda checked=False: signal.emit())
        return btn

    # ─── State Sync ───────────────────────────────────────────────────────

    def set_tool(self, tool_type: ToolType) -> None:
        btn = self._tool_buttons.get(tool_type)
        if btn:
            btn.setChecked(True)

    def set_style(self, color: str, line_width: int, font_size: int) -> None:
        """Show the given style without emitting change signals."""
        self._color_btn.set_color(color)
        for spin, value in ((self._width_spin, line_width), (self._font_spin, font_size)):
            spin.blockSignals(True)
            spin.setValue(value)
            spin.blockSignals(False)

    def set_history_state(self, can_undo: bool, can_redo: bool) -> None:
        self._undo_btn.setEnabled(can_undo)
        self._redo_btn.setEnabled(can_redo)
        self._clear_btn.setEnabled(can_undo)

    def set_ocr_busy(self, busy: bool) -> None:
        self._ocr_btn.setEnabled(not busy)


class ResultPanel(QFrame):
    """
    Read-only OCR result view.

    Signals:
        copy_requested: The user asked to copy the text again.
    """

    copy_requested = Signal()

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setObjectName("panel")
        self.setFixedSize(RESULT_PANEL_WIDTH, RESULT_PANEL_HEIGHT)
        self.setStyleSheet(PANEL_STYLE)
        self.setCursor(Qt.CursorShape.ArrowCursor)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(8, 6, 8, 8)
        layout.setSpacing(4)

        header = QHBoxLayout()
        title = QLabel("Recognized text")
        title.setStyleSheet("font-weight: bold;")
        header.addWidget(title)
        header.addStretch()

        self._copy_btn = QToolButton()
        self._copy_btn.setText("Copy")
        self._copy_btn.setToolTip("Copy text to clipboard")
        self._copy_btn.clicked.connect(lambda checked=False: self.copy_requested.emit())
        header.addWidget(self._copy_btn)

        close_btn = QToolButton()
        close_btn.setText("✗")
        close_btn.setToolTip("Hide")
        close_btn.clicked.connect(lambda checked=False: self.hide())
        header.addWidget(close_btn)
        layout.addLayout(header)

        self._text = QPlainTextEdit()
        self._text.setReadOnly(True)
        layout.addWidget(self._text, 1)

    @property
    def text(self) -> str:
        return self._text.toPlainText()

    def show_pending(self) -> None:
        self._text.setPlainText("Recognizing...")
        self._copy_btn.setEnabled(False)

    def show_text(self, text: str) -> None:
        self._text.setPlainText(text)
        self._copy_btn.setEnabled(True)
