"""
Main window for PrinSp.

A small launcher and settings window: a capture button and the global
shortcut field. It is hidden while a capture runs and restored when the
capture flow ends. Closing it only hides it; PrinSp keeps running in the
tray.
"""

from typing import Optional

from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import (
    QFormLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QMainWindow,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from prinsp.services.logging_service import get_logger


class MainWindow(QMainWindow):
    """
    Main application window for PrinSp.

    Signals:
        capture_requested: The user clicked "Capture".
        shortcut_apply_requested: Emitted with the shortcut string to apply.
    """

    capture_requested = Signal()
    shortcut_apply_requested = Signal(str)

    def __init__(self, shortcut: str = "", parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._logger = get_logger(__name__)

        self._setup_window()
        self._setup_central_widget()
        self.set_shortcut(shortcut)

        self._logger.info("MainWindow initialized")

    def _setup_window(self) -> None:
        self.setWindowTitle("PrinSp - Screenshot & Annotation Tool")
        self.setMinimumSize(420, 200)
        self.resize(460, 220)

    def _setup_central_widget(self) -> None:
        central = QWidget(self)
        layout = QVBoxLayout(central)
        layout.setContentsMargins(16, 16, 16, 16)
        layout.setSpacing(12)

        self._capture_btn = QPushButton("Capture")
        self._capture_btn.setMinimumHeight(36)
        self._capture_btn.clicked.connect(lambda checked=False: self.capture_requested.emit())
        layout.addWidget(self._capture_btn)

        form = QFormLayout()
        shortcut_row = QHBoxLayout()
        self._shortcut_edit = QLineEdit()
        self._shortcut_edit.setPlaceholderText("e.g. Ctrl+Shift+A")
        self._shortcut_edit.returnPressed.connect(self._on_apply)
        shortcut_row.addWidget(self._shortcut_edit, 1)

        apply_btn = QPushButton("Apply")
        apply_btn.clicked.connect(lambda checked=False: self._on_apply())
        shortcut_row.addWidget(apply_btn)
        form.addRow("Capture shortcut:", shortcut_row)
        layout.addLayout(form)

        self._status = QLabel()
        self._status.setStyleSheet("color: #9a9a9a;")
        layout.addWidget(self._status)
        layout.addStretch()

        self.setCentralWidget(central)

    # ─── Public Methods ───────────────────────────────────────────────────

    @property
    def shortcut_text(self) -> str:
        return self._shortcut_edit.text()

    def set_shortcut(self, shortcut: str) -> None:
        """Show the shortcut string (also after a failed registration)."""
        self._shortcut_edit.setText(shortcut)
        self._status.setText(f"Press {shortcut} anywhere to capture" if shortcut else "")

    def restore_and_show_normal(self) -> None:
        """Bring the window back after a capture, un-minimized and focused."""
        self.setWindowState(self.windowState() & ~Qt.WindowState.WindowMinimized)
        self.showNormal()
        self.raise_()
        self.activateWindow()

    def _on_apply(self) -> None:
        shortcut = self._shortcut_edit.text().strip()
        if not shortcut:
            return
        self._logger.info(f"Shortcut change requested: {shortcut}")
        self.shortcut_apply_requested.emit(shortcut)

    def closeEvent(self, event) -> None:
        """Hide instead of quitting (the app stays in the tray)."""
        self._logger.info("MainWindow hidden to tray")
        self.hide()
        event.ignore()
