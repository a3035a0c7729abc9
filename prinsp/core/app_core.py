"""
Application core for PrinSp.

This module contains the AppCore class which is responsible for:
- Initializing all services (config, capture, clipboard, files, OCR, hotkeys)
- Creating the main window, the capture overlay and the tray icon
- Applying global styling (dark theme)
- Wiring everything to the FlowController

This is the central orchestration point for the application.
"""

from typing import Optional

from PySide6.QtCore import QObject, Slot
from PySide6.QtGui import QColor, QPalette
from PySide6.QtWidgets import QApplication

from prinsp.core.capture_service import CaptureService
from prinsp.core.flow_controller import FlowController
from prinsp.core.hotkey_service import HotkeyService
from prinsp.core.selection_overlay import SelectionOverlay
from prinsp.core.tray_service import TrayService
from prinsp.services.clipboard_service import ClipboardService
from prinsp.services.config_service import ConfigService
from prinsp.services.file_service import FileService
from prinsp.services.logging_service import get_logger, setup_logging
from prinsp.services.notification_service import NotificationService
from prinsp.services.ocr_service import OcrService
from prinsp.ui.main_window import MainWindow


class AppCore(QObject):
    """
    Central application core that wires together all components.

    The capture flow:
    1. User triggers capture (global shortcut, tray menu or main window)
    2. FlowController hides the main window and grabs the screen
    3. SelectionOverlay shows the frozen screenshot for selection and
       annotation
    4. Confirm copies (and optionally saves) the composite; the main
       window comes back
    """

    def __init__(self, app: QApplication) -> None:
        super().__init__()
        self._app = app

        self._config_service: Optional[ConfigService] = None
        self._tray_service: Optional[TrayService] = None
        self._hotkey_service: Optional[HotkeyService] = None
        self._main_window: Optional[MainWindow] = None
        self._controller: Optional[FlowController] = None
        self._overlay: Optional[SelectionOverlay] = None

        self._init_services()
        self._apply_dark_theme()
        self._init_ui()
        self._init_tray()
        self._init_flow()
        self._connect_signals()
        self._init_hotkeys()

    def _init_services(self) -> None:
        """Initialize all application services."""
        setup_logging()
        self._logger = get_logger(__name__)
        self._logger.info("Initializing PrinSp application core...")

        self._config_service = ConfigService()
        self._capture_service = CaptureService()
        self._clipboard_service = ClipboardService()
        self._file_service = FileService()
        self._ocr_service = OcrService(self)
        self._notification_service = NotificationService()
        self._hotkey_service = HotkeyService(self)

    def _apply_dark_theme(self) -> None:
        """Apply a dark color palette to the application."""
        self._logger.debug("Applying dark theme...")

        palette = QPalette()

        palette.setColor(QPalette.ColorRole.Window, QColor(45, 45, 45))
        palette.setColor(QPalette.ColorRole.WindowText, QColor(220, 220, 220))
        palette.setColor(QPalette.ColorRole.Base, QColor(35, 35, 35))
        palette.setColor(QPalette.ColorRole.AlternateBase, QColor(50, 50, 50))
        palette.setColor(QPalette.ColorRole.Text, QColor(220, 220, 220))
        palette.setColor(QPalette.ColorRole.BrightText, QColor(255, 255, 255))
        palette.setColor(QPalette.ColorRole.Button, QColor(55, 55, 55))
        palette.setColor(QPalette.ColorRole.ButtonText, QColor(220, 220, 220))
        palette.setColor(QPalette.ColorRole.Highlight, QColor(80, 120, 180))
        palette.setColor(QPalette.ColorRole.HighlightedText, QColor(255, 255, 255))
        palette.setColor(QPalette.ColorRole.ToolTipBase, QColor(60, 60, 60))
        palette.setColor(QPalette.ColorRole.ToolTipText, QColor(220, 220, 220))

        for role in (
            QPalette.ColorRole.WindowText,
            QPalette.ColorRole.Text,
            QPalette.ColorRole.ButtonText,
        ):
            palette.setColor(QPalette.ColorGroup.Disabled, role, QColor(127, 127, 127))

        self._app.setPalette(palette)
        self._app.setStyleSheet("""
            QToolTip {
                background-color: #3d3d3d;
                color: #dcdcdc;
                border: 1px solid #5a5a5a;
                padding: 4px;
            }
            QMenu {
                background-color: #2d2d2d;
                border: 1px solid #3a3a3a;
            }
            QMenu::item {
                padding: 6px 20px;
            }
            QMenu::item:selected {
                background-color: #4a6a9a;
            }
        """)

        self._logger.info("Dark theme applied")

    def _init_ui(self) -> None:
        self._main_window = MainWindow(self._config_service.shortcut)
        self._main_window.setWindowIcon(TrayService.create_icon())
        # Save dialog opens over the restored main window
        self._file_service.set_dialog_parent(self._main_window)

    def _init_tray(self) -> None:
        self._tray_service = TrayService(self)
        self._tray_service.set_shortcut_hint(self._config_service.shortcut)
        self._tray_service.show()
        self._notification_service.set_tray(self._tray_service)

    def _init_flow(self) -> None:
        self._controller = FlowController(
            capture=self._capture_service,
            clipboard=self._clipboard_service,
            files=self._file_service,
            ocr=self._ocr_service,
            window=self._main_window,
            notifier=self._notification_service,
            hotkeys=self._hotkey_service,
            config=self._config_service,
            parent=self,
        )
        self._overlay = SelectionOverlay(self._controller)

    def _init_hotkeys(self) -> None:
        """Register the saved global shortcut (failures are reported, not fatal)."""
        if self._controller.register_saved_shortcut():
            self._logger.info("Global shortcut active")

    def _connect_signals(self) -> None:
        controller = self._controller

        self._tray_service.capture_requested.connect(controller.start_capture)
        self._tray_service.settings_requested.connect(self._main_window.restore_and_show_normal)
        self._tray_service.quit_requested.connect(self._on_quit_requested)

        self._hotkey_service.triggered.connect(controller.start_capture)

        self._main_window.capture_requested.connect(controller.start_capture)
        self._main_window.shortcut_apply_requested.connect(controller.apply_shortcut)

        self._ocr_service.finished.connect(controller.on_ocr_finished)
        self._ocr_service.failed.connect(controller.on_ocr_failed)

        controller.shortcut_changed.connect(self._on_shortcut_changed)

        self._logger.debug("All signals connected")

    # ─── Handlers ─────────────────────────────────────────────────────────

    @Slot(str)
    def _on_shortcut_changed(self, shortcut: str) -> None:
        self._main_window.set_shortcut(shortcut)
        self._tray_service.set_shortcut_hint(shortcut)

    def show(self) -> None:
        """Show the main window (startup)."""
        self._main_window.show()

    # ─── Application Lifecycle ────────────────────────────────────────────

    @Slot()
    def _on_quit_requested(self) -> None:
        self._logger.info("Quit requested, shutting down...")
        self.shutdown()

    def shutdown(self) -> None:
        """Clean shutdown of all services."""
        self._logger.info("Shutting down PrinSp...")

        if self._controller:
            self._controller.cancel()
        if self._hotkey_service:
            self._hotkey_service.stop()
        if self._tray_service:
            self._tray_service.hide()

        QApplication.quit()

    # ─── Properties ───────────────────────────────────────────────────────

    @property
    def config(self) -> ConfigService:
        if self._config_service is None:
            raise RuntimeError("ConfigService not initialized")
        return self._config_service

    @property
    def controller(self) -> FlowController:
        if self._controller is None:
            raise RuntimeError("FlowController not initialized")
        return self._controller

    @property
    def tray(self) -> Optional[TrayService]:
        return self._tray_service
