"""
Tray icon for PrinSp.

The tray is the app's resting place between captures: its menu starts a
capture, opens the settings window or quits, and it doubles as the channel
for passive notifications.
"""

from typing import Callable, Optional

from PySide6.QtCore import QObject, QRect, QTimer, Signal
from PySide6.QtGui import QAction, QColor, QIcon, QPainter, QPen, QPixmap
from PySide6.QtWidgets import QMenu, QSystemTrayIcon

from prinsp.services.logging_service import get_logger


# Time the context menu needs to disappear before the screen is grabbed
MENU_CLOSE_DELAY_MS = 150

ICON_SIZE = 64
ICON_ACCENT = QColor(74, 144, 217)


class TrayService(QObject):
    """
    Owns the QSystemTrayIcon and its menu.

    Signals:
        capture_requested: "Capture" chosen, emitted once the menu is gone.
        settings_requested: "Settings..." chosen or icon double-clicked.
        quit_requested: "Quit" chosen.
    """

    capture_requested = Signal()
    settings_requested = Signal()
    quit_requested = Signal()

    def __init__(self, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._logger = get_logger(__name__)

        self._menu = QMenu()
        self._capture_action = self._add_action("Capture", self._on_capture)
        self._menu.addSeparator()
        self._add_action("Settings...", self.settings_requested.emit)
        self._menu.addSeparator()
        self._add_action("Quit", self.quit_requested.emit)

        self._icon = QSystemTrayIcon(self.create_icon(), None)
        self._icon.setToolTip("PrinSp")
        self._icon.setContextMenu(self._menu)
        self._icon.activated.connect(self._on_activated)

        self._logger.info("Tray icon created")

    @staticmethod
    def create_icon() -> QIcon:
        """Selection-frame glyph: four corner brackets around a filled square."""
        pixmap = QPixmap(ICON_SIZE, ICON_SIZE)
        pixmap.fill(QColor(0, 0, 0, 0))

        painter = QPainter(pixmap)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        painter.setPen(QPen(QColor(255, 255, 255), 5))

        lo, hi, arm = 8, ICON_SIZE - 8, 16
        for x, dx in ((lo, arm), (hi, -arm)):
            for y, dy in ((lo, arm), (hi, -arm)):
                painter.drawLine(x, y, x + dx, y)
                painter.drawLine(x, y, x, y + dy)

        painter.fillRect(QRect(22, 22, 20, 20), ICON_ACCENT)
        painter.end()
        return QIcon(pixmap)

    def _add_action(self, text: str, handler: Callable[[], None]) -> QAction:
        action = QAction(text, self._menu)
        # triggered carries a bool that the handlers do not take
        action.triggered.connect(lambda _checked=False: handler())
        self._menu.addAction(action)
        return action

    @property
    def capture_action(self) -> QAction:
        return self._capture_action

    def set_shortcut_hint(self, shortcut: str) -> None:
        """Label the capture entry with the active shortcut."""
        self._capture_action.setText(f"Capture ({shortcut})" if shortcut else "Capture")

    def show(self) -> None:
        self._icon.show()

    def hide(self) -> None:
        self._icon.hide()

    def show_message(
        self,
        title: str,
        message: str,
        icon: QSystemTrayIcon.MessageIcon = QSystemTrayIcon.MessageIcon.Information,
        duration_ms: int = 3000
    ) -> None:
        """Pop a balloon notification next to the tray icon."""
        self._icon.showMessage(title, message, icon, duration_ms)

    def _on_activated(self, reason: QSystemTrayIcon.ActivationReason) -> None:
        if reason == QSystemTrayIcon.ActivationReason.DoubleClick:
            self.settings_requested.emit()

    def _on_capture(self) -> None:
        self._logger.info("Capture chosen from tray menu")
        QTimer.singleShot(MENU_CLOSE_DELAY_MS, self.capture_requested.emit)
