"""
User notifications for PrinSp.

Two levels:
- blocking: a modal message box the user has to dismiss
- passive: a tray balloon (falls back to the log when there is no tray)
"""

from typing import Optional

from PySide6.QtWidgets import QMessageBox, QSystemTrayIcon

from prinsp.services.logging_service import get_logger


class NotificationService:
    """Shows error notices to the user."""

    def __init__(self, tray=None) -> None:
        self._logger = get_logger(__name__)
        self._tray = tray

    def set_tray(self, tray) -> None:
        self._tray = tray

    def blocking(self, title: str, message: str) -> None:
        self._logger.debug(f"Blocking notice: {title}")
        QMessageBox.warning(None, f"PrinSp - {title}", message)

    def passive(self, title: str, message: str, tray_icon: Optional[QSystemTrayIcon.MessageIcon] = None) -> None:
        if self._tray is None:
            self._logger.warning(f"{title}: {message}")
            return
        self._tray.show_message(
            title,
            message,
            tray_icon or QSystemTrayIcon.MessageIcon.Warning,
        )
