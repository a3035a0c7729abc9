"""Tests for the tray menu."""

from PySide6.QtWidgets import QSystemTrayIcon

from prinsp.core.tray_service import TrayService


class TestTrayService:
    """Tests for TrayService signals and labels."""

    def test_shortcut_hint_labels_capture_entry(self, qapp):
        tray = TrayService()

        tray.set_shortcut_hint("ctrl+shift+a")
        assert tray.capture_action.text() == "Capture (ctrl+shift+a)"

        tray.set_shortcut_hint("")
        assert tray.capture_action.text() == "Capture"

    def test_double_click_requests_settings(self, qapp):
        tray = TrayService()
        received = []
        tray.settings_requested.connect(lambda: received.append(True))

        tray._on_activated(QSystemTrayIcon.ActivationReason.DoubleClick)
        tray._on_activated(QSystemTrayIcon.ActivationReason.Trigger)

        assert received == [True]

    def test_icon_is_drawn(self, qapp):
        assert not TrayService.create_icon().isNull()
