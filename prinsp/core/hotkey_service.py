"""
Global hotkey service for PrinSp.

Registers the capture shortcut system-wide using a pynput keyboard
listener (X11). The shortcut fires even when no PrinSp window has focus.

Shortcut strings are modifier/key tokens joined by '+', e.g. "Ctrl+Shift+A".
Tokens are trimmed and lowercased before parsing, so " ctrl + SHIFT + a "
is the same shortcut.
"""

import threading
from typing import FrozenSet, List, Optional, Set

from PySide6.QtCore import QMetaObject, QObject, Qt, Signal, Slot

from prinsp.core.errors import ShortcutRegistrationFailure
from prinsp.services.logging_service import get_logger

# pynput needs a running display server; without it global hotkeys are
# unavailable and registration reports a failure
try:
    from pynput import keyboard
    PYNPUT_AVAILABLE = True
except ImportError:
    PYNPUT_AVAILABLE = False


MODIFIER_ALIASES = {
    "ctrl": "ctrl",
    "control": "ctrl",
    "shift": "shift",
    "alt": "alt",
    "option": "alt",
    "super": "cmd",
    "win": "cmd",
    "cmd": "cmd",
    "meta": "cmd",
    "commandorcontrol": "ctrl",
}

NAMED_KEYS = {
    "space", "enter", "tab", "esc", "backspace", "delete", "insert",
    "home", "end", "page_up", "page_down", "up", "down", "left", "right",
    "print_screen",
} | {f"f{i}" for i in range(1, 13)}

KEY_ALIASES = {
    "escape": "esc",
    "return": "enter",
    "del": "delete",
    "pageup": "page_up",
    "pagedown": "page_down",
    "printscreen": "print_screen",
    "print": "print_screen",
}


def normalize_shortcut(shortcut: str) -> str:
    """Trim and lowercase every '+'-separated token."""
    return "+".join(part.strip().lower() for part in shortcut.split("+"))


def split_shortcut(shortcut: str) -> List[str]:
    """
    Split and validate a shortcut string into canonical tokens.

    Args:
        shortcut: e.g. "Ctrl+Shift+A".

    Returns:
        Canonical tokens, modifiers first, e.g. ["ctrl", "shift", "a"].

    Raises:
        ShortcutRegistrationFailure: On empty or unknown tokens, or when
            the shortcut has no (or more than one) non-modifier key.
    """
    modifiers: List[str] = []
    keys: List[str] = []

    for token in normalize_shortcut(shortcut).split("+"):
        if not token:
            raise ShortcutRegistrationFailure(shortcut, "empty key in shortcut")
        if token in MODIFIER_ALIASES:
            canonical = MODIFIER_ALIASES[token]
            if canonical not in modifiers:
                modifiers.append(canonical)
            continue

        token = KEY_ALIASES.get(token, token)
        if len(token) == 1 or token in NAMED_KEYS:
            keys.append(token)
        else:
            raise ShortcutRegistrationFailure(shortcut, f"unknown key '{token}'")

    if len(keys) != 1:
        raise ShortcutRegistrationFailure(
            shortcut, "a shortcut needs exactly one non-modifier key"
        )
    return modifiers + keys


class HotkeyService(QObject):
    """
    Global shortcut registration and handling.

    Key events arrive on pynput's listener thread; matches are forwarded to
    the GUI thread with a queued QMetaObject.invokeMethod call.

    Signals:
        triggered: Emitted on the GUI thread when the shortcut is pressed.
    """

    triggered = Signal()

    def __init__(self, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._logger = get_logger(__name__)

        self._listener = None
        self._current_keys: Set = set()
        self._combo: Optional[FrozenSet] = None
        self._shortcut: Optional[str] = None
        self._lock = threading.Lock()

    @property
    def shortcut(self) -> Optional[str]:
        """The currently bound shortcut string (as the user typed it)."""
        return self._shortcut

    # ─── Registration ─────────────────────────────────────────────────────

    def _to_pynput_key(self, token: str):
        if token == "ctrl":
            return keyboard.Key.ctrl_l
        if token == "shift":
            return keyboard.Key.shift_l
        if token == "alt":
            return keyboard.Key.alt_l
        if token == "cmd":
            return keyboard.Key.cmd
        if len(token) == 1:
            return keyboard.KeyCode.from_char(token)
        return getattr(keyboard.Key, token)

    def register(self, shortcut: str) -> None:
        """
        Bind a new global shortcut, replacing the previous one.

        The new combination is parsed completely before anything changes,
        so a failed registration leaves the old binding active.

        Raises:
            ShortcutRegistrationFailure: If the string is invalid or global
                hotkeys are unavailable.
        """
        tokens = split_shortcut(shortcut)

        if not PYNPUT_AVAILABLE:
            raise ShortcutRegistrationFailure(
                shortcut, "global hotkeys are unavailable (pynput could not be loaded)"
            )

        try:
            combo = frozenset(self._to_pynput_key(token) for token in tokens)
        except AttributeError as e:
            raise ShortcutRegistrationFailure(shortcut, f"key not supported: {e}") from e

        with self._lock:
            self._combo = combo
            self._shortcut = shortcut
            self._current_keys.clear()

        self._start_listener()
        self._logger.info(f"Global shortcut registered: {normalize_shortcut(shortcut)}")

    def _start_listener(self) -> None:
        """Start the keyboard listener thread if it is not running yet."""
        if self._listener is not None:
            return

        try:
            self._listener = keyboard.Listener(
                on_press=self._on_key_press,
                on_release=self._on_key_release
            )
            self._listener.daemon = True
            self._listener.start()
        except Exception as e:
            self._listener = None
            raise ShortcutRegistrationFailure(
                self._shortcut or "", f"keyboard listener failed to start: {e}"
            ) from e

        self._logger.debug("Global hotkey listener started")

    # ─── Listener Thread ──────────────────────────────────────────────────

    def _normalize_key(self, key):
        """Map right-hand modifiers to their left variants and letters to lowercase."""
        modifier_map = {
            keyboard.Key.ctrl_r: keyboard.Key.ctrl_l,
            keyboard.Key.ctrl: keyboard.Key.ctrl_l,
            keyboard.Key.shift_r: keyboard.Key.shift_l,
            keyboard.Key.shift: keyboard.Key.shift_l,
            keyboard.Key.alt_r: keyboard.Key.alt_l,
            keyboard.Key.alt: keyboard.Key.alt_l,
            keyboard.Key.alt_gr: keyboard.Key.alt_l,
            keyboard.Key.cmd_r: keyboard.Key.cmd,
            keyboard.Key.cmd_l: keyboard.Key.cmd,
        }
        if isinstance(key, keyboard.KeyCode) and key.char:
            return keyboard.KeyCode.from_char(key.char.lower())
        return modifier_map.get(key, key)

    def _on_key_press(self, key) -> None:
        with self._lock:
            self._current_keys.add(self._normalize_key(key))
            matched = self._combo is not None and frozenset(self._current_keys) == self._combo

        if matched:
            self._logger.debug("Global shortcut matched")
            QMetaObject.invokeMethod(
                self,
                "_emit_triggered",
                Qt.ConnectionType.QueuedConnection
            )

    def _on_key_release(self, key) -> None:
        with self._lock:
            self._current_keys.discard(self._normalize_key(key))

    @Slot()
    def _emit_triggered(self) -> None:
        self.triggered.emit()

    def stop(self) -> None:
        """Stop the hotkey listener."""
        if self._listener:
            self._listener.stop()
            self._listener = None
            self._logger.info("Global hotkey listener stopped")
