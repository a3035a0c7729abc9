"""
Capture service for PrinSp.

Grabs the raw screen raster that the whole editing session works on. The
raster is captured exactly once per session; cropping to the user's
Selection later is local geometry on this image, never a second grab.

Three backends are tried in order until one yields an image:

- ``qt``: QScreen.grabWindow(0) on the screen under the cursor
- ``grim``: ``grim -`` writing PNG to stdout (wlroots Wayland compositors)
- ``gnome-screenshot``: ``gnome-screenshot -f <file>`` (GNOME Wayland)

On a Wayland session grim goes first, since Qt grabs there are usually
black or empty. The backend that succeeded is remembered and tried first
on the next capture. Stitching several monitors together is out of scope.
"""

import os
import subprocess
import tempfile
from pathlib import Path
from typing import Callable, Dict, List, Optional

from PySide6.QtCore import QPoint
from PySide6.QtGui import QCursor, QGuiApplication, QImage, QScreen

from prinsp.core.errors import CaptureFailure
from prinsp.services.logging_service import get_logger


BACKEND_QT = "qt"
BACKEND_GRIM = "grim"
BACKEND_GNOME = "gnome-screenshot"

# Seconds an external capture tool may run
EXTERNAL_TIMEOUT_S = 2


def is_wayland_session() -> bool:
    return bool(os.environ.get("WAYLAND_DISPLAY"))


class CaptureService:
    """Screen grabber with a Qt grab and external-tool fallbacks."""

    def __init__(self) -> None:
        self._logger = get_logger(__name__)
        self._preferred: Optional[str] = None
        self._backends: Dict[str, Callable[[], QImage]] = {
            BACKEND_QT: self._grab_with_qt,
            BACKEND_GRIM: self._grab_with_grim,
            BACKEND_GNOME: self._grab_with_gnome_screenshot,
        }

    @property
    def preferred_backend(self) -> Optional[str]:
        """Backend that produced the last successful capture."""
        return self._preferred

    def backend_order(self) -> List[str]:
        if is_wayland_session():
            order = [BACKEND_GRIM, BACKEND_QT, BACKEND_GNOME]
        else:
            order = [BACKEND_QT, BACKEND_GRIM, BACKEND_GNOME]

        if self._preferred in order:
            order.remove(self._preferred)
            order.insert(0, self._preferred)
        return order

    def capture_full_screen(self) -> QImage:
        """
        Capture the whole screen at its native pixel size.

        Returns:
            The captured raster.

        Raises:
            CaptureFailure: If every backend fails; carries the last error.
        """
        last_error = "No capture backend available"
        for name in self.backend_order():
            try:
                image = self._backends[name]()
            except CaptureFailure as e:
                self._logger.warning(f"Capture backend {name} failed: {e}")
                last_error = str(e)
                continue

            self._preferred = name
            self._logger.info(
                f"Screen captured with {name}: {image.width()}x{image.height()}"
            )
            return image

        raise CaptureFailure(last_error)

    def _target_screen(self) -> Optional[QScreen]:
        """Screen containing the cursor, or the primary screen."""
        cursor_pos: QPoint = QCursor.pos()
        screen = QGuiApplication.screenAt(cursor_pos)
        if screen is not None:
            self._logger.debug(f"Cursor is on screen: {screen.name()}")
            return screen

        screen = QGuiApplication.primaryScreen()
        if screen is not None:
            self._logger.warning(
                f"Could not find cursor screen, using primary: {screen.name()}"
            )
        return screen

    def _grab_with_qt(self) -> QImage:
        screen = self._target_screen()
        if screen is None:
            raise CaptureFailure("qt: no screen available")

        # grabWindow(0) is the whole screen rather than one window
        image = screen.grabWindow(0).toImage()
        if image.isNull():
            raise CaptureFailure(f"qt: grab of {screen.name()} returned an empty image")
        return image

    def _run_tool(self, args: List[str]) -> bytes:
        """Run an external capture tool and return its stdout."""
        name = args[0]
        try:
            result = subprocess.run(
                args,
                capture_output=True,
                timeout=EXTERNAL_TIMEOUT_S,
                check=True,
            )
        except FileNotFoundError:
            raise CaptureFailure(f"{name}: not installed")
        except subprocess.TimeoutExpired:
            raise CaptureFailure(f"{name}: timed out after {EXTERNAL_TIMEOUT_S}s")
        except subprocess.CalledProcessError as e:
            stderr = (e.stderr or b"").decode(errors="replace").strip()
            raise CaptureFailure(f"{name}: {stderr or f'exit status {e.returncode}'}")
        return result.stdout

    @staticmethod
    def _load_png(name: str, data: bytes) -> QImage:
        image = QImage.fromData(data)
        if image.isNull():
            raise CaptureFailure(f"{name}: output is not a readable image")
        return image

    def _grab_with_grim(self) -> QImage:
        return self._load_png(BACKEND_GRIM, self._run_tool([BACKEND_GRIM, "-"]))

    def _grab_with_gnome_screenshot(self) -> QImage:
        with tempfile.TemporaryDirectory(prefix="prinsp-") as tmp_dir:
            path = Path(tmp_dir) / "screenshot.png"
            self._run_tool([BACKEND_GNOME, "-f", str(path)])
            try:
                data = path.read_bytes()
            except OSError as e:
                raise CaptureFailure(f"{BACKEND_GNOME}: could not read output: {e}")
        return self._load_png(BACKEND_GNOME, data)
