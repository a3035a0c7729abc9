"""
Command-line entry point: ``prinsp`` or ``python -m prinsp.app``.

Sets up logging, makes sure only one PrinSp runs per user, then hands
control to AppCore and the Qt event loop.
"""

import fcntl
import os
import signal
import sys
from pathlib import Path
from typing import Optional

from PySide6.QtCore import QTimer
from PySide6.QtWidgets import QApplication

from prinsp import __version__
from prinsp.core.app_core import AppCore
from prinsp.services.logging_service import get_logger, setup_logging


LOCK_FILE = Path.home() / ".cache" / "prinsp" / "prinsp.lock"

# How often the event loop looks for a pending SIGINT/SIGTERM
SIGNAL_POLL_MS = 100


class InstanceLock:
    """
    Per-user single-instance guard built on an exclusive flock.

    The lock lives as long as the descriptor stays open, so the holder
    keeps this object alive for the whole process.
    """

    def __init__(self, path: Path = LOCK_FILE) -> None:
        self.path = path
        self._fd: Optional[int] = None

    @property
    def held(self) -> bool:
        return self._fd is not None

    def acquire(self) -> bool:
        """Take the lock; False when another process holds it."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(str(self.path), os.O_CREAT | os.O_RDWR)
        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except OSError:
            os.close(fd)
            return False

        os.ftruncate(fd, 0)
        os.write(fd, str(os.getpid()).encode())
        self._fd = fd
        return True

    def release(self) -> None:
        if self._fd is None:
            return
        fcntl.flock(self._fd, fcntl.LOCK_UN)
        os.close(self._fd)
        self._fd = None


class SignalQuitter:
    """
    Turns SIGINT/SIGTERM into a clean Qt shutdown.

    Python only runs signal handlers between bytecodes, which never happens
    while Qt sits in its C++ loop; a timer gives it that chance.
    """

    def __init__(self, app_core: AppCore) -> None:
        self._app_core = app_core
        self.pending = False

        self._timer = QTimer()
        self._timer.timeout.connect(self.poll)

    def install(self) -> None:
        signal.signal(signal.SIGINT, self.on_signal)
        signal.signal(signal.SIGTERM, self.on_signal)
        self._timer.start(SIGNAL_POLL_MS)

    def on_signal(self, signum, frame) -> None:
        self.pending = True

    def poll(self) -> None:
        if not self.pending:
            return
        get_logger(__name__).info("Termination signal received, shutting down")
        self._timer.stop()
        self._app_core.shutdown()


def main() -> int:
    """Run PrinSp; returns the process exit code."""
    setup_logging()
    logger = get_logger(__name__)

    lock = InstanceLock()
    if not lock.acquire():
        logger.warning(f"PrinSp already running (lock held on {lock.path})")
        print("PrinSp is already running; look for it in the system tray.")
        return 1

    try:
        app = QApplication(sys.argv)
        app.setApplicationName("PrinSp")
        app.setOrganizationName("PrinSp")
        app.setApplicationVersion(__version__)
        # Hiding the last window leaves the tray running
        app.setQuitOnLastWindowClosed(False)

        app_core = AppCore(app)
        quitter = SignalQuitter(app_core)
        quitter.install()
        app_core.show()

        logger.info(f"PrinSp {__version__} ready")
        exit_code = app.exec()
        logger.info(f"Event loop finished with code {exit_code}")
        return exit_code
    except Exception as e:
        logger.critical(f"PrinSp failed to start: {e}", exc_info=True)
        return 1
    finally:
        lock.release()


if __name__ == "__main__":
    sys.exit(main())
