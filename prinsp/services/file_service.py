"""
File sink for PrinSp.

Asks the user where to save the composite and writes it as an image file.
"""

from datetime import datetime
from pathlib import Path
from typing import Optional

from PySide6.QtGui import QImage
from PySide6.QtWidgets import QFileDialog, QWidget

from prinsp.core.errors import SaveFailure
from prinsp.services.logging_service import get_logger


PNG_FILTER = "PNG Image (*.png)"
DEFAULT_SAVE_DIR = Path.home() / "Pictures"


def default_file_name(now: Optional[datetime] = None) -> str:
    """Timestamped default name, e.g. prinsp_20240131_154501.png"""
    now = now or datetime.now()
    return f"prinsp_{now.strftime('%Y%m%d_%H%M%S')}.png"


class FileService:
    """Save-path prompt and image writer."""

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        self._logger = get_logger(__name__)
        self._parent = parent

    def set_dialog_parent(self, parent: Optional[QWidget]) -> None:
        """Parent widget for the save dialog."""
        self._parent = parent

    def prompt_save_path(self, default_name: str, file_filter: str = PNG_FILTER) -> Optional[str]:
        """
        Show a save dialog.

        Args:
            default_name: File name suggested to the user.
            file_filter: Qt name filter for the dialog.

        Returns:
            The chosen path, or None if the user cancelled.
        """
        start_dir = DEFAULT_SAVE_DIR if DEFAULT_SAVE_DIR.is_dir() else Path.home()
        file_path, _ = QFileDialog.getSaveFileName(
            self._parent,
            "Save Screenshot",
            str(start_dir / default_name),
            file_filter,
        )
        if not file_path:
            self._logger.info("Save cancelled by user")
            return None
        return file_path

    def write_file(self, image: QImage, path: str) -> None:
        """
        Write an image to disk. A missing suffix defaults to .png.

        Raises:
            SaveFailure: If the image could not be written.
        """
        target = Path(path)
        if not target.suffix:
            target = target.with_suffix(".png")

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise SaveFailure(f"Could not create folder {target.parent}: {e}") from e

        if not image.save(str(target)):
            raise SaveFailure(f"Could not write {target}")

        self._logger.info(f"Screenshot saved to: {target}")
