"""
Clipboard sink for PrinSp.

Writes the final composite image, or recognized OCR text, to the system
clipboard through Qt.
"""

from typing import Optional

from PySide6.QtGui import QClipboard, QGuiApplication, QImage

from prinsp.core.errors import ClipboardFailure
from prinsp.services.logging_service import get_logger


class ClipboardService:
    """Thin wrapper around QGuiApplication.clipboard() that raises on failure."""

    def __init__(self) -> None:
        self._logger = get_logger(__name__)

    def _clipboard(self) -> QClipboard:
        clipboard: Optional[QClipboard] = QGuiApplication.clipboard()
        if clipboard is None:
            raise ClipboardFailure("Clipboard not available")
        return clipboard

    def write_image(self, image: QImage) -> None:
        """
        Put an image on the clipboard.

        Raises:
            ClipboardFailure: If the image is empty or no clipboard exists.
        """
        if image is None or image.isNull():
            raise ClipboardFailure("Nothing to copy: the image is empty")

        self._clipboard().setImage(image)
        self._logger.info(f"Image copied to clipboard: {image.width()}x{image.height()}")

    def write_text(self, text: str) -> None:
        """
        Put plain text on the clipboard.

        Raises:
            ClipboardFailure: If no clipboard exists.
        """
        self._clipboard().setText(text)
        self._logger.info(f"Text copied to clipboard ({len(text)} chars)")
