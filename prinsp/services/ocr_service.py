"""
OCR service for PrinSp.

Recognizes text in the current composite with Tesseract (via pytesseract).
Recognition runs on the global QThreadPool; results come back to the GUI
thread through Qt signals.

Pipeline:
1. Channel-emphasized grayscale (boosts colored text such as red on white)
2. 2x Lanczos upscale (helps small glyphs)
3. 3x3 median filter (denoise, keeps edges)
4. Otsu binarization
5. Morphological close (reconnects broken strokes)
6. Tesseract, then whitespace cleanup of the raw text
"""

import io
from typing import Dict, List

import numpy as np
import pytesseract
from PIL import Image, ImageFilter
from PySide6.QtCore import QBuffer, QByteArray, QIODevice, QObject, QRunnable, QThreadPool, Signal, Slot
from PySide6.QtGui import QImage

from prinsp.core.errors import OcrFailure
from prinsp.services.logging_service import get_logger


OCR_LANGUAGES = "chi_sim+eng"
OCR_DPI = 350
# psm 7: single text line, oem 1: LSTM only
TESSERACT_CONFIG = (
    f"--oem 1 --psm 7 --dpi {OCR_DPI} "
    "-c preserve_interword_spaces=1 "
    "-c textord_heavy_nr=1 "
    "-c textord_min_linesize=2.5 "
    "-c textord_space_size_is_variable=1 "
    "-c load_system_dawg=F "
    "-c load_freq_dawg=F"
)

TESSERACT_MISSING_HINT = (
    "tesseract not found. Install it first, e.g. "
    "sudo apt install tesseract-ocr tesseract-ocr-chi-sim"
)
LANGUAGE_MISSING_HINT = (
    "Tesseract language data missing. Install tesseract-ocr-chi-sim "
    "and check the TESSDATA_PREFIX setting"
)

logger = get_logger(__name__)


# ─── Image Conversion ─────────────────────────────────────────────────────

def qimage_to_png_bytes(image: QImage) -> bytes:
    """Encode a QImage as PNG bytes."""
    data = QByteArray()
    buffer = QBuffer(data)
    buffer.open(QIODevice.OpenModeFlag.WriteOnly)
    image.save(buffer, "PNG")
    buffer.close()
    return bytes(data.data())


# ─── Preprocessing ────────────────────────────────────────────────────────

def channel_emphasized_gray(rgb: np.ndarray) -> np.ndarray:
    """
    Grayscale conversion that favors the channel with the most contrast.

    Picks the RGB channel with the largest mean absolute deviation, computes
    `c - 0.5 * other1 - 0.5 * other2` and stretches the result to 0-255.

    Args:
        rgb: (H, W, 3) uint8 array.

    Returns:
        (H, W) uint8 array.
    """
    pixels = rgb.astype(np.float32)
    mean = pixels.reshape(-1, 3).mean(axis=0)
    contrast = np.abs(pixels - mean).reshape(-1, 3).sum(axis=0)
    best = int(np.argmax(contrast))

    others = [c for c in range(3) if c != best]
    values = pixels[..., best] - 0.5 * pixels[..., others[0]] - 0.5 * pixels[..., others[1]]

    low = float(values.min())
    span = max(float(values.max()) - low, 1.0)
    stretched = (values - low) / span * 255.0
    return np.clip(stretched, 0, 255).astype(np.uint8)


def otsu_level(gray: np.ndarray) -> int:
    """Otsu threshold of a uint8 image."""
    hist = np.bincount(gray.ravel(), minlength=256).astype(np.float64)
    total = hist.sum()
    if total == 0:
        return 0

    levels = np.arange(256, dtype=np.float64)
    weight_bg = np.cumsum(hist)
    weight_fg = total - weight_bg
    sum_bg = np.cumsum(hist * levels)
    mean_bg = np.divide(sum_bg, weight_bg, out=np.zeros(256), where=weight_bg > 0)
    mean_fg = np.divide(
        sum_bg[-1] - sum_bg, weight_fg, out=np.zeros(256), where=weight_fg > 0
    )
    between = weight_bg * weight_fg * (mean_bg - mean_fg) ** 2
    return int(np.argmax(between))


def preprocess_for_ocr(image: Image.Image) -> Image.Image:
    """Run the preprocessing pipeline and return a binary 'L' image."""
    rgb = np.asarray(image.convert("RGB"))
    gray = Image.fromarray(channel_emphasized_gray(rgb))

    width, height = gray.size
    gray = gray.resize((width * 2, height * 2), Image.Resampling.LANCZOS)
    gray = gray.filter(ImageFilter.MedianFilter(3))

    level = otsu_level(np.asarray(gray))
    binary = gray.point(lambda v: 255 if v > level else 0)

    # Close = dilate then erode
    return binary.filter(ImageFilter.MaxFilter(3)).filter(ImageFilter.MinFilter(3))


# ─── Postprocessing ───────────────────────────────────────────────────────

def postprocess_ocr_text(text: str) -> str:
    """
    Normalize whitespace while keeping paragraph structure.

    - runs of whitespace inside a line collapse to one space
    - consecutive blank lines collapse to one, leading ones are dropped
    - trailing blank lines are removed
    """
    result: List[str] = []
    prev_empty = False

    for line in text.splitlines():
        trimmed = line.strip()
        if not trimmed:
            if not prev_empty and result:
                result.append("")
            prev_empty = True
        else:
            result.append(" ".join(trimmed.split()))
            prev_empty = False

    while result and result[-1] == "":
        result.pop()

    return "\n".join(result)


def recognize_png(png_data: bytes) -> str:
    """
    Recognize text in PNG-encoded image data.

    Raises:
        OcrFailure: On any decoding or Tesseract error.
    """
    try:
        image = Image.open(io.BytesIO(png_data))
        image.load()
    except (OSError, ValueError) as e:
        raise OcrFailure(f"Could not decode image: {e}") from e

    processed = preprocess_for_ocr(image)

    try:
        raw_text = pytesseract.image_to_string(
            processed, lang=OCR_LANGUAGES, config=TESSERACT_CONFIG
        )
    except pytesseract.TesseractNotFoundError as e:
        raise OcrFailure(TESSERACT_MISSING_HINT) from e
    except pytesseract.TesseractError as e:
        message = str(e)
        if "Failed loading language" in message or "traineddata" in message:
            raise OcrFailure(LANGUAGE_MISSING_HINT) from e
        raise OcrFailure(message) from e

    return postprocess_ocr_text(raw_text)


# ─── Background Worker ────────────────────────────────────────────────────

class _OcrWorkerSignals(QObject):
    # (request token, payload)
    finished = Signal(int, str)
    failed = Signal(int, str)


class OcrWorker(QRunnable):
    """Runs recognize_png() on a pool thread."""

    def __init__(self, token: int, png_data: bytes) -> None:
        super().__init__()
        self.token = token
        self._png_data = png_data
        self.signals = _OcrWorkerSignals()

    @Slot()
    def run(self) -> None:
        try:
            text = recognize_png(self._png_data)
        except OcrFailure as e:
            logger.error(f"OCR failed: {e}")
            self.signals.failed.emit(self.token, str(e))
            return
        except Exception as e:
            # Anything else must still reach the GUI thread, or the request
            # would stay pending forever
            logger.error(f"Unexpected OCR error: {e}", exc_info=True)
            self.signals.failed.emit(self.token, f"Unexpected error: {e}")
            return
        logger.info(f"OCR finished ({len(text)} chars)")
        self.signals.finished.emit(self.token, text)


class OcrService(QObject):
    """
    Asynchronous OCR requests.

    Signals:
        finished: Emitted with the recognized text.
        failed: Emitted with a human-readable reason.
    """

    finished = Signal(str)
    failed = Signal(str)

    def __init__(self, parent: QObject = None, pool: QThreadPool = None) -> None:
        super().__init__(parent)
        self._pool = pool or QThreadPool.globalInstance()
        # Workers (and their signal objects) stay referenced until they report back
        self._active: Dict[int, OcrWorker] = {}
        self._next_token = 0

    def submit(self, image: QImage) -> None:
        """Queue recognition of an image; the result arrives via signals."""
        if image is None or image.isNull():
            self.failed.emit("Nothing to recognize: the image is empty")
            return

        self._next_token += 1
        worker = OcrWorker(self._next_token, qimage_to_png_bytes(image))
        worker.setAutoDelete(False)
        # Slots of this GUI-thread object, so delivery is queued
        worker.signals.finished.connect(self._on_worker_finished)
        worker.signals.failed.connect(self._on_worker_failed)
        self._active[worker.token] = worker

        logger.info(f"OCR requested for {image.width()}x{image.height()} image")
        self._pool.start(worker)

    @Slot(int, str)
    def _on_worker_finished(self, token: int, text: str) -> None:
        self._active.pop(token, None)
        self.finished.emit(text)

    @Slot(int, str)
    def _on_worker_failed(self, token: int, reason: str) -> None:
        self._active.pop(token, None)
        self.failed.emit(reason)
