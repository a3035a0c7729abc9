"""
Compositor for PrinSp.

Turns the pre-captured screen raster, the user's Selection and the
committed annotations into the single flattened image that goes to the
clipboard and (optionally) to a file.
"""

from typing import Iterable

from PySide6.QtCore import QRect
from PySide6.QtGui import QImage, QPainter

from prinsp.editor.annotations import Annotation, Selection
from prinsp.editor.renderer import paint_annotations
from prinsp.services.logging_service import get_logger


logger = get_logger(__name__)


def selection_to_rect(selection: Selection) -> QRect:
    """Round a Selection to whole pixels."""
    return QRect(
        round(selection.x),
        round(selection.y),
        round(selection.width),
        round(selection.height),
    )


def crop(base: QImage, selection: Selection) -> QImage:
    """
    Cut the selected region out of the pre-captured raster.

    Pure local geometry: the base raster is never re-captured. Parts of
    the Selection outside the raster are dropped.
    """
    rect = selection_to_rect(selection).intersected(base.rect())
    cropped = base.copy(rect)
    logger.debug(f"Cropped {rect.width()}x{rect.height()} at ({rect.x()}, {rect.y()})")
    return cropped


def composite(base: QImage, annotations: Iterable[Annotation]) -> QImage:
    """
    Paint annotations over a copy of the base raster.

    Args:
        base: Raster the annotations' coordinates refer to.
        annotations: Committed annotations, painted in list order.

    Returns:
        A new image with the same pixel dimensions as base.
    """
    # Start from a verbatim copy in a format QPainter can draw on
    result = base.convertToFormat(QImage.Format.Format_ARGB32)

    painter = QPainter(result)
    try:
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        painter.setRenderHint(QPainter.RenderHint.TextAntialiasing)
        paint_annotations(painter, annotations)
    finally:
        painter.end()

    return result


def render_selection(
    base: QImage, selection: Selection, annotations: Iterable[Annotation]
) -> QImage:
    """Crop the Selection and composite the annotations onto it."""
    return composite(crop(base, selection), annotations)
