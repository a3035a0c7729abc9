"""
Annotation renderer for PrinSp.

A single painting routine used by both the live preview on the overlay and
the final composite. Nothing here caches or remembers earlier calls: the
same annotation painted twice goes through the same code path, which also
means a mosaic is re-randomized every time it is painted.
"""

import math
from typing import Iterable, Tuple

import numpy as np
from PySide6.QtCore import QPointF, QRectF, Qt
from PySide6.QtGui import QColor, QFont, QFontMetricsF, QPainter, QPen, QPolygonF

from prinsp.editor.annotations import Annotation, AnnotationType, Point


ARROWHEAD_LENGTH = 15.0
ARROWHEAD_ANGLE = math.radians(30)

DEFAULT_FONT_SIZE = 16
FONT_FAMILY = "sans-serif"

MOSAIC_BLOCK_SIZE = 10
MOSAIC_GRAY_MIN = 100
MOSAIC_GRAY_MAX = 200  # exclusive

_rng = np.random.default_rng()


def _to_qpoint(point: Point) -> QPointF:
    return QPointF(point.x, point.y)


def _stroke_pen(annotation: Annotation) -> QPen:
    pen = QPen(QColor(annotation.style.color))
    pen.setWidthF(annotation.style.line_width)
    pen.setCapStyle(Qt.PenCapStyle.RoundCap)
    pen.setJoinStyle(Qt.PenJoinStyle.RoundJoin)
    return pen


# ─── Geometry ─────────────────────────────────────────────────────────────

def arrowhead_points(start: Point, end: Point) -> Tuple[Point, Point, Point]:
    """
    Compute the arrowhead triangle for an arrow from start to end.

    The tip sits on the endpoint. Each wing lies ARROWHEAD_LENGTH back
    toward the start, rotated by ARROWHEAD_ANGLE to either side.

    Returns:
        (tip, wing_a, wing_b) where wing_a uses theta - 30 degrees and
        wing_b uses theta + 30 degrees.
    """
    theta = math.atan2(end.y - start.y, end.x - start.x)
    wing_a = Point(
        end.x - ARROWHEAD_LENGTH * math.cos(theta - ARROWHEAD_ANGLE),
        end.y - ARROWHEAD_LENGTH * math.sin(theta - ARROWHEAD_ANGLE),
    )
    wing_b = Point(
        end.x - ARROWHEAD_LENGTH * math.cos(theta + ARROWHEAD_ANGLE),
        end.y - ARROWHEAD_LENGTH * math.sin(theta + ARROWHEAD_ANGLE),
    )
    return end, wing_a, wing_b


def mosaic_blocks(start: Point, end: Point) -> Iterable[QRectF]:
    """
    Yield the MOSAIC_BLOCK_SIZE tiles covering the box spanned by two points.

    Tiles start at the box's top-left corner; those on the right and bottom
    edges are cut to the box.
    """
    left, right = min(start.x, end.x), max(start.x, end.x)
    top, bottom = min(start.y, end.y), max(start.y, end.y)

    y = top
    while y < bottom:
        block_h = min(MOSAIC_BLOCK_SIZE, bottom - y)
        x = left
        while x < right:
            block_w = min(MOSAIC_BLOCK_SIZE, right - x)
            yield QRectF(x, y, block_w, block_h)
            x += MOSAIC_BLOCK_SIZE
        y += MOSAIC_BLOCK_SIZE


# ─── Painters ─────────────────────────────────────────────────────────────

def _paint_rect(painter: QPainter, annotation: Annotation) -> None:
    # Signed width/height on purpose: no normalization here
    start, end = annotation.points[0], annotation.points[1]
    painter.setPen(_stroke_pen(annotation))
    painter.setBrush(Qt.BrushStyle.NoBrush)
    painter.drawRect(QRectF(start.x, start.y, end.x - start.x, end.y - start.y))


def _paint_arrow(painter: QPainter, annotation: Annotation) -> None:
    start, end = annotation.points[0], annotation.points[1]
    color = QColor(annotation.style.color)

    painter.setPen(_stroke_pen(annotation))
    painter.drawLine(_to_qpoint(start), _to_qpoint(end))

    tip, wing_a, wing_b = arrowhead_points(start, end)
    painter.setPen(Qt.PenStyle.NoPen)
    painter.setBrush(color)
    painter.drawPolygon(QPolygonF([_to_qpoint(tip), _to_qpoint(wing_a), _to_qpoint(wing_b)]))


def text_font(annotation: Annotation) -> QFont:
    """The font a text annotation is drawn with."""
    font = QFont()
    font.setFamily(FONT_FAMILY)
    font.setStyleHint(QFont.StyleHint.SansSerif)
    font.setPixelSize(annotation.style.font_size or DEFAULT_FONT_SIZE)
    return font


def _paint_text(painter: QPainter, annotation: Annotation) -> None:
    font = text_font(annotation)
    anchor = annotation.points[0]

    painter.setFont(font)
    painter.setPen(QColor(annotation.style.color))
    # drawText(QPointF) takes the baseline; shift down by the ascent so the
    # anchor is the top-left corner of the text
    ascent = QFontMetricsF(font).ascent()
    painter.drawText(QPointF(anchor.x, anchor.y + ascent), annotation.text)


def _paint_mosaic(painter: QPainter, annotation: Annotation) -> None:
    blocks = list(mosaic_blocks(annotation.points[0], annotation.points[1]))
    if not blocks:
        return

    grays = _rng.integers(MOSAIC_GRAY_MIN, MOSAIC_GRAY_MAX, size=len(blocks))
    for block, gray in zip(blocks, grays):
        value = int(gray)
        painter.fillRect(block, QColor(value, value, value))


_PAINTERS = {
    AnnotationType.RECT: _paint_rect,
    AnnotationType.ARROW: _paint_arrow,
    AnnotationType.TEXT: _paint_text,
    AnnotationType.MOSAIC: _paint_mosaic,
}


def paint_annotation(painter: QPainter, annotation: Annotation) -> None:
    """
    Paint one annotation.

    Args:
        painter: An active QPainter, already translated into the
            annotation's coordinate space.
        annotation: The annotation to paint.
    """
    painter.save()
    try:
        _PAINTERS[annotation.type](painter, annotation)
    finally:
        painter.restore()


def paint_annotations(painter: QPainter, annotations: Iterable[Annotation]) -> None:
    """Paint annotations in list order; later entries cover earlier ones."""
    for annotation in annotations:
        paint_annotation(painter, annotation)
