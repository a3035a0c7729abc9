"""Pytest configuration and fixtures."""

import os

# Headless Qt for painting and widget tests; must be set before Qt loads
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PySide6.QtGui import QColor, QImage

from prinsp.editor.annotations import AnnotationStyle, AnnotationType, Point, create_annotation


@pytest.fixture(scope="session")
def qapp():
    """Create a QApplication for tests that need it."""
    from PySide6.QtWidgets import QApplication

    app = QApplication.instance()
    if app is None:
        app = QApplication([])

    yield app


@pytest.fixture
def white_image(qapp):
    """A 200x100 opaque white raster."""
    image = QImage(200, 100, QImage.Format.Format_ARGB32)
    image.fill(QColor("white"))
    return image


@pytest.fixture
def make_rect():
    """Factory for rect annotations from two coordinate pairs."""
    def _make(x1=0, y1=0, x2=10, y2=10, color="#ff0000"):
        return create_annotation(
            AnnotationType.RECT,
            [Point(x1, y1), Point(x2, y2)],
            AnnotationStyle(color=color),
        )
    return _make
