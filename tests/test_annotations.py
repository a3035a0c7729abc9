"""Tests for the annotation data model."""

import dataclasses

import pytest

from prinsp.editor.annotations import (
    DEFAULT_COLOR,
    DEFAULT_LINE_WIDTH,
    Annotation,
    AnnotationStyle,
    AnnotationType,
    InvalidAnnotationError,
    Point,
    Selection,
    create_annotation,
)


class TestSelection:
    """Tests for Selection."""

    def test_from_points_normalizes_reverse_drag(self):
        """Test that a drag up-left yields the top-left origin."""
        sel = Selection.from_points(Point(100, 100), Point(40, 60))

        assert (sel.x, sel.y, sel.width, sel.height) == (40, 60, 60, 40)

    def test_negative_size_rejected(self):
        """Test that a negative width raises."""
        with pytest.raises(ValueError):
            Selection(0, 0, -1, 10)

    def test_contains_includes_edges(self):
        sel = Selection(10, 10, 20, 20)

        assert sel.contains(Point(10, 10))
        assert sel.contains(Point(30, 30))
        assert not sel.contains(Point(31, 15))

    def test_to_local(self):
        sel = Selection(10, 20, 100, 100)

        assert sel.to_local(Point(15, 25)) == Point(5, 5)


class TestAnnotation:
    """Tests for Annotation invariants."""

    def test_defaults(self):
        """Test default style values."""
        ann = create_annotation(AnnotationType.RECT, [Point(0, 0), Point(5, 5)])

        assert ann.style.color == DEFAULT_COLOR == "#ff0000"
        assert ann.style.line_width == DEFAULT_LINE_WIDTH == 3
        assert ann.style.font_size is None
        assert ann.id

    def test_ids_are_unique(self):
        a = create_annotation(AnnotationType.ARROW, [Point(0, 0), Point(5, 5)])
        b = create_annotation(AnnotationType.ARROW, [Point(0, 0), Point(5, 5)])

        assert a.id != b.id

    @pytest.mark.parametrize("kind", [AnnotationType.RECT, AnnotationType.ARROW, AnnotationType.MOSAIC])
    def test_two_point_types_need_two_points(self, kind):
        with pytest.raises(InvalidAnnotationError):
            create_annotation(kind, [Point(0, 0)])

    def test_text_needs_exactly_one_point(self):
        with pytest.raises(InvalidAnnotationError):
            create_annotation(AnnotationType.TEXT, [Point(0, 0), Point(1, 1)], text="hi")

    def test_text_needs_text(self):
        with pytest.raises(InvalidAnnotationError):
            create_annotation(AnnotationType.TEXT, [Point(0, 0)], text="")

    def test_invalid_annotation_is_value_error(self):
        assert issubclass(InvalidAnnotationError, ValueError)

    def test_extra_points_are_kept_but_ignored(self):
        ann = create_annotation(
            AnnotationType.RECT, [Point(0, 0), Point(5, 5), Point(9, 9)]
        )

        assert ann.endpoint == Point(5, 5)

    def test_points_stored_as_tuple(self):
        ann = Annotation(type=AnnotationType.RECT, points=[Point(0, 0), Point(1, 1)])

        assert isinstance(ann.points, tuple)

    def test_immutable(self):
        ann = create_annotation(AnnotationType.RECT, [Point(0, 0), Point(5, 5)])

        with pytest.raises(dataclasses.FrozenInstanceError):
            ann.text = "changed"

    def test_with_endpoint_keeps_id(self):
        ann = create_annotation(AnnotationType.ARROW, [Point(0, 0), Point(0, 0)])
        moved = ann.with_endpoint(Point(30, 40))

        assert moved.id == ann.id
        assert moved.endpoint == Point(30, 40)
        assert ann.endpoint == Point(0, 0)

    def test_with_endpoint_on_text_raises(self):
        ann = create_annotation(
            AnnotationType.TEXT, [Point(0, 0)], AnnotationStyle(font_size=20), text="x"
        )

        with pytest.raises(InvalidAnnotationError):
            ann.with_endpoint(Point(1, 1))
