"""
Annotation data model for the PrinSp editor.

This module provides the plain geometric records the editor works with:
- Point: a position in viewport or selection-local coordinates
- Selection: a normalized axis-aligned rectangle
- AnnotationStyle: color / line width / optional font size
- Annotation: one immutable vector drawing object

Annotation Types:
- RECT: Outlined rectangle spanned by an anchor and a drag endpoint
- ARROW: Straight line with a filled arrowhead at the endpoint
- TEXT: Single-line text anchored at its top-left corner
- MOSAIC: Randomized block pixelation over a rectangular area

Annotations never change after construction. Every edit in the editor
produces a new Annotation (or a new list of them).
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Sequence, Tuple
from uuid import uuid4


class AnnotationType(Enum):
    """Enum for annotation types."""
    RECT = "rect"
    ARROW = "arrow"
    TEXT = "text"
    MOSAIC = "mosaic"


# Types spanned by an anchor point and a drag endpoint
TWO_POINT_TYPES = (AnnotationType.RECT, AnnotationType.ARROW, AnnotationType.MOSAIC)

DEFAULT_COLOR = "#ff0000"
DEFAULT_LINE_WIDTH = 3


class InvalidAnnotationError(ValueError):
    """Raised when an annotation violates the invariants of its type."""


@dataclass(frozen=True)
class Point:
    """A 2D point in floating-point coordinates."""
    x: float
    y: float


@dataclass(frozen=True)
class Selection:
    """
    Axis-aligned rectangle chosen by the user.

    (x, y) is always the top-left corner; width and height are never
    negative. Use from_points() to build one from two arbitrary corners.
    """
    x: float
    y: float
    width: float
    height: float

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValueError(
                f"Selection size must be non-negative, got {self.width}x{self.height}"
            )

    @classmethod
    def from_points(cls, anchor: Point, current: Point) -> "Selection":
        """
        Build the normalized rectangle spanned by two corners.

        Args:
            anchor: The corner where the drag started.
            current: The corner under the pointer.

        Returns:
            The Selection with its origin at the top-left corner.
        """
        return cls(
            x=min(anchor.x, current.x),
            y=min(anchor.y, current.y),
            width=abs(current.x - anchor.x),
            height=abs(current.y - anchor.y),
        )

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def contains(self, point: Point) -> bool:
        """Return True if the point lies inside the rectangle (edges included)."""
        return self.x <= point.x <= self.right and self.y <= point.y <= self.bottom

    def to_local(self, point: Point) -> Point:
        """Convert a viewport point into coordinates relative to the top-left."""
        return Point(point.x - self.x, point.y - self.y)


@dataclass(frozen=True)
class AnnotationStyle:
    """
    Style properties for annotations.

    Colors are '#rrggbb' strings so the model stays free of Qt types.
    """
    color: str = DEFAULT_COLOR
    line_width: int = DEFAULT_LINE_WIDTH
    font_size: Optional[int] = None


@dataclass(frozen=True)
class Annotation:
    """
    One immutable vector drawing object.

    Invariants:
    - rect / arrow / mosaic carry at least 2 points (anchor, endpoint);
      anything after the second point is ignored
    - text carries exactly 1 point and a non-empty text

    Raises:
        InvalidAnnotationError: If the invariants of the type are violated.
    """
    type: AnnotationType
    points: Tuple[Point, ...]
    style: AnnotationStyle = field(default_factory=AnnotationStyle)
    text: Optional[str] = None
    id: str = field(default_factory=lambda: str(uuid4()))

    def __post_init__(self) -> None:
        # Accept any sequence but always store a tuple
        if not isinstance(self.points, tuple):
            object.__setattr__(self, "points", tuple(self.points))

        if self.type in TWO_POINT_TYPES:
            if len(self.points) < 2:
                raise InvalidAnnotationError(
                    f"{self.type.value} annotation needs at least 2 points, "
                    f"got {len(self.points)}"
                )
        elif self.type == AnnotationType.TEXT:
            if len(self.points) != 1:
                raise InvalidAnnotationError(
                    f"text annotation needs exactly 1 point, got {len(self.points)}"
                )
            if not self.text:
                raise InvalidAnnotationError("text annotation needs non-empty text")

    @property
    def anchor(self) -> Point:
        return self.points[0]

    @property
    def endpoint(self) -> Point:
        """The drag endpoint (the anchor itself for text)."""
        return self.points[1] if len(self.points) > 1 else self.points[0]

    def with_endpoint(self, point: Point) -> "Annotation":
        """
        Return a copy with the drag endpoint replaced.

        Used while dragging: the transient annotation is rebuilt on every
        pointer move instead of being mutated. The id is kept.
        """
        if self.type not in TWO_POINT_TYPES:
            raise InvalidAnnotationError(
                f"{self.type.value} annotation has no drag endpoint"
            )
        return replace(self, points=(self.points[0], point))


def create_annotation(
    annotation_type: AnnotationType,
    points: Sequence[Point],
    style: Optional[AnnotationStyle] = None,
    text: Optional[str] = None,
) -> Annotation:
    """
    Convenience factory with a fresh id and default style.

    Args:
        annotation_type: The kind of annotation to build.
        points: Anchor (and endpoint for two-point types).
        style: Style to use, or None for defaults.
        text: Text content for TEXT annotations.

    Returns:
        The new Annotation.
    """
    return Annotation(
        type=annotation_type,
        points=tuple(points),
        style=style or AnnotationStyle(),
        text=text,
    )
