"""Rectangle and line primitives used by the page layout engine.

All functions are pure. Coordinates are page units with y growing downwards
once a page has been normalised, so "top" means smallest y.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable, List, Optional, TypeVar

from models.notice_data import Line, Point, Rectangle

DEFAULT_TOLERANCE = 3.0

EMPTY_RECTANGLE = Rectangle(0.0, 0.0, 0.0, 0.0)

R = TypeVar("R", bound=Rectangle)


def area(rectangle: Rectangle) -> float:
    return rectangle.width * rectangle.height


def intersect(rectangle1: Rectangle, rectangle2: Rectangle) -> Rectangle:
    """Overlapping region of two rectangles, or an empty rectangle when disjoint."""
    x1 = max(rectangle1.x, rectangle2.x)
    y1 = max(rectangle1.y, rectangle2.y)
    x2 = min(rectangle1.right, rectangle2.right)
    y2 = min(rectangle1.bottom, rectangle2.bottom)
    if x2 >= x1 and y2 >= y1:
        return Rectangle(x1, y1, x2 - x1, y2 - y1)
    return EMPTY_RECTANGLE


def union(rectangle1: Rectangle, rectangle2: Rectangle) -> Rectangle:
    """Smallest rectangle covering both rectangles."""
    x = min(rectangle1.x, rectangle2.x)
    y = min(rectangle1.y, rectangle2.y)
    width = max(max(rectangle1.right, rectangle2.right) - x, 0.0)
    height = max(max(rectangle1.bottom, rectangle2.bottom) - y, 0.0)
    return Rectangle(x, y, width, height)


def union_all(rectangles: Iterable[Rectangle]) -> Optional[Rectangle]:
    bounds: Optional[Rectangle] = None
    for rectangle in rectangles:
        bounds = rectangle.bounds() if bounds is None else union(bounds, rectangle)
    return bounds


def intersect_lines(
    line1: Line, line2: Line, clamp_to_segments: bool = True
) -> Optional[Point]:
    """Intersection point of two lines.

    Returns None for zero-length lines, parallel lines, and (when
    ``clamp_to_segments`` is set) intersections outside either segment.
    """
    if line1.is_degenerate or line2.is_degenerate:
        return None

    dx1 = line1.x2 - line1.x1
    dy1 = line1.y2 - line1.y1
    dx2 = line2.x2 - line2.x1
    dy2 = line2.y2 - line2.y1

    determinant = dy2 * dx1 - dx2 * dy1
    if determinant == 0:
        return None

    offset_x = line1.x1 - line2.x1
    offset_y = line1.y1 - line2.y1
    distance1 = (dx2 * offset_y - dy2 * offset_x) / determinant
    distance2 = (dx1 * offset_y - dy1 * offset_x) / determinant

    if clamp_to_segments and not (0 <= distance1 <= 1 and 0 <= distance2 <= 1):
        return None

    return Point(line1.x1 + distance1 * dx1, line1.y1 + distance1 * dy1)


def overlap_percentage(rectangle: Rectangle, container: Rectangle) -> float:
    """Percentage of ``rectangle``'s area that lies inside ``container``.

    For example, if a quarter of the rectangle lies within the container this
    returns 25.
    """
    rectangle_area = area(rectangle)
    if rectangle_area == 0:
        return 0.0
    return area(intersect(rectangle, container)) * 100 / rectangle_area


def horizontal_overlap_percentage(rectangle1: Rectangle, rectangle2: Rectangle) -> float:
    """Shared x-extent as a percentage of the combined x-extent of both rectangles."""
    if rectangle1.width == 0 or rectangle2.width == 0:
        return 0.0
    if rectangle1.x >= rectangle2.right or rectangle1.right <= rectangle2.x:
        return 0.0
    intersection_width = min(rectangle1.right, rectangle2.right) - max(rectangle1.x, rectangle2.x)
    union_width = max(rectangle1.right, rectangle2.right) - min(rectangle1.x, rectangle2.x)
    return intersection_width * 100 / union_width


def is_vertical_overlap(rectangle1: Rectangle, rectangle2: Rectangle) -> bool:
    return rectangle2.y < rectangle1.bottom and rectangle2.bottom > rectangle1.y


def vertical_overlap_percentage(rectangle1: Rectangle, rectangle2: Rectangle) -> float:
    """Shared y-extent as a percentage of ``rectangle2``'s height.

    0 means no overlap and 100 means all of the second rectangle's height
    overlaps the first.
    """
    if rectangle2.height == 0:
        return 0.0
    y1 = max(rectangle1.y, rectangle2.y)
    y2 = min(rectangle1.bottom, rectangle2.bottom)
    if y2 < y1:
        return 0.0
    return (y2 - y1) * 100 / rectangle2.height


def rotate_clockwise_90(rectangle: R) -> R:
    """Rotate a rectangle 90 degrees clockwise about the origin (keeps payload fields)."""
    return _with_geometry(
        rectangle,
        x=-(rectangle.y + rectangle.height),
        y=rectangle.x,
        width=rectangle.height,
        height=rectangle.width,
    )


def invert_y(rectangle: R) -> R:
    """Flip a bottom-up rectangle into top-down page coordinates."""
    return _with_geometry(rectangle, y=-(rectangle.y + rectangle.height))


def squared_distance(x1: float, y1: float, x2: float, y2: float) -> float:
    return (x2 - x1) ** 2 + (y2 - y1) ** 2


def is_near(point1: Point, point2: Point, tolerance: float = DEFAULT_TOLERANCE) -> bool:
    return squared_distance(point1.x, point1.y, point2.x, point2.y) < tolerance ** 2


def same_coordinate(value1: float, value2: float, tolerance: float = DEFAULT_TOLERANCE) -> bool:
    return abs(value1 - value2) < tolerance


def group_rows(items: Iterable[R], tolerance: float = DEFAULT_TOLERANCE) -> List[List[R]]:
    """Split rectangles into rows, top to bottom, each row ordered left to right.

    Items are first ordered by position. A row starts at the first remaining item
    and collects every following item whose y is within ``tolerance`` of that
    first item's y. Unlike a pairwise "same row" comparator this is a true total
    order, so the result does not depend on the input order.
    """
    rows: List[List[R]] = []
    for item in sorted(items, key=_position_key):
        if rows and same_coordinate(item.y, rows[-1][0].y, tolerance):
            rows[-1].append(item)
        else:
            rows.append([item])
    return [sorted(row, key=_row_key) for row in rows]


def reading_order(items: Iterable[R], tolerance: float = DEFAULT_TOLERANCE) -> List[R]:
    """Canonical page order: rows top to bottom, left to right within a row."""
    return [item for row in group_rows(items, tolerance) for item in row]


def _position_key(item: Rectangle):
    return (item.y, item.x, item.width, item.height, getattr(item, "text", ""))


def _row_key(item: Rectangle):
    return (item.x, item.y, item.width, item.height, getattr(item, "text", ""))


def _with_geometry(rectangle: R, **geometry: float) -> R:
    return replace(rectangle, **geometry)
