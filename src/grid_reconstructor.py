"""Table grid reconstruction from ruled-line rectangles."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import List, Sequence, Tuple

from config.settings import Settings
from geometry import intersect_lines, is_near, reading_order, same_coordinate
from models.notice_data import Cell, Line, Point, Rectangle


@dataclass(frozen=True)
class CellGrid:
    """Reconstructed table structure of one page."""

    cells: List[Cell]  # Canonical reading order
    horizontal_lines: int  # Number of rectangles classified as horizontal rules
    vertical_lines: int  # Number of rectangles classified as vertical rules
    points: int  # Size of the deduplicated point lattice


class GridReconstructor:
    """Build table cells from the thin filled rectangles that draw table rules."""

    def __init__(self, settings: Settings, logger: logging.Logger):
        """Initialize grid reconstructor."""
        self._settings = settings
        self._logger = logger
        self._tolerance = settings.geometry_tolerance

    def reconstruct(self, rectangles: Sequence[Rectangle]) -> CellGrid:
        """Reconstruct cells from line-candidate rectangles.

        Algorithm:
        1. Classify rectangles as horizontal or vertical rules (discard others)
        2. Build a point lattice from intersections and shared end points
        3. Emit a cell for every point with a right and a down neighbour
        4. Sort cells in canonical reading order

        Args:
            rectangles: Filled rectangles in page space

        Returns:
            CellGrid (possibly without cells)
        """
        horizontal_lines, vertical_lines = self._classify_lines(rectangles)
        if not horizontal_lines or not vertical_lines:
            self._logger.debug(
                "Grid reconstruction: insufficient lines (horizontal=%d, vertical=%d)",
                len(horizontal_lines),
                len(vertical_lines),
            )

        points = self._build_points(horizontal_lines, vertical_lines)
        cells = reading_order(self._build_cells(points), self._tolerance)

        self._logger.debug(
            "Grid reconstructed: %d horizontal lines, %d vertical lines, %d points, %d cells",
            len(horizontal_lines),
            len(vertical_lines),
            len(points),
            len(cells),
        )

        return CellGrid(
            cells=cells,
            horizontal_lines=len(horizontal_lines),
            vertical_lines=len(vertical_lines),
            points=len(points),
        )

    def _classify_lines(
        self, rectangles: Sequence[Rectangle]
    ) -> Tuple[List[Line], List[Line]]:
        """Split rectangles into horizontal and vertical rules.

        Short lines and small squares (such as the vector art of a logo) are
        ignored; otherwise they would produce spurious cells.

        Returns:
            Tuple of (horizontal lines sorted by y, vertical lines sorted by x)
        """
        min_length = self._settings.line_min_length
        horizontal: List[Line] = []
        vertical: List[Line] = []

        for rectangle in rectangles:
            if rectangle.height <= self._tolerance and rectangle.width >= min_length:
                horizontal.append(
                    Line(rectangle.x, rectangle.y, rectangle.right, rectangle.y)
                )
            elif rectangle.width <= self._tolerance and rectangle.height >= min_length:
                vertical.append(
                    Line(rectangle.x, rectangle.y, rectangle.x, rectangle.bottom)
                )

        horizontal.sort(key=lambda line: (line.y1, line.x1, line.x2))
        vertical.sort(key=lambda line: (line.x1, line.y1, line.y2))
        return horizontal, vertical

    def _build_points(
        self, horizontal_lines: List[Line], vertical_lines: List[Line]
    ) -> List[Point]:
        """Collect intersection and end points of rules that touch or cross.

        Rules that touch nothing (an underline beneath some text, for example)
        contribute no points.
        """
        points: List[Point] = []

        for horizontal in horizontal_lines:
            for vertical in vertical_lines:
                intersection = intersect_lines(horizontal, vertical, clamp_to_segments=True)
                shared_end_point = any(
                    is_near(end1, end2, self._tolerance)
                    for end1 in _end_points(vertical)
                    for end2 in _end_points(horizontal)
                )

                if intersection is not None:
                    self._add_point(points, intersection)

                if shared_end_point or intersection is not None:
                    for end_point in _end_points(horizontal) + _end_points(vertical):
                        self._add_point(points, end_point)

        return points

    def _add_point(self, points: List[Point], point: Point) -> None:
        if not any(is_near(point, existing, self._tolerance) for existing in points):
            points.append(point)

    def _build_cells(self, points: List[Point]) -> List[Cell]:
        """Construct a cell from each point to its nearest right and down neighbours."""
        cells: List[Cell] = []

        for point in points:
            right = min(
                (
                    other
                    for other in points
                    if same_coordinate(other.y, point.y, self._tolerance) and other.x > point.x
                ),
                key=lambda other: (other.x - point.x, other.y),
                default=None,
            )
            down = min(
                (
                    other
                    for other in points
                    if same_coordinate(other.x, point.x, self._tolerance) and other.y > point.y
                ),
                key=lambda other: (other.y - point.y, other.x),
                default=None,
            )

            # Bottom and right extremities of a grid have no cell of their own
            if right is not None and down is not None:
                cells.append(
                    Cell(point.x, point.y, right.x - point.x, down.y - point.y)
                )

        return cells


def _end_points(line: Line) -> List[Point]:
    return [Point(line.x1, line.y1), Point(line.x2, line.y2)]
