"""Text element construction, page coordinate normalisation and cell ownership."""

from __future__ import annotations

import logging
import math
from dataclasses import replace
from typing import List, Sequence, Tuple

from config.settings import Settings
from geometry import invert_y, overlap_percentage, reading_order, rotate_clockwise_90
from models.notice_data import Cell, Element
from models.page_data import TextRun


class TextNormalizer:
    """Turn text runs into elements and bring cells and elements into one frame.

    The decoder reports exaggerated glyph heights for some documents, so the
    element height is recomputed from the length of the vertical basis vector of
    the run's rendering matrix instead.
    """

    def __init__(self, settings: Settings, logger: logging.Logger) -> None:
        self._settings = settings
        self._logger = logger

    def build_elements(self, text_runs: Sequence[TextRun]) -> List[Element]:
        elements: List[Element] = []
        for run in text_runs:
            transform = run.transform
            elements.append(
                Element(
                    x=transform[4],
                    y=transform[5],
                    width=run.width,
                    height=math.hypot(transform[2], transform[3]),
                    text=run.text,
                )
            )
        return elements

    def normalize_page(
        self, cells: Sequence[Cell], elements: Sequence[Element], rotation: int
    ) -> Tuple[List[Cell], List[Element]]:
        """Apply the page-level coordinate transform and sort into reading order.

        PDF coordinates grow upwards, so every rectangle is first flipped into
        top-down coordinates. Pages rotated by 90 degrees are then rotated
        clockwise about the origin.

        Args:
            cells: Cells reconstructed from the page's drawing operators
            elements: Elements built from the page's text runs
            rotation: Page rotation in degrees

        Returns:
            Tuple of (cells, elements), both in canonical reading order
        """
        cells = [invert_y(cell) for cell in cells]
        elements = [invert_y(element) for element in elements]

        if rotation != 0:
            self._logger.info("Page is rotated %d degrees.", rotation)

        if rotation == 90:
            cells = [rotate_clockwise_90(cell) for cell in cells]
            elements = [self._rotate_element(element) for element in elements]
        elif rotation != 0:
            self._logger.warning(
                "Rotation of %d degrees is not corrected; layout matching may fail.",
                rotation,
            )

        tolerance = self._settings.geometry_tolerance
        return reading_order(cells, tolerance), reading_order(elements, tolerance)

    def assign_ownership(
        self, cells: Sequence[Cell], elements: Sequence[Element], threshold: float
    ) -> int:
        """Give each element to the first cell containing more than ``threshold`` percent of it.

        Both sequences are expected in canonical reading order. Elements that no
        cell dominates stay unowned.

        Returns:
            Number of elements assigned to a cell
        """
        assigned = 0
        for element in elements:
            for cell in cells:
                if overlap_percentage(element, cell) > threshold:
                    cell.elements.append(element)
                    assigned += 1
                    break
        self._logger.debug(
            "Assigned %d of %d elements to %d cells (threshold %.0f%%)",
            assigned,
            len(elements),
            len(cells),
            threshold,
        )
        return assigned

    @staticmethod
    def _rotate_element(element: Element) -> Element:
        rotated = rotate_clockwise_90(element)
        # Glyph advance turns with the page but glyph height does not; this
        # shift-and-swap was fitted against rotated register pages.
        return replace(
            rotated,
            y=rotated.y - rotated.width,
            width=rotated.height,
            height=rotated.width,
        )
