"""Segmentation of a notice page into one vertical window per application."""

from __future__ import annotations

import logging
import math
from dataclasses import replace
from typing import List, Optional, Sequence

from anchor_matcher import AnchorMatcher
from config.settings import Settings
from geometry import is_vertical_overlap, vertical_overlap_percentage
from models.notice_data import Cell, Element, Section


class SectionSegmenter:
    """Split a page into sections, each starting at an anchor phrase.

    Applications are laid out as stacked label/value blocks (typically two per
    page), each beginning with "APPLICATION NO:". A section runs from the top of
    its anchor's row down to the top of the next anchor's row, or to the bottom
    of the page for the last anchor.
    """

    def __init__(
        self,
        settings: Settings,
        logger: logging.Logger,
        matcher: Optional[AnchorMatcher] = None,
    ) -> None:
        self._settings = settings
        self._logger = logger
        self._matcher = matcher or AnchorMatcher(settings, logger)

    def find_anchors(self, elements: Sequence[Element]) -> List[Element]:
        """Starting elements of every anchor phrase on the page, top to bottom."""
        matches = self._matcher.find_all(elements, self._settings.anchor_phrase)
        return sorted((match.start for match in matches), key=lambda element: element.y)

    def segment(
        self,
        elements: Sequence[Element],
        cells: Sequence[Cell],
        anchors: Optional[Sequence[Element]] = None,
    ) -> List[Section]:
        """Partition elements and cells into sections.

        Args:
            elements: Page elements in canonical reading order
            cells: Page cells in canonical reading order
            anchors: Pre-computed anchors (found from ``elements`` when omitted)

        Returns:
            Sections ordered top to bottom (empty when no anchor is found)
        """
        if anchors is None:
            anchors = self.find_anchors(elements)

        if not anchors:
            self._logger.info(
                "No \"%s\" anchors found on the page. Elements: %s",
                self._settings.anchor_phrase,
                element_summary(elements),
            )
            return []

        tops = [self.row_top(elements, self._raised(anchor)) for anchor in anchors]

        sections: List[Section] = []
        for index, anchor in enumerate(anchors):
            top = tops[index]
            bottom = tops[index + 1] if index + 1 < len(tops) else math.inf
            sections.append(
                Section(
                    start_element=anchor,
                    top=top,
                    bottom=bottom,
                    elements=[element for element in elements if top <= element.y < bottom],
                    cells=[cell for cell in cells if top <= cell.y < bottom],
                )
            )

        self._logger.debug(
            "Segmented page into %d sections: %s",
            len(sections),
            [f"y={section.top:.1f}..{section.bottom:.1f}" for section in sections],
        )
        return sections

    def row_top(self, elements: Sequence[Element], start_element: Element) -> float:
        """Smallest y of the elements sharing a row with ``start_element``.

        Elements only count when most of their height overlaps the start
        element; this keeps one very tall element from pulling every row top to
        the same value.
        """
        threshold = self._settings.vertical_overlap_threshold
        top = start_element.y
        for element in elements:
            if (
                is_vertical_overlap(start_element, element)
                and vertical_overlap_percentage(start_element, element) > threshold
                and element.y < top
            ):
                top = element.y
        return top

    @staticmethod
    def _raised(anchor: Element) -> Element:
        # Values are sometimes rendered slightly above their label's baseline
        return replace(anchor, y=anchor.y - anchor.height / 2)


def element_summary(elements: Sequence[Element]) -> str:
    """Raw element texts in ``[text][text]`` form for diagnostics."""
    return "".join(f"[{element.text}]" for element in elements)
