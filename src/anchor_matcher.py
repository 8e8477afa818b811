"""Approximate location of label text on a page.

Labels in the register documents are often split across several text runs
and rendered with inconsistent kerning or stray characters, so a label is
matched by joining neighbouring runs left to right and comparing the joined
text to the wanted phrase with a small edit-distance allowance.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from rapidfuzz.distance import Levenshtein

from config.settings import Settings
from geometry import (
    is_vertical_overlap,
    squared_distance,
    union_all,
    vertical_overlap_percentage,
)
from models.notice_data import Element, Rectangle

# Characters ignored when comparing label text (":" and "." are significant)
_IGNORED_CHARACTERS = re.compile(r"[\s,\-_]")


def condense(text: str) -> str:
    """Lower-case ``text`` and drop whitespace, commas, hyphens and underscores."""
    return _IGNORED_CHARACTERS.sub("", text).lower()


@dataclass(frozen=True)
class AnchorMatch:
    """Run of elements whose joined text approximately matches a phrase."""

    elements: Tuple[Element, ...]
    rank: int  # 0 exact, otherwise the edit distance allowance that matched
    text: str  # Condensed joined text

    @property
    def start(self) -> Element:
        return self.elements[0]

    @property
    def bounds(self) -> Rectangle:
        return union_all(self.elements)


class AnchorMatcher:
    """Find elements that spell out a label phrase, tolerating small errors."""

    def __init__(self, settings: Settings, logger: logging.Logger) -> None:
        self._settings = settings
        self._logger = logger

    def find_all(self, elements: Sequence[Element], phrase: str) -> List[AnchorMatch]:
        """Best match for every element that can start ``phrase``.

        Args:
            elements: Page or section elements
            phrase: Label text, e.g. "APPLICATION NO:"

        Returns:
            One match per distinct starting element, in element order
        """
        target = condense(phrase)
        if not target:
            return []

        matches: List[AnchorMatch] = []
        for element in elements:
            if not element.text.strip().lower().startswith(target[0]):
                continue
            candidates = self._candidates_from(elements, element, target)
            if candidates:
                matches.append(self._best(candidates, target))
        return matches

    def find_best(self, elements: Sequence[Element], phrase: str) -> Optional[AnchorMatch]:
        """Single best match for ``phrase`` among ``elements``, or None."""
        matches = self.find_all(elements, phrase)
        if not matches:
            return None
        return self._best(matches, condense(phrase))

    def right_neighbor(
        self, elements: Sequence[Element], element: Element
    ) -> Optional[Element]:
        """Nearest element immediately to the right, ignoring ones after a large gap."""
        tolerance = self._settings.geometry_tolerance
        closest: Optional[Element] = None
        closest_distance = math.inf

        for candidate in elements:
            if candidate is element:
                continue
            if not is_vertical_overlap(element, candidate):
                continue
            # Avoid extremely tall elements
            if vertical_overlap_percentage(element, candidate) <= self._settings.vertical_overlap_threshold:
                continue
            if candidate.x <= element.right - tolerance:
                continue
            if candidate.x - element.right >= self._settings.right_neighbor_max_gap:
                continue
            distance = _directional_distance(element, candidate)
            if distance < closest_distance:
                closest = candidate
                closest_distance = distance

        return closest

    def rank(self, text: str, target: str) -> Optional[int]:
        """Rank condensed ``text`` against condensed ``target`` (None when too different)."""
        if text == target:
            return 0
        distance = Levenshtein.distance(text, target)
        for allowance in range(1, self._settings.anchor_max_edit_distance + 1):
            if distance <= allowance:
                return allowance
        return None

    def _candidates_from(
        self, elements: Sequence[Element], start: Element, target: str
    ) -> List[AnchorMatch]:
        """Extend rightwards from ``start`` and record every joined text close to ``target``."""
        slack = self._settings.anchor_length_slack
        candidates: List[AnchorMatch] = []
        run: List[Element] = []
        current: Optional[Element] = start

        while current is not None and len(run) < self._settings.anchor_max_elements:
            run.append(current)
            text = condense("".join(item.text for item in run))

            if len(text) > len(target) + slack:
                break
            if len(text) >= len(target) - slack:
                rank = self.rank(text, target)
                if rank is not None:
                    candidates.append(AnchorMatch(tuple(run), rank, text))

            current = self.right_neighbor(elements, current)

        return candidates

    @staticmethod
    def _best(matches: Sequence[AnchorMatch], target: str) -> AnchorMatch:
        # Lowest rank wins, then the length closest to the phrase; earliest on ties
        return min(
            matches,
            key=lambda match: (match.rank, abs(len(match.text.strip()) - len(target))),
        )


def _directional_distance(element: Element, candidate: Element) -> float:
    """Squared distance from the right middle of ``element`` to the left middle of ``candidate``.

    Candidates that start well to the left of the element's right edge (more
    than a fifth of its width) are treated as infinitely far away.
    """
    x1 = element.right
    y1 = element.y + element.height / 2
    x2 = candidate.x
    y2 = candidate.y + candidate.height / 2
    if x2 < x1 - element.width / 5:
        return math.inf
    return squared_distance(x1, y1, x2, y2)
