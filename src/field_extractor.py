"""Field extraction for sections laid out as labelled cells.

Each section holds one application. The application number is printed as
free text to the right of an "APPLICATION NO:" label, while the remaining
fields sit in table cells to the right of their label cells.
"""

from __future__ import annotations

import logging
import re
from typing import List, Optional, Sequence, Tuple

from anchor_matcher import AnchorMatcher
from config.settings import Settings
from config.validation_rules import (
    SECTION_CELL_LABELS,
    SECTION_DATE_FORMATS,
    SECTION_IDENTIFIER_LABEL,
)
from field_validator import FieldValidator, collapse_whitespace
from geometry import overlap_percentage, squared_distance
from models.notice_data import Cell, Record, Rectangle, Section
from section_segmenter import element_summary

_WHITESPACE = re.compile(r"\s")


class FieldExtractor:
    """Read the application fields of one section."""

    def __init__(
        self,
        settings: Settings,
        logger: logging.Logger,
        matcher: Optional[AnchorMatcher] = None,
        validator: Optional[FieldValidator] = None,
    ) -> None:
        self._settings = settings
        self._logger = logger
        self._matcher = matcher or AnchorMatcher(settings, logger)
        self._validator = validator or FieldValidator(settings, logger)

    def extract_all(
        self, sections: Sequence[Section], source_url: str
    ) -> Tuple[List[Record], int]:
        """Extract a record from every section.

        Returns:
            Tuple of (records in section order, number of dropped sections)
        """
        records: List[Record] = []
        dropped = 0
        for section in sections:
            record = self.extract(section, source_url)
            if record is None:
                dropped += 1
            else:
                records.append(record)
        return records, dropped

    def extract(self, section: Section, source_url: str) -> Optional[Record]:
        """Extract one record from a section, or None when a required field is missing.

        Args:
            section: Section whose cells already own their elements
            source_url: Document URL attached to the record

        Returns:
            Record or None
        """
        summary = element_summary(section.elements)

        identifier = self._read_identifier(section)
        if identifier is None:
            self._logger.info(
                "Could not find the \"%s\" label for the current application; ignoring it. Elements: %s",
                SECTION_IDENTIFIER_LABEL,
                summary,
            )
            return None
        if not identifier:
            self._logger.info(
                "Could not find the application number for the current application; ignoring it. Elements: %s",
                summary,
            )
            return None

        self._logger.debug("Found application \"%s\"", identifier)

        address_label = self._find_label_cell(section.cells, SECTION_CELL_LABELS["address"])
        if address_label is None:
            self._logger.info(
                "Could not find the \"%s\" label for application \"%s\"; ignoring it. Elements: %s",
                SECTION_CELL_LABELS["address"],
                identifier,
                summary,
            )
            return None

        address = self._read_labelled_cell(section.cells, address_label)
        description = self._read_cell_field(section.cells, SECTION_CELL_LABELS["description"])
        received_date_text = self._read_cell_field(
            section.cells, SECTION_CELL_LABELS["received_date"]
        )
        if received_date_text is not None:
            received_date_text = _WHITESPACE.sub("", received_date_text)

        return self._validator.build_record(
            identifier=identifier,
            address=address,
            description=description,
            received_date_text=received_date_text,
            source_url=source_url,
            identifier_rule="identifier",
            date_formats=SECTION_DATE_FORMATS,
            context=summary,
        )

    def _read_identifier(self, section: Section) -> Optional[str]:
        """Text printed to the right of the identifier label.

        Returns None when the label itself is missing and an empty string
        when nothing follows it.
        """
        match = self._matcher.find_best(section.elements, SECTION_IDENTIFIER_LABEL)
        if match is None:
            return None

        label = match.bounds
        extremity = max(
            [element.right for element in section.elements]
            + [cell.right for cell in section.cells]
        )
        capture = Rectangle(
            x=label.right,
            y=label.y,
            width=max(extremity - label.right, 0.0),
            height=label.height,
        )

        threshold = self._settings.value_capture_threshold
        text = "".join(
            element.text
            for element in section.elements
            if overlap_percentage(element, capture) > threshold
        )
        text = _WHITESPACE.sub("", text)
        return text[1:] if text.startswith(":") else text

    def _read_cell_field(self, cells: Sequence[Cell], label_text: str) -> Optional[str]:
        label = self._find_label_cell(cells, label_text)
        if label is None:
            return None
        return self._read_labelled_cell(cells, label)

    def _read_labelled_cell(self, cells: Sequence[Cell], label: Cell) -> Optional[str]:
        """Collapsed text of the cell whose top-left corner meets the label's top-right corner."""
        tolerance = self._settings.geometry_tolerance
        for cell in cells:
            if squared_distance(label.right, label.y, cell.x, cell.y) < tolerance ** 2:
                return collapse_whitespace(cell.text)

        self._logger.debug(
            "No value cell found to the right of label \"%s\" at (%.1f, %.1f)",
            label.text,
            label.right,
            label.y,
        )
        return None

    @staticmethod
    def _find_label_cell(cells: Sequence[Cell], label_text: str) -> Optional[Cell]:
        for cell in cells:
            if _WHITESPACE.sub("", cell.text).upper() == label_text:
                return cell
        return None

