"""Extraction of applications from register pages laid out as one table row each."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import re
from typing import Dict, List, Optional, Sequence

from config.settings import Settings
from config.validation_rules import (
    CONDITIONS_PAGE_PATTERNS,
    TABLE_DATE_FORMATS,
    TABLE_HEADING_PATTERNS,
)
from field_validator import FieldValidator, collapse_whitespace
from geometry import group_rows, horizontal_overlap_percentage
from models.notice_data import Cell, Element, Record
from section_segmenter import element_summary

_WHITESPACE = re.compile(r"\s")


@dataclass
class TableResult:
    """Records read from one table page."""

    records: List[Record] = field(default_factory=list)
    rows: int = 0
    dropped_rows: int = 0
    skipped_reason: Optional[str] = None


class TableExtractor:
    """Read one application per table row, locating columns by their heading cells."""

    def __init__(
        self,
        settings: Settings,
        logger: logging.Logger,
        validator: Optional[FieldValidator] = None,
    ) -> None:
        self._settings = settings
        self._logger = logger
        self._validator = validator or FieldValidator(settings, logger)

    def extract(
        self, cells: Sequence[Cell], elements: Sequence[Element], source_url: str
    ) -> TableResult:
        """Extract records from a page whose cells already own their elements.

        Args:
            cells: Page cells in canonical reading order
            elements: Page elements (used for diagnostics only)
            source_url: Document URL attached to every record

        Returns:
            TableResult (empty with ``skipped_reason`` set when the page is skipped)
        """
        rows = group_rows(cells, self._settings.geometry_tolerance)
        if not rows:
            return self._skip(
                "no rows were found (based on the grid)", elements
            )

        if all(self._find_heading(cells, pattern) for pattern in CONDITIONS_PAGE_PATTERNS):
            self._logger.debug("Skipping conditions page")
            return TableResult(rows=len(rows), skipped_reason="conditions page")

        headings: Dict[str, Optional[Cell]] = {
            name: self._find_heading(cells, pattern)
            for name, pattern in TABLE_HEADING_PATTERNS.items()
        }
        if headings["identifier"] is None:
            return self._skip(
                "the \"Application No.\" column heading was not found", elements
            )
        if headings["address"] is None:
            return self._skip(
                "the \"Address of Development\" column heading was not found", elements
            )

        result = TableResult(rows=len(rows))
        for row in rows:
            columns = {
                name: self._column_cell(row, heading)
                for name, heading in headings.items()
            }
            # The heading row and rows without an application number cell hold no application
            if columns["identifier"] is None or columns["identifier"] is headings["identifier"]:
                continue

            record = self._build_row_record(row, columns, source_url)
            if record is None:
                result.dropped_rows += 1
            else:
                result.records.append(record)

        self._logger.debug(
            "Table page: %d rows, %d records, %d rows dropped",
            result.rows,
            len(result.records),
            result.dropped_rows,
        )
        return result

    def _build_row_record(
        self, row: Sequence[Cell], columns: Dict[str, Optional[Cell]], source_url: str
    ) -> Optional[Record]:
        identifier = columns["identifier"].text.strip().upper()

        address_cell = columns["address"]
        if address_cell is None:
            self._logger.info(
                "Ignoring application \"%s\" because it has no address cell.", identifier
            )
            return None

        description_cell = columns["description"]
        description = description_cell.joined_text(" ") if description_cell else ""

        date_cell = columns["received_date"]
        date_text = collapse_whitespace(date_cell.text) if date_cell else None

        return self._validator.build_record(
            identifier=identifier,
            address=address_cell.joined_text(" "),
            description=description,
            received_date_text=date_text,
            source_url=source_url,
            identifier_rule="table_identifier",
            date_formats=TABLE_DATE_FORMATS,
            context=element_summary([element for cell in row for element in cell.elements]),
        )

    def _column_cell(self, row: Sequence[Cell], heading: Optional[Cell]) -> Optional[Cell]:
        """First cell of ``row`` lying (almost) exactly beneath ``heading``."""
        if heading is None:
            return None
        threshold = self._settings.column_overlap_threshold
        for cell in row:
            if horizontal_overlap_percentage(cell, heading) > threshold:
                return cell
        return None

    @staticmethod
    def _find_heading(cells: Sequence[Cell], pattern: re.Pattern) -> Optional[Cell]:
        for cell in cells:
            if pattern.search(_WHITESPACE.sub("", cell.text)):
                return cell
        return None

    def _skip(self, reason: str, elements: Sequence[Element]) -> TableResult:
        self._logger.info(
            "No applications can be parsed from the current page because %s. Elements: %s",
            reason,
            element_summary(elements),
        )
        return TableResult(skipped_reason=reason)
