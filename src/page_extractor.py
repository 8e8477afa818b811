"""Per-page extraction pipeline: primitives, grid, text, then records."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import List, Optional

from config.settings import Settings
from field_extractor import FieldExtractor
from field_validator import FieldValidator
from grid_reconstructor import GridReconstructor
from models.notice_data import Cell, Element, Record
from models.page_data import DecodedPage
from primitive_extractor import PrimitiveExtractor
from section_segmenter import SectionSegmenter
from table_extractor import TableExtractor
from text_normalizer import TextNormalizer

STRATEGY_SECTIONS = "sections"
STRATEGY_TABLE = "table"


@dataclass
class PageResult:
    """Outcome of extracting one page."""

    page_number: int
    strategy: str
    records: List[Record] = field(default_factory=list)
    cells: int = 0
    elements: int = 0
    sections: int = 0
    dropped: int = 0  # Sections or table rows that yielded no record


class PageExtractor:
    """Run the layout engine over one decoded page.

    Components are created once and reused for every page; they hold no
    per-page state.
    """

    def __init__(
        self,
        settings: Settings,
        logger: logging.Logger,
        strategy: Optional[str] = None,
    ) -> None:
        self._settings = settings
        self._logger = logger
        self._strategy = strategy or settings.extraction_strategy

        validator = FieldValidator(settings, logger)
        self._primitives = PrimitiveExtractor(logger)
        self._grid = GridReconstructor(settings, logger)
        self._normalizer = TextNormalizer(settings, logger)
        self._segmenter = SectionSegmenter(settings, logger)
        self._fields = FieldExtractor(settings, logger, validator=validator)
        self._table = TableExtractor(settings, logger, validator=validator)

    @property
    def strategy(self) -> str:
        return self._strategy

    def extract(self, page: DecodedPage, source_url: str) -> PageResult:
        """Extract the records of one page.

        Args:
            page: Decoded drawing operators and text runs
            source_url: Document URL attached to every record

        Returns:
            PageResult
        """
        rectangles = self._primitives.extract_rectangles(page.operators)
        grid = self._grid.reconstruct(rectangles)
        elements = self._normalizer.build_elements(page.text_runs)
        cells, elements = self._normalizer.normalize_page(grid.cells, elements, page.rotation)

        result = PageResult(
            page_number=page.page_number,
            strategy=self._strategy,
            cells=len(cells),
            elements=len(elements),
        )

        if self._strategy == STRATEGY_SECTIONS:
            self._extract_sections(result, cells, elements, source_url)
        elif self._strategy == STRATEGY_TABLE:
            self._extract_table(result, cells, elements, source_url)
        else:
            # Table headings can resemble the section anchor, so a page only
            # counts as a section page when its sections yield records
            anchors = self._segmenter.find_anchors(elements)
            if anchors:
                self._extract_sections(result, cells, elements, source_url, anchors)
            if not result.records:
                if anchors:
                    self._logger.debug(
                        "Page %d: %d anchor(s) but no section records; trying table layout",
                        page.page_number,
                        len(anchors),
                    )
                    for cell in cells:
                        cell.elements.clear()
                self._extract_table(result, cells, elements, source_url)

        self._logger.debug(
            "Page %d: strategy=%s, %d cells, %d elements, %d records",
            page.page_number,
            result.strategy,
            result.cells,
            result.elements,
            len(result.records),
        )
        return result

    def _extract_sections(
        self,
        result: PageResult,
        cells: List[Cell],
        elements: List[Element],
        source_url: str,
        anchors: Optional[List[Element]] = None,
    ) -> None:
        self._normalizer.assign_ownership(
            cells, elements, self._settings.section_ownership_threshold
        )
        sections = self._segmenter.segment(elements, cells, anchors)
        result.strategy = STRATEGY_SECTIONS
        result.sections = len(sections)
        result.records, result.dropped = self._fields.extract_all(sections, source_url)

    def _extract_table(
        self,
        result: PageResult,
        cells: List[Cell],
        elements: List[Element],
        source_url: str,
    ) -> None:
        self._normalizer.assign_ownership(
            cells, elements, self._settings.table_ownership_threshold
        )
        table = self._table.extract(cells, elements, source_url)
        result.strategy = STRATEGY_TABLE
        result.records = table.records
        result.dropped = table.dropped_rows
