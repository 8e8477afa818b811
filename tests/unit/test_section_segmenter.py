"""Unit tests for SectionSegmenter."""
import math

import pytest

from models.notice_data import Cell, Element
from section_segmenter import SectionSegmenter, element_summary
from tests.fixtures.log_helpers import logged_text


@pytest.fixture
def segmenter(test_settings, mock_logger):
    return SectionSegmenter(test_settings, mock_logger)


def anchor(y, text="APPLICATION NO:"):
    return Element(20, y, 90, 10, text)


@pytest.mark.unit
class TestFindAnchors:
    def test_anchors_sorted_top_to_bottom(self, segmenter):
        lower = anchor(300)
        upper = anchor(100)
        assert segmenter.find_anchors([lower, upper]) == [upper, lower]

    def test_no_anchor(self, segmenter):
        assert segmenter.find_anchors([Element(0, 0, 50, 10, "DESCRIPTION:")]) == []


@pytest.mark.unit
class TestSegment:
    """Test page segmentation into sections."""

    def test_two_anchors_partition_page(self, segmenter):
        # Arrange
        first, second = anchor(100), anchor(300)
        # Application number drawn slightly above the second anchor's baseline
        raised_value = Element(120, 298, 60, 10, "690/007/15")
        body1 = Element(20, 150, 100, 10, "body one")
        body2 = Element(20, 350, 100, 10, "body two")
        elements = [first, body1, second, raised_value, body2]
        cells = [Cell(20, 140, 130, 20), Cell(20, 340, 130, 20)]

        # Act
        sections = segmenter.segment(elements, cells)

        # Assert
        assert len(sections) == 2
        assert sections[0].start_element is first
        assert sections[1].start_element is second
        assert sections[0].elements == [first, body1]
        assert sections[1].elements == [second, raised_value, body2]
        assert sections[0].cells == [cells[0]]
        assert sections[1].cells == [cells[1]]

    def test_section_bounds_use_raised_row_top(self, segmenter):
        sections = segmenter.segment([anchor(100), anchor(300)], [])
        assert sections[0].top == pytest.approx(95.0)
        assert sections[0].bottom == pytest.approx(295.0)
        assert sections[1].top == pytest.approx(295.0)
        assert math.isinf(sections[1].bottom)

    def test_every_element_in_exactly_one_section_below_first_anchor(self, segmenter):
        elements = [anchor(100), anchor(300)] + [
            Element(40, y, 30, 10, str(y)) for y in range(100, 600, 17)
        ]
        sections = segmenter.segment(elements, [])
        for element in elements:
            owners = [section for section in sections if element in section.elements]
            assert len(owners) == 1

    def test_elements_above_first_anchor_excluded(self, segmenter):
        title = Element(20, 20, 200, 20, "REGISTER")
        sections = segmenter.segment([title, anchor(100)], [])
        assert title not in sections[0].elements

    def test_no_anchor_logs_elements(self, segmenter, mock_logger):
        elements = [Element(0, 0, 50, 10, "foo"), Element(60, 0, 50, 10, "bar")]
        assert segmenter.segment(elements, []) == []
        assert "[foo][bar]" in logged_text(mock_logger)

    def test_precomputed_anchors_used(self, segmenter):
        first = anchor(100)
        other = Element(20, 400, 50, 10, "START")
        sections = segmenter.segment([first, other], [], anchors=[other])
        assert len(sections) == 1
        assert sections[0].elements == [other]


@pytest.mark.unit
class TestRowTop:
    def test_row_top_includes_overlapping_taller_neighbour(self, segmenter):
        start = Element(20, 100, 50, 10, "a")
        neighbour = Element(80, 97, 40, 12, "b")
        assert segmenter.row_top([start, neighbour], start) == 97

    def test_row_top_ignores_very_tall_element(self, segmenter):
        start = Element(20, 100, 50, 10, "a")
        tall = Element(200, 0, 40, 400, "side bar")
        assert segmenter.row_top([start, tall], start) == 100

    def test_element_summary(self):
        assert element_summary([Element(0, 0, 1, 1, "a"), Element(0, 0, 1, 1, "")]) == "[a][]"
