"""Unit tests for FieldValidator module."""
from datetime import date

import pytest

from config.validation_rules import SECTION_DATE_FORMATS, TABLE_DATE_FORMATS
from field_validator import FieldValidator, collapse_whitespace, parse_date
from tests.fixtures.log_helpers import logged_text

SOURCE_URL = "https://example.com/register.pdf"


@pytest.fixture
def validator(test_settings, mock_logger):
    return FieldValidator(test_settings, mock_logger)


@pytest.mark.unit
class TestCollapseWhitespace:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("  1  Main   Street ", "1 Main Street"),
            ("Lot 4\n\nHundred of Wudinna", "Lot 4 Hundred of Wudinna"),
            ("single", "single"),
            ("", ""),
            (None, ""),
        ],
    )
    def test_collapse(self, text, expected):
        assert collapse_whitespace(text) == expected


@pytest.mark.unit
class TestParseDate:
    """Test strict date parsing."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("5/03/2015", date(2015, 3, 5)),
            ("05/03/2015", date(2015, 3, 5)),
            ("17/3/15", date(2015, 3, 17)),
            (" 1/12/99 ", date(1999, 12, 1)),
        ],
    )
    def test_valid_dates(self, text, expected):
        assert parse_date(text, SECTION_DATE_FORMATS) == expected

    @pytest.mark.parametrize("text", ["", None, "31/02/2015", "2015-03-05", "5/03/2015 extra"])
    def test_invalid_dates(self, text):
        assert parse_date(text, SECTION_DATE_FORMATS) is None

    def test_table_formats_accept_both_year_widths(self):
        assert parse_date("2/03/15", TABLE_DATE_FORMATS) == date(2015, 3, 2)
        assert parse_date("2/03/2015", TABLE_DATE_FORMATS) == date(2015, 3, 2)


@pytest.mark.unit
class TestBuildRecord:
    """Test record construction and required-field checks."""

    def test_valid_record(self, validator):
        # Act
        record = validator.build_record(
            identifier="690/006/15",
            address="12  Main Street",
            description="Dwelling",
            received_date_text="5/03/2015",
            source_url=SOURCE_URL,
        )

        # Assert
        assert record.identifier == "690/006/15"
        assert record.address == "12 Main Street"
        assert record.description == "Dwelling"
        assert record.received_date == date(2015, 3, 5)
        assert record.source_url == SOURCE_URL

    def test_blank_identifier_rejected(self, validator, mock_logger):
        record = validator.build_record(" ", "12 Main Street", "", None, SOURCE_URL, context="[x]")
        assert record is None
        assert "application number rejected" in logged_text(mock_logger)
        assert "[x]" in logged_text(mock_logger)

    def test_blank_address_rejected(self, validator, mock_logger):
        assert validator.build_record("690/006/15", "  ", "", None, SOURCE_URL) is None
        assert "address rejected" in logged_text(mock_logger)

    def test_table_identifier_needs_application_number_shape(self, validator):
        assert (
            validator.build_record(
                "TOTAL", "1 Main Street", "", None, SOURCE_URL, identifier_rule="table_identifier"
            )
            is None
        )
        assert (
            validator.build_record(
                "690/010/15", "1 Main Street", "", None, SOURCE_URL, identifier_rule="table_identifier"
            )
            is not None
        )

    def test_blank_description_replaced_by_sentinel(self, validator, test_settings):
        record = validator.build_record("690/006/15", "1 Main Street", " ", None, SOURCE_URL)
        assert record.description == test_settings.description_sentinel

    def test_custom_sentinel(self, test_settings, mock_logger):
        settings = test_settings.model_copy(update={"description_sentinel": "NO DESCRIPTION PROVIDED"})
        record = FieldValidator(settings, mock_logger).build_record(
            "690/006/15", "1 Main Street", None, None, SOURCE_URL
        )
        assert record.description == "NO DESCRIPTION PROVIDED"

    def test_unparseable_date_keeps_record(self, validator, mock_logger):
        record = validator.build_record("690/006/15", "1 Main Street", "", "soon", SOURCE_URL)
        assert record is not None
        assert record.received_date is None
        assert "soon" in logged_text(mock_logger, "debug")

    def test_date_formats_argument_respected(self, validator):
        record = validator.build_record(
            "690/006/15", "1 Main Street", "", "5/03/2015", SOURCE_URL, date_formats=("%d/%m/%y",)
        )
        assert record.received_date is None
