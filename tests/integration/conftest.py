"""Integration test fixtures: real PDF documents and a real logger."""
import logging

import pytest

from config.settings import Settings
from tests.fixtures.pdf_builder import section_layout, table_layout, write_pdf
from tests.fixtures.synthetic_pages import SectionApplication

SECTION_APPLICATIONS = [
    SectionApplication("690/006/15", "12 Main Street, Wudinna", "Dwelling and garage", "5/03/2015"),
    SectionApplication("690/007/15", "3 Beach Road, Streaky Bay", "", "17/3/15"),
]

TABLE_ROWS = [
    ("690/010/15", "2/03/15", "7 High Street", "Verandah"),
    ("690/011/15", "", "1 Main Street", ""),
]


@pytest.fixture
def integration_settings(tmp_path):
    """Settings writing results inside a temp directory."""
    return Settings(
        output_dir=tmp_path / "results",
        log_dir=tmp_path / "logs",
        log_level="WARNING",  # Reduce log noise
    )


@pytest.fixture(scope="session")
def integration_logger():
    """Logger configured for integration tests."""
    logger = logging.getLogger("integration_tests")
    logger.setLevel(logging.WARNING)
    logger.propagate = False

    # Add console handler if not present
    if not logger.handlers:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(logging.Formatter("%(levelname)s - %(message)s"))
        console_handler.setLevel(logger.level)
        logger.addHandler(console_handler)

    return logger


@pytest.fixture
def section_pdf(tmp_path):
    return write_pdf(tmp_path / "sections.pdf", [section_layout(SECTION_APPLICATIONS)])


@pytest.fixture
def rotated_section_pdf(tmp_path):
    return write_pdf(
        tmp_path / "sections-rotated.pdf", [section_layout(SECTION_APPLICATIONS)], rotation=90
    )


@pytest.fixture
def table_pdf(tmp_path):
    return write_pdf(tmp_path / "table.pdf", [table_layout(TABLE_ROWS)])
