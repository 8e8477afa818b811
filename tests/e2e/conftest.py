"""E2E test fixtures: documents on disk and an isolated CLI environment."""
import os

import pytest

from tests.fixtures.pdf_builder import section_layout, table_layout, write_pdf
from tests.fixtures.synthetic_pages import SectionApplication


@pytest.fixture
def cli_env(tmp_path):
    """Environment that keeps CLI logs and results inside the temp directory."""
    env = os.environ.copy()
    env["LOG_DIR"] = str(tmp_path / "logs")
    env["OUTPUT_DIR"] = str(tmp_path / "results")
    env["LOG_LEVEL"] = "INFO"
    env["PYTHONIOENCODING"] = "utf-8"
    return env


@pytest.fixture
def notices_dir(tmp_path):
    """Directory with one section-layout and one table-layout register."""
    directory = tmp_path / "pdfs"
    directory.mkdir()
    write_pdf(
        directory / "wudinna.pdf",
        [section_layout([SectionApplication("690/006/15", "12 Main Street, Wudinna", "Dwelling", "5/03/2015")])],
    )
    write_pdf(
        directory / "streaky-bay.pdf",
        [table_layout([("690/010/15", "2/03/15", "7 High Street", "Verandah")])],
    )
    return directory
