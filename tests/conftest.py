"""Global fixtures for all tests."""
import sys
from pathlib import Path

# Add src directory to Python path for source file imports
# Source files use top-level imports like "from config.settings"
project_root = Path(__file__).parent.parent
src_dir = project_root / "src"
if str(src_dir) not in sys.path:
    sys.path.insert(0, str(src_dir))

import logging
from unittest.mock import MagicMock

import pytest

from config.settings import Settings


@pytest.fixture
def test_settings(tmp_path):
    """Settings with default thresholds and output kept inside a temp directory."""
    return Settings(
        output_dir=tmp_path / "results",
        log_dir=tmp_path / "logs",
        log_level="WARNING",  # Reduce log noise
    )


@pytest.fixture
def mock_logger():
    """Mock logger for testing."""
    return MagicMock(spec=logging.Logger)

