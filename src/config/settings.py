from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables or .env file."""

    input_dir: Path = Path("pdfs")
    output_dir: Path = Path("results")
    log_dir: Path = Path("logs")
    log_level: Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"] = "INFO"
    log_max_size_mb: int = 10
    log_memory_per_page: bool = False  # Log RSS before/after every page (DEBUG level)

    # Geometry
    geometry_tolerance: float = 3.0  # Absolute tolerance for coordinate equality (page units)
    line_min_length: float = 10.0  # Shorter filled rectangles are not treated as table rules

    # Element ownership (percent of element area inside a cell)
    section_ownership_threshold: float = 50.0
    table_ownership_threshold: float = 40.0

    # Field value capture
    value_capture_threshold: float = 10.0  # Percent of element inside the capture rectangle
    column_overlap_threshold: float = 90.0  # Horizontal overlap of a row cell with its heading
    vertical_overlap_threshold: float = 50.0  # Same-row test for neighbours and row tops
    right_neighbor_max_gap: float = 30.0  # Max horizontal gap when joining text to the right

    # Fuzzy anchor matching
    anchor_phrase: str = "APPLICATION NO:"
    anchor_max_elements: int = 5
    anchor_length_slack: int = 2
    anchor_max_edit_distance: int = 2

    # Extraction
    extraction_strategy: Literal["auto", "sections", "table"] = "auto"
    description_sentinel: str = "No Description Provided"
    max_pages: int = 500  # Guard against documents reporting an unbounded page count

    # Document retrieval
    http_timeout: float = 60.0
    http_max_retries: int = 3
    http_backoff_factor: float = 1.0
    http_verify_ssl: bool = False  # Council sites frequently serve broken certificate chains
    http_user_agent: str = (
        "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0 Safari/537.36"
    )

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    @field_validator("input_dir", "output_dir", "log_dir", mode="before")
    def _ensure_path(cls, value: str | Path) -> Path:
        return value if isinstance(value, Path) else Path(value)

    @field_validator("geometry_tolerance", "line_min_length", "right_neighbor_max_gap")
    def _ensure_positive_distance(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("distances must be positive")
        return value

    @field_validator(
        "section_ownership_threshold",
        "table_ownership_threshold",
        "value_capture_threshold",
        "column_overlap_threshold",
        "vertical_overlap_threshold",
    )
    def _ensure_percentage(cls, value: float) -> float:
        if not 0.0 < value <= 100.0:
            raise ValueError("percentage thresholds must be between 0 and 100")
        return value

    @field_validator("anchor_phrase")
    def _ensure_anchor_phrase(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("anchor_phrase must not be blank")
        return value

    @field_validator("anchor_max_elements")
    def _ensure_anchor_max_elements(cls, value: int) -> int:
        if value < 1:
            raise ValueError("anchor_max_elements must be at least 1")
        return value

    @field_validator("anchor_length_slack")
    def _ensure_anchor_length_slack(cls, value: int) -> int:
        if value < 0:
            raise ValueError("anchor_length_slack must not be negative")
        return value

    @field_validator("anchor_max_edit_distance")
    def _ensure_anchor_max_edit_distance(cls, value: int) -> int:
        if not 0 <= value <= 2:
            raise ValueError("anchor_max_edit_distance must be between 0 and 2")
        return value

    @field_validator("max_pages")
    def _ensure_max_pages(cls, value: int) -> int:
        if value < 1:
            raise ValueError("max_pages must be a positive integer")
        return value

    @field_validator("http_max_retries")
    def _ensure_http_max_retries(cls, value: int) -> int:
        if value < 0:
            raise ValueError("http_max_retries must not be negative")
        return value
