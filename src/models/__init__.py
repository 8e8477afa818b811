"""Data models for notice extraction."""

from models.notice_data import (
    Cell,
    Element,
    Line,
    Point,
    Record,
    Rectangle,
    Section,
    dataclass_to_dict,
)
from models.page_data import (
    IDENTITY_MATRIX,
    DecodedPage,
    DrawingOpcode,
    DrawingOperator,
    Matrix,
    PathCommand,
    TextRun,
)

__all__ = [
    "Cell",
    "DecodedPage",
    "DrawingOpcode",
    "DrawingOperator",
    "Element",
    "IDENTITY_MATRIX",
    "Line",
    "Matrix",
    "PathCommand",
    "Point",
    "Record",
    "Rectangle",
    "Section",
    "TextRun",
    "dataclass_to_dict",
]
