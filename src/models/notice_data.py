"""Page geometry and record structures using dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, List, Optional


@dataclass(frozen=True)
class Point:
    """Page-space coordinate."""

    x: float
    y: float


@dataclass(frozen=True)
class Line:
    """Directed line segment from (x1, y1) to (x2, y2)."""

    x1: float
    y1: float
    x2: float
    y2: float

    @property
    def is_degenerate(self) -> bool:
        return self.x1 == self.x2 and self.y1 == self.y2


@dataclass(frozen=True)
class Rectangle:
    """Axis-aligned rectangle. Width and height are never negative."""

    x: float
    y: float
    width: float
    height: float

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValueError(
                f"Rectangle size must not be negative (width={self.width}, height={self.height})"
            )

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def area(self) -> float:
        return self.width * self.height

    def bounds(self) -> Rectangle:
        """Plain rectangle covering the same region (drops any payload)."""
        return Rectangle(self.x, self.y, self.width, self.height)


@dataclass(frozen=True)
class Element(Rectangle):
    """Text run positioned on a page."""

    text: str = ""


@dataclass(frozen=True)
class Cell(Rectangle):
    """Reconstructed table cell and the elements it owns (in assignment order)."""

    elements: List[Element] = field(default_factory=list, compare=False)

    @property
    def text(self) -> str:
        return "".join(element.text for element in self.elements)

    def joined_text(self, separator: str = "") -> str:
        return separator.join(element.text for element in self.elements)


@dataclass
class Section:
    """Vertical window of a page attributed to one record."""

    start_element: Element
    top: float
    bottom: float
    elements: List[Element] = field(default_factory=list)
    cells: List[Cell] = field(default_factory=list)


@dataclass
class Record:
    """Development application extracted from a notice document."""

    identifier: str
    address: str
    description: str
    received_date: Optional[date] = None
    source_url: str = ""


def dataclass_to_dict(obj: Any) -> Any:
    """Recursively convert dataclass to dict for JSON serialization.

    Args:
        obj: Dataclass instance, list, dict, or primitive value

    Returns:
        Dictionary or primitive value suitable for JSON serialization
    """
    if obj is None:
        return None
    if isinstance(obj, list):
        return [dataclass_to_dict(item) for item in obj]
    if isinstance(obj, dict):
        return {key: dataclass_to_dict(value) for key, value in obj.items()}
    if isinstance(obj, date):
        return obj.isoformat()
    if hasattr(obj, "__dataclass_fields__"):
        return {
            key: dataclass_to_dict(value) for key, value in obj.__dict__.items()
        }
    return obj
