"""Decoded page structures exchanged with the PDF decoding layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Tuple

Matrix = Tuple[float, float, float, float, float, float]

IDENTITY_MATRIX: Matrix = (1.0, 0.0, 0.0, 1.0, 0.0, 0.0)


class DrawingOpcode(str, Enum):
    """Drawing operators the layout engine understands."""

    SAVE = "save"
    RESTORE = "restore"
    TRANSFORM = "transform"
    CONSTRUCT_PATH = "construct_path"
    FILL = "fill"
    END_PATH = "end_path"  # stroke or no-op painting; ends the current path


class PathCommand(str, Enum):
    """Path construction sub-commands and the number of arguments each consumes."""

    MOVE_TO = "move_to"
    LINE_TO = "line_to"
    CURVE_TO = "curve_to"
    CURVE_TO_SHORT = "curve_to_short"
    RECTANGLE = "rectangle"
    CLOSE = "close"

    @property
    def arity(self) -> int:
        return _PATH_COMMAND_ARITY[self]


_PATH_COMMAND_ARITY = {
    PathCommand.MOVE_TO: 2,
    PathCommand.LINE_TO: 2,
    PathCommand.CURVE_TO: 6,
    PathCommand.CURVE_TO_SHORT: 4,
    PathCommand.RECTANGLE: 4,
    PathCommand.CLOSE: 0,
}


@dataclass(frozen=True)
class DrawingOperator:
    """One drawing instruction.

    TRANSFORM carries the six matrix numbers in ``args``. CONSTRUCT_PATH carries
    its sub-commands in ``commands`` and their arguments, flattened, in ``args``.
    """

    opcode: DrawingOpcode
    args: Tuple[float, ...] = ()
    commands: Tuple[PathCommand, ...] = ()


@dataclass(frozen=True)
class TextRun:
    """Text shown by one show-text operation, positioned by its rendering matrix."""

    text: str
    transform: Matrix
    width: float


@dataclass
class DecodedPage:
    """Everything the layout engine needs from one page of a document."""

    page_number: int  # 1-based
    page_count: int
    rotation: int = 0  # degrees, one of 0, 90, 180, 270
    operators: List[DrawingOperator] = field(default_factory=list)
    text_runs: List[TextRun] = field(default_factory=list)
