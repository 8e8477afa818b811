"""Filled-rectangle extraction from a page's drawing operators.

Register documents draw their table rules as thin filled rectangles, so the
only shapes of interest are ``rectangle`` path sub-commands that are filled.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

import numpy as np

from models.notice_data import Rectangle
from models.page_data import DrawingOpcode, DrawingOperator, PathCommand


def to_affine(matrix: Sequence[float]) -> np.ndarray:
    """Convert a PDF ``[a b c d e f]`` matrix into a 3x3 column-vector affine matrix."""
    a, b, c, d, e, f = (float(value) for value in matrix)
    return np.array([[a, c, e], [b, d, f], [0.0, 0.0, 1.0]])


def apply_affine(affine: np.ndarray, x: float, y: float) -> tuple[float, float]:
    px, py, _ = affine @ np.array([x, y, 1.0])
    return float(px), float(py)


class PrimitiveExtractor:
    """Walk drawing operators with a transform stack and collect filled rectangles."""

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    def extract_rectangles(self, operators: Sequence[DrawingOperator]) -> List[Rectangle]:
        """Return every filled rectangle in page space, in drawing order.

        Args:
            operators: Decoded drawing operators of one page

        Returns:
            Line-candidate rectangles (non-negative width and height)
        """
        transform = np.identity(3)
        stack: List[np.ndarray] = []
        pending: Optional[Rectangle] = None
        rectangles: List[Rectangle] = []

        for operator in operators:
            opcode = operator.opcode
            if opcode == DrawingOpcode.SAVE:
                stack.append(transform)
            elif opcode == DrawingOpcode.RESTORE:
                if stack:
                    transform = stack.pop()
                else:
                    self._logger.debug("Unbalanced restore operator ignored")
            elif opcode == DrawingOpcode.TRANSFORM:
                transform = transform @ to_affine(operator.args)
            elif opcode == DrawingOpcode.CONSTRUCT_PATH:
                rectangle = self._last_rectangle(operator, transform)
                if rectangle is not None:
                    pending = rectangle
            elif opcode == DrawingOpcode.FILL:
                if pending is not None:
                    rectangles.append(pending)
                    pending = None
            elif opcode == DrawingOpcode.END_PATH:
                pending = None

        self._logger.debug("Extracted %d filled rectangles", len(rectangles))
        return rectangles

    def _last_rectangle(
        self, operator: DrawingOperator, transform: np.ndarray
    ) -> Optional[Rectangle]:
        """Transform the last rectangle sub-command of a path, skipping other shapes."""
        rectangle: Optional[Rectangle] = None
        cursor = 0
        args = operator.args
        for command in operator.commands:
            if command == PathCommand.RECTANGLE:
                if cursor + 4 > len(args):
                    self._logger.debug("Truncated rectangle arguments ignored")
                    break
                x, y, width, height = args[cursor:cursor + 4]
                x1, y1 = apply_affine(transform, x, y)
                x2, y2 = apply_affine(transform, x + width, y + height)
                rectangle = Rectangle(
                    min(x1, x2), min(y1, y2), abs(x2 - x1), abs(y2 - y1)
                )
            cursor += command.arity
        return rectangle
