"""PDF decoding into drawing operators and positioned text runs.

Each page is decoded from a freshly opened copy of the whole document, which
is closed again before the next page. Large register documents otherwise
keep every parsed page alive and exhaust memory.
"""

from __future__ import annotations

import gc
import io
import logging
import math
from typing import List, Optional, Sequence, Tuple

import pdfplumber
from pdfminer.converter import PDFPageAggregator
from pdfminer.layout import LTChar
from pdfminer.pdfinterp import PDFContentParser, PDFPageInterpreter, PDFResourceManager
from pdfminer.psparser import PSEOF, PSKeyword, keyword_name

from config.settings import Settings
from models.page_data import (
    IDENTITY_MATRIX,
    DecodedPage,
    DrawingOpcode,
    DrawingOperator,
    PathCommand,
    TextRun,
)


class DocumentDecodeError(Exception):
    """The document cannot be opened or its pages cannot be enumerated."""


class PageDecodeError(Exception):
    """A single page cannot be decoded; the rest of the document may still be usable."""

    def __init__(self, page_number: int, message: str) -> None:
        super().__init__(f"Page {page_number}: {message}")
        self.page_number = page_number


class PageCountMismatchError(DocumentDecodeError):
    """Re-parsing the document reported a different number of pages."""


_SIMPLE_OPCODES = {
    "q": DrawingOpcode.SAVE,
    "Q": DrawingOpcode.RESTORE,
    "cm": DrawingOpcode.TRANSFORM,
}

_PATH_COMMANDS = {
    "m": PathCommand.MOVE_TO,
    "l": PathCommand.LINE_TO,
    "c": PathCommand.CURVE_TO,
    "v": PathCommand.CURVE_TO_SHORT,
    "y": PathCommand.CURVE_TO_SHORT,
    "re": PathCommand.RECTANGLE,
    "h": PathCommand.CLOSE,
}

_FILL_OPERATORS = frozenset({"f", "F", "f*", "B", "B*", "b", "b*"})
_END_PATH_OPERATORS = frozenset({"S", "s", "n"})


def translate_operators(stream: Sequence[Tuple[str, Sequence[object]]]) -> List[DrawingOperator]:
    """Translate ``(operator, operands)`` pairs into drawing operators.

    Consecutive path construction operators are merged into a single
    CONSTRUCT_PATH operator; everything else the layout engine does not need
    is dropped.
    """
    operators: List[DrawingOperator] = []
    commands: List[PathCommand] = []
    path_args: List[float] = []

    def flush_path() -> None:
        if commands:
            operators.append(
                DrawingOperator(
                    DrawingOpcode.CONSTRUCT_PATH, tuple(path_args), tuple(commands)
                )
            )
            commands.clear()
            path_args.clear()

    for name, operands in stream:
        command = _PATH_COMMANDS.get(name)
        if command is not None:
            numbers = _numbers(operands)
            if len(numbers) != command.arity:
                # Malformed operator; keep argument offsets aligned for the rest of the path
                continue
            commands.append(command)
            path_args.extend(numbers)
            continue

        flush_path()
        if name in _SIMPLE_OPCODES:
            opcode = _SIMPLE_OPCODES[name]
            args = _numbers(operands) if opcode == DrawingOpcode.TRANSFORM else ()
            if opcode == DrawingOpcode.TRANSFORM and len(args) != 6:
                continue
            operators.append(DrawingOperator(opcode, tuple(args)))
        elif name in _FILL_OPERATORS:
            operators.append(DrawingOperator(DrawingOpcode.FILL))
        elif name in _END_PATH_OPERATORS:
            operators.append(DrawingOperator(DrawingOpcode.END_PATH))

    flush_path()
    return operators


def _numbers(operands: Sequence[object]) -> List[float]:
    return [
        float(value)
        for value in operands
        if isinstance(value, (int, float)) and not isinstance(value, bool)
    ]


class _TextRunCollector(PDFPageAggregator):
    """Layout device recording one text run per show-text operation."""

    def __init__(self, rsrcmgr: PDFResourceManager) -> None:
        super().__init__(rsrcmgr, laparams=None)
        self.text_runs: List[TextRun] = []

    def render_string(self, textstate, seq, *args, **kwargs):  # type: ignore[override]
        start = len(self.cur_item)
        result = super().render_string(textstate, seq, *args, **kwargs)
        chars = [item for item in list(self.cur_item)[start:] if isinstance(item, LTChar)]
        if chars:
            self.text_runs.append(_text_run(chars, textstate.fontsize))
        return result


def _text_run(chars: Sequence[LTChar], fontsize: float) -> TextRun:
    """Text run whose origin and width cover the glyphs drawn.

    A negative font size (or horizontal scaling) mirrors the glyphs, so the
    advance runs backwards from the first glyph's origin and the glyphs hang
    below the baseline. The origin is moved to the corner the glyphs
    actually start from and the basis is kept positive.
    """
    a, b, c, d, e, f = chars[0].matrix
    advance = sum(char.adv for char in chars)
    if advance < 0:
        e += advance * a
        f += advance * b
    if fontsize < 0:
        e += c * fontsize
        f += d * fontsize
    scale = abs(fontsize)
    return TextRun(
        text="".join(char.get_text() for char in chars),
        transform=(a * scale, b * scale, c * scale, d * scale, e, f),
        width=abs(advance) * math.hypot(a, b),
    )


class PdfDecoder:
    """Decode PDF documents page by page."""

    def __init__(self, settings: Settings, logger: logging.Logger) -> None:
        self._settings = settings
        self._logger = logger

    def page_count(self, data: bytes) -> int:
        """Number of pages in the document.

        Raises:
            DocumentDecodeError: If the document cannot be opened
        """
        try:
            with pdfplumber.open(io.BytesIO(data)) as pdf:
                return len(pdf.pages)
        except Exception as exc:
            raise DocumentDecodeError(f"Unable to open PDF document: {exc}") from exc

    def decode_page(
        self, data: bytes, page_number: int, expected_count: Optional[int] = None
    ) -> DecodedPage:
        """Decode a single 1-based page from a fresh copy of the document.

        Raises:
            DocumentDecodeError: If the document cannot be re-opened
            PageCountMismatchError: If the page count differs from ``expected_count``
            PageDecodeError: If this page's content cannot be decoded
        """
        try:
            pdf = pdfplumber.open(io.BytesIO(data))
        except Exception as exc:
            raise DocumentDecodeError(f"Unable to re-open PDF document: {exc}") from exc

        try:
            count = len(pdf.pages)
            if expected_count is not None and count != expected_count:
                raise PageCountMismatchError(
                    f"Document reported {expected_count} pages but now reports {count}"
                )
            if not 1 <= page_number <= count:
                raise PageDecodeError(page_number, f"page out of range (1..{count})")

            page = pdf.pages[page_number - 1]
            try:
                operators = translate_operators(self._content_stream(page.page_obj))
                text_runs = self._text_runs(page.page_obj)
            except Exception as exc:
                raise PageDecodeError(page_number, str(exc) or type(exc).__name__) from exc

            decoded = DecodedPage(
                page_number=page_number,
                page_count=count,
                rotation=int(page.rotation) % 360,
                operators=operators,
                text_runs=text_runs,
            )
        finally:
            pdf.close()
            gc.collect()

        self._logger.debug(
            "Decoded page %d/%d: %d operators, %d text runs, rotation %d",
            page_number,
            decoded.page_count,
            len(decoded.operators),
            len(decoded.text_runs),
            decoded.rotation,
        )
        return decoded

    @staticmethod
    def _content_stream(page_obj) -> List[Tuple[str, List[object]]]:
        """Raw ``(operator, operands)`` pairs of the page content stream."""
        parser = PDFContentParser(page_obj.contents)
        stream: List[Tuple[str, List[object]]] = []
        operands: List[object] = []
        while True:
            try:
                _, obj = parser.nextobject()
            except PSEOF:
                break
            if isinstance(obj, PSKeyword):
                stream.append((keyword_name(obj), operands))
                operands = []
            else:
                operands.append(obj)
        return stream

    @staticmethod
    def _text_runs(page_obj) -> List[TextRun]:
        """Text runs in unrotated user space (identity page matrix)."""
        rsrcmgr = PDFResourceManager()
        device = _TextRunCollector(rsrcmgr)
        interpreter = PDFPageInterpreter(rsrcmgr, device)
        device.begin_page(page_obj, IDENTITY_MATRIX)
        interpreter.render_contents(page_obj.resources, page_obj.contents, ctm=IDENTITY_MATRIX)
        device.end_page(page_obj)
        return device.text_runs
