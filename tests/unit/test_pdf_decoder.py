"""Unit tests for content stream translation."""
from unittest.mock import MagicMock

import pytest

from models.page_data import DrawingOpcode, DrawingOperator, PathCommand
from pdf_decoder import (
    DocumentDecodeError,
    PageCountMismatchError,
    PageDecodeError,
    _text_run,
    translate_operators,
)


@pytest.mark.unit
class TestTranslateOperators:
    """Test mapping of content stream operators to drawing operators."""

    def test_filled_rectangle(self):
        # Arrange
        stream = [
            ("q", []),
            ("cm", [1, 0, 0, 1, 10, 20]),
            ("re", [0, 0, 100, 0.5]),
            ("f", []),
            ("Q", []),
        ]

        # Act
        operators = translate_operators(stream)

        # Assert
        assert operators == [
            DrawingOperator(DrawingOpcode.SAVE),
            DrawingOperator(DrawingOpcode.TRANSFORM, (1.0, 0.0, 0.0, 1.0, 10.0, 20.0)),
            DrawingOperator(DrawingOpcode.CONSTRUCT_PATH, (0.0, 0.0, 100.0, 0.5), (PathCommand.RECTANGLE,)),
            DrawingOperator(DrawingOpcode.FILL),
            DrawingOperator(DrawingOpcode.RESTORE),
        ]

    def test_consecutive_path_operators_merged(self):
        stream = [("m", [0, 0]), ("l", [10, 0]), ("l", [10, 10]), ("h", []), ("S", [])]
        operators = translate_operators(stream)
        assert operators[0].opcode == DrawingOpcode.CONSTRUCT_PATH
        assert operators[0].commands == (
            PathCommand.MOVE_TO,
            PathCommand.LINE_TO,
            PathCommand.LINE_TO,
            PathCommand.CLOSE,
        )
        assert operators[0].args == (0.0, 0.0, 10.0, 0.0, 10.0, 10.0)
        assert operators[1] == DrawingOperator(DrawingOpcode.END_PATH)

    @pytest.mark.parametrize("name", ["f", "F", "f*", "B", "B*", "b", "b*"])
    def test_fill_operators(self, name):
        assert translate_operators([(name, [])]) == [DrawingOperator(DrawingOpcode.FILL)]

    @pytest.mark.parametrize("name", ["S", "s", "n"])
    def test_end_path_operators(self, name):
        assert translate_operators([(name, [])]) == [DrawingOperator(DrawingOpcode.END_PATH)]

    def test_text_and_colour_operators_dropped(self):
        stream = [("BT", []), ("Tf", ["F1", 10]), ("Tj", [b"hello"]), ("ET", []), ("rg", [0, 0, 0])]
        assert translate_operators(stream) == []

    def test_other_operator_ends_path_construction(self):
        stream = [("re", [0, 0, 10, 10]), ("rg", [1, 0, 0]), ("re", [0, 20, 10, 10]), ("f", [])]
        operators = translate_operators(stream)
        assert [operator.opcode for operator in operators] == [
            DrawingOpcode.CONSTRUCT_PATH,
            DrawingOpcode.CONSTRUCT_PATH,
            DrawingOpcode.FILL,
        ]

    def test_wrong_arity_command_skipped(self):
        stream = [("re", [0, 0, 10]), ("re", [0, 0, 10, 10]), ("f", [])]
        operators = translate_operators(stream)
        assert operators[0].commands == (PathCommand.RECTANGLE,)
        assert operators[0].args == (0.0, 0.0, 10.0, 10.0)

    def test_malformed_transform_skipped(self):
        assert translate_operators([("cm", [1, 0, 0, 1])]) == []

    def test_non_numeric_operands_ignored(self):
        operators = translate_operators([("re", [0, 0, 10, True, 10]), ("f", [])])
        assert operators[0].args == (0.0, 0.0, 10.0, 10.0)

    def test_unterminated_path_flushed(self):
        operators = translate_operators([("re", [0, 0, 10, 10])])
        assert [operator.opcode for operator in operators] == [DrawingOpcode.CONSTRUCT_PATH]


@pytest.mark.unit
class TestDecodeErrors:
    def test_page_error_carries_page_number(self):
        error = PageDecodeError(4, "bad stream")
        assert error.page_number == 4
        assert str(error) == "Page 4: bad stream"

    def test_count_mismatch_is_document_error(self):
        assert issubclass(PageCountMismatchError, DocumentDecodeError)


def glyph(text, adv, matrix=(1.0, 0.0, 0.0, 1.0, 100.0, 700.0)):
    char = MagicMock()
    char.matrix = matrix
    char.adv = adv
    char.get_text.return_value = text
    return char


@pytest.mark.unit
class TestTextRun:
    """Test text run geometry built from laid-out glyphs."""

    def test_upright_run(self):
        run = _text_run([glyph("N", 7.2), glyph("O", 7.8)], 10.0)
        assert run.text == "NO"
        assert run.transform == pytest.approx((10.0, 0.0, 0.0, 10.0, 100.0, 700.0))
        assert run.width == pytest.approx(15.0)

    def test_negative_font_size_gives_positive_box_over_glyphs(self):
        # Arrange: mirrored glyphs advance leftwards and hang below the baseline
        chars = [glyph("a", -5.0), glyph("b", -5.0)]

        # Act
        run = _text_run(chars, -10.0)

        # Assert
        assert run.width == pytest.approx(10.0)
        assert run.transform == pytest.approx((10.0, 0.0, 0.0, 10.0, 90.0, 690.0))

    def test_scaled_basis_applies_to_width(self):
        run = _text_run([glyph("x", 5.0, matrix=(2.0, 0.0, 0.0, 2.0, 0.0, 0.0))], 10.0)
        assert run.width == pytest.approx(10.0)
