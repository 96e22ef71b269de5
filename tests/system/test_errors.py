"""
Tests for the error types and their reports.
"""
import pytest

from parenlang.system.errors import (
    DEFAULT_COLOR, RED, DivisionByZeroError, LangError, OutOfBoundsError,
    ParseError, RecursionDepthError, TypeMismatchError, UndefVarError,
)
from parenlang.system.types import ValueType


def test_parse_error_is_value_error():
    """Test ParseError subclasses ValueError and formats its fields."""
    error = ParseError("Unbalanced parentheses: missing ')'.", "(+ 1", error_details="1 unclosed")
    assert isinstance(error, ValueError)
    assert str(error) == "Unbalanced parentheses: missing ')'.\nInput: '(+ 1'\nDetails: 1 unclosed"

def test_parse_error_describe():
    """Test the multi-line ParseError report."""
    error = ParseError("Unterminated string literal.", '"abc')
    assert error.describe() == '\n>>> ParseError:\n\n\t"abc\n\n\tUnterminated string literal.\n'

def test_type_mismatch_report():
    """Test the TypeError report lists expected and found types."""
    error = TypeMismatchError(ValueType.NUMBER, ValueType.BOOL, "(+ 1 true)")
    assert error.expected == "Number"
    assert error.found == "Bool"
    assert error.describe() == "\n>>> TypeError:\n\n\t(+ 1 true)\n\n\tExpected: Number\n\tFound: Bool\n"

def test_undefined_variable_report():
    """Test the Undefined Variable report."""
    error = UndefVarError("y", "(set y 1)")
    assert error.describe() == '\n>>> Undefined Variable:\n\n\t(set y 1)\n\n\tVariable "y" not found\n'

def test_out_of_bounds_report():
    """Test the OutOfBoundsError detail lines."""
    error = OutOfBoundsError(3, 5, "(get v 5)")
    assert error.describe().endswith("\tThe vector is of size: 3\n\tbut index is: 5\n")

def test_division_by_zero_report():
    """Test the DivisionByZeroError kind and message."""
    error = DivisionByZeroError("(/ 1 0)")
    assert error.kind == "DivisionByZeroError"
    assert "Attempted to divide by zero" in error.describe()

def test_recursion_depth_keeps_details():
    """Test RecursionDepthError includes the host error details."""
    error = RecursionDepthError("(call f)", error_details="maximum recursion depth exceeded")
    assert "Details: maximum recursion depth exceeded" in str(error)

def test_describe_with_color_highlights_fragment():
    """Test the source fragment is red only when color is requested."""
    error = DivisionByZeroError("(/ 1 0)")
    assert f"\t{RED}(/ 1 0){DEFAULT_COLOR}\n" in error.describe(color=True)
    assert RED not in error.describe(color=False)

@pytest.mark.parametrize("error", [
    TypeMismatchError("Number", "Str"),
    UndefVarError("x"),
    OutOfBoundsError(1, 2),
    DivisionByZeroError(),
    RecursionDepthError(),
])
def test_all_evaluation_errors_share_base(error):
    """Test every evaluation error is a LangError."""
    assert isinstance(error, LangError)
