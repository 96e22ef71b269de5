"""
Unit tests for the parser: splitting, leaves, forms and malformed input.
"""

import pytest

from parenlang.sexp_parser.sexp_parser import (
    SexpParser, get_expressions, normalize_source, parse_int32, token_tree,
)
from parenlang.system.ast_nodes import (
    BinaryOp, BinaryOperator, Bool, Call, Define, Empty, EnumDecl, For, If,
    Input, Let, Not, Number, Print, Sequence, Set, Str, Var, While,
)
from parenlang.system.errors import ParseError
from parenlang.system.types import BoolValue, NumberValue, StrValue


@pytest.fixture
def parser():
    """Provides a SexpParser instance for tests."""
    return SexpParser()


# --- get_expressions ---

def test_split_nested_form():
    """Test that a nested form stays one token."""
    assert get_expressions("+ 1 (* 2 3)") == ["+", "1", "(* 2 3)"]

def test_split_keeps_spaces_inside_strings():
    """Test that spaces inside a string literal do not split it."""
    assert get_expressions('print "a b" 3') == ["print", '"a b"', "3"]

def test_split_parenthesized_head():
    """Test splitting when the first token is itself a form."""
    assert get_expressions("(let x 2) x") == ["(let x 2)", "x"]

def test_split_adjacent_groups_without_spaces():
    """Test that a closing parenthesis ends a token even without a space."""
    assert get_expressions("(a)(b) c") == ["(a)", "(b)", "c"]

def test_split_escaped_quote_does_not_close_string():
    """Test that an escaped quote stays inside the string literal."""
    assert get_expressions(r'print "say \"hi there\"" 1') == ["print", r'"say \"hi there\""', "1"]

def test_split_parens_inside_string_are_text():
    """Test that parentheses inside a string do not change depth."""
    assert get_expressions('print "(" 1') == ["print", '"("', "1"]

@pytest.mark.parametrize("text", ["a ) b", "(a b", '"open'])
def test_split_malformed_raises(text):
    """Test splitting unbalanced or unterminated text raises ParseError."""
    with pytest.raises(ParseError):
        get_expressions(text)


# --- normalize_source / parse_int32 ---

def test_normalize_collapses_whitespace():
    """Test newlines and whitespace runs collapse to single spaces."""
    assert normalize_source("  (+\n  1\n\t2)  \n") == "(+ 1 2)"

def test_normalize_preserves_string_contents():
    """Test whitespace inside string literals is kept."""
    assert normalize_source('(print  "a   b"\n  1)') == '(print "a   b" 1)'

@pytest.mark.parametrize("text, expected", [
    ("42", 42),
    ("-7", -7),
    ("+3", 3),
    ("2147483647", 2147483647),
    ("-2147483648", -2147483648),
    ("2147483648", None),
    ("1_000", None),
    ("4.5", None),
    ("", None),
])
def test_parse_int32(text, expected):
    """Test int32 recognition, including the range limits."""
    assert parse_int32(text) == expected


# --- Leaves ---

def test_parse_number():
    """Test parsing a positive integer literal."""
    assert token_tree("42") == Number(value=42)

def test_parse_negative_number():
    """Test parsing a negative integer literal."""
    assert token_tree("-7") == Number(value=-7)

def test_parse_out_of_range_integer_is_var():
    """Test integer text beyond int32 falls back to a Var."""
    assert token_tree("2147483648") == Var(name="2147483648")

def test_parse_booleans():
    """Test parsing true and false."""
    assert token_tree("true") == Bool(value=True)
    assert token_tree("false") == Bool(value=False)

def test_parse_string_literal():
    """Test parsing a quoted string."""
    assert token_tree('"hello world"') == Str(value="hello world")

def test_parse_string_with_escapes():
    """Test escaped quotes and backslashes are decoded."""
    assert token_tree(r'"say \"hi\" and \\ backslash"') == Str(value='say "hi" and \\ backslash')

def test_parse_symbol_is_var():
    """Test any other leaf text becomes a Var."""
    assert token_tree("my-var") == Var(name="my-var")

@pytest.mark.parametrize("source", ["", "   ", "\n\t \n"])
def test_parse_blank_is_empty(source):
    """Test blank input parses to Empty."""
    assert token_tree(source) == Empty()

def test_parse_rejects_non_string(parser):
    """Test parsing a non-string raises TypeError."""
    with pytest.raises(TypeError):
        parser.parse_string(42)


# --- Forms ---

def test_parse_nested_arithmetic():
    """Test nested binary operators keep their own source text."""
    assert token_tree("(+ 1 (* 2 3))") == BinaryOp(
        op=BinaryOperator.ADD,
        left=Number(value=1),
        right=BinaryOp(op=BinaryOperator.MUL, left=Number(value=2), right=Number(value=3), source="(* 2 3)"),
        source="(+ 1 (* 2 3))",
    )

@pytest.mark.parametrize("keyword", [op.value for op in BinaryOperator])
def test_every_binary_keyword(keyword):
    """Test every binary operator keyword builds a BinaryOp."""
    tree = token_tree(f"({keyword} a b)")
    assert isinstance(tree, BinaryOp)
    assert tree.op == BinaryOperator(keyword)
    assert tree.left == Var(name="a")
    assert tree.right == Var(name="b")

def test_source_text_is_normalized_form():
    """Test source text recorded on nodes is whitespace-normalized."""
    tree = token_tree("(+\n   1\n   2)")
    assert tree.source == "(+ 1 2)"

def test_parse_not():
    """Test parsing logical negation."""
    assert token_tree("(! (= 4 4))") == Not(
        operand=BinaryOp(op=BinaryOperator.EQUAL, left=Number(value=4), right=Number(value=4), source="(= 4 4)"),
        source="(! (= 4 4))",
    )

def test_parse_if():
    """Test parsing an if form."""
    tree = token_tree("(if true 1 2)")
    assert tree == If(condition=Bool(value=True), then_branch=Number(value=1), else_branch=Number(value=2), source="(if true 1 2)")

def test_parse_let_and_set():
    """Test parsing let and set forms."""
    assert token_tree("(let x 2)") == Let(target=Var(name="x"), value=Number(value=2), source="(let x 2)")
    assert token_tree("(set x 3)") == Set(target=Var(name="x"), value=Number(value=3), source="(set x 3)")

def test_parse_while():
    """Test parsing a while form."""
    tree = token_tree("(while (< i 3) (set i (+ i 1)))")
    assert isinstance(tree, While)
    assert tree.condition.op == BinaryOperator.LESS_THAN
    assert isinstance(tree.body, Set)

def test_parse_for():
    """Test parsing a for form."""
    tree = token_tree("(for i 1 10 (print i))")
    assert tree == For(
        var=Var(name="i"),
        lower=Number(value=1),
        upper=Number(value=10),
        body=Print(items=[Var(name="i")]),
        source="(for i 1 10 (print i))",
    )

def test_parse_define_with_grouped_params():
    """Test a parenthesized parameter list parses as one Sequence."""
    tree = token_tree("(def f (x y) (+ x y))")
    assert isinstance(tree, Define)
    assert tree.name == Var(name="f")
    assert tree.params == [Sequence(items=[Var(name="x"), Var(name="y")], source="(x y)")]
    assert tree.body.op == BinaryOperator.ADD

def test_parse_define_with_flat_params():
    """Test parameters written without parentheses."""
    tree = token_tree("(def f x y (+ x y))")
    assert tree.params == [Var(name="x"), Var(name="y")]

def test_parse_define_without_params():
    """Test a definition with only a name and a body."""
    tree = token_tree("(def f 1)")
    assert tree == Define(name=Var(name="f"), params=[], body=Number(value=1), source="(def f 1)")

def test_parse_call():
    """Test parsing a call with literal and compound arguments."""
    tree = token_tree("(call f 1 (+ 2 3))")
    assert isinstance(tree, Call)
    assert tree.name == Var(name="f")
    assert tree.args[0] == Number(value=1)
    assert isinstance(tree.args[1], BinaryOp)

def test_parse_enum():
    """Test parsing an enum declaration."""
    assert token_tree("(enum Color Red Green)") == EnumDecl(
        name=Var(name="Color"),
        members=[Var(name="Red"), Var(name="Green")],
        source="(enum Color Red Green)",
    )

def test_parse_print():
    """Test parsing print with several items."""
    assert token_tree('(print "a b" 3)') == Print(items=[Str(value="a b"), Number(value=3)])

def test_parse_input_ignores_arguments():
    """Test input takes no operands and drops any given."""
    assert token_tree("(input)") == Input()
    assert token_tree("(input 1 2)") == Input()


# --- Sequences ---

def test_parenthesized_head_is_sequence():
    """Test a form whose head is a form parses as a Sequence."""
    assert token_tree("((let x 2) x)") == Sequence(
        items=[Let(target=Var(name="x"), value=Number(value=2), source="(let x 2)"), Var(name="x")],
        source="((let x 2) x)",
    )

def test_unknown_keyword_is_sequence():
    """Test a head that is not a keyword parses as a Sequence."""
    assert token_tree("(foo 1 2)") == Sequence(
        items=[Var(name="foo"), Number(value=1), Number(value=2)],
        source="(foo 1 2)",
    )

def test_empty_parens_is_empty_sequence():
    """Test () parses to an empty Sequence."""
    assert token_tree("()") == Sequence(items=[], source="()")

def test_multiple_top_level_forms_are_sequence():
    """Test several top-level forms are wrapped in one Sequence."""
    tree = token_tree("(let x 1)\n(print x)")
    assert tree == Sequence(
        items=[Let(target=Var(name="x"), value=Number(value=1), source="(let x 1)"), Print(items=[Var(name="x")])],
        source="(let x 1) (print x)",
    )


# --- Malformed input ---

@pytest.mark.parametrize("source", [
    "(+ 1 2",
    "(+ 1 2))",
    '(print "unterminated)',
    "(+ 1)",
    "(+ 1 2 3)",
    "(! true false)",
    "(if true 1)",
    "(let x)",
    "(for i 1 10)",
    "(def f)",
    "(call)",
    "(enum)",
])
def test_malformed_source_raises_parse_error(source):
    """Test unbalanced text and wrong operand counts raise ParseError."""
    with pytest.raises(ParseError):
        token_tree(source)

def test_parse_error_keeps_source():
    """Test ParseError carries the offending form and a readable message."""
    with pytest.raises(ParseError) as exc_info:
        token_tree("(+ 1)")
    assert exc_info.value.source == "(+ 1)"
    assert "'+' expects 2 operands, got 1" in str(exc_info.value)


# --- Leaf round trip ---

@pytest.mark.parametrize("value, expected", [
    (NumberValue(value=5), Number(value=5)),
    (NumberValue(value=-12), Number(value=-12)),
    (BoolValue(value=True), Bool(value=True)),
    (BoolValue(value=False), Bool(value=False)),
    (StrValue(value="a b"), Str(value="a b")),
    (StrValue(value='with "quotes"'), Str(value='with "quotes"')),
])
def test_literal_round_trip(value, expected):
    """Test a value's source text parses back to the matching literal."""
    assert token_tree(value.to_source()) == expected
