"""
Parser for the parenthesized expression language.
Turns a flat source string into an expression tree (parenlang.system.ast_nodes).
String literal atoms are decoded with the 'sexpdata' library.
"""

import logging
import re
from typing import Callable, Dict, List

import sexpdata

from parenlang.system.ast_nodes import (
    BinaryOp, BinaryOperator, Bool, Call, Define, Empty, EnumDecl, Expr, For,
    If, Input, Let, Not, Number, Print, Sequence, Set, Str, Var, While,
)
from parenlang.system.errors import ParseError
from parenlang.system.types import INT32_MAX, INT32_MIN

logger = logging.getLogger(__name__)

_INT_PATTERN = re.compile(r"^[+-]?[0-9]+$")
_WHITESPACE_RUN = re.compile(r"\s+")


def normalize_source(source: str) -> str:
    """
    Collapses newlines and runs of whitespace into single spaces and trims the result.
    Whitespace inside string literals is kept as written.
    """
    pieces: List[str] = []
    chunk_start = 0
    in_string = False
    escaped = False
    for index, char in enumerate(source):
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
                pieces.append(source[chunk_start:index + 1])
                chunk_start = index + 1
        elif char == '"':
            pieces.append(_WHITESPACE_RUN.sub(" ", source[chunk_start:index]))
            chunk_start = index
            in_string = True
    tail = source[chunk_start:]
    # An unterminated string keeps its text; get_expressions reports it
    pieces.append(tail if in_string else _WHITESPACE_RUN.sub(" ", tail))
    return "".join(pieces).strip()


def get_expressions(text: str) -> List[str]:
    """
    Splits text into its top-level sub-expressions.

    A space separates tokens only at parenthesis depth 0 and outside string
    literals; a parenthesized group that closes back to depth 0 ends a token.

        get_expressions('+ 1 (* 2 3)')     -> ['+', '1', '(* 2 3)']
        get_expressions('print "a b" 3')   -> ['print', '"a b"', '3']

    Raises:
        ParseError: On a stray ')', an unclosed '(' or an unterminated string.
    """
    tokens: List[str] = []
    current: List[str] = []
    depth = 0
    in_string = False
    escaped = False

    def emit() -> None:
        token = "".join(current).strip()
        if token:
            tokens.append(token)
        current.clear()

    for char in text:
        if in_string:
            current.append(char)
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
        elif char == '"':
            in_string = True
            current.append(char)
        elif char == "(":
            depth += 1
            current.append(char)
        elif char == ")":
            if depth == 0:
                raise ParseError("Unbalanced parentheses: unexpected ')'.", text)
            depth -= 1
            current.append(char)
            if depth == 0:
                emit()
        elif char.isspace() and depth == 0:
            emit()
        else:
            current.append(char)

    if in_string:
        raise ParseError("Unterminated string literal.", text)
    if depth != 0:
        raise ParseError("Unbalanced parentheses: missing ')'.", text, error_details=f"{depth} unclosed")
    emit()
    logger.debug(f"get_expressions: '{text}' -> {tokens}")
    return tokens


def parse_int32(text: str):
    """Returns the int32 spelled by text, or None when text is not one."""
    if not _INT_PATTERN.match(text):
        return None
    number = int(text)
    if number < INT32_MIN or number > INT32_MAX:
        return None
    return number


class SexpParser:
    """
    Parses source strings into expression trees.

    Never returns partial trees: a malformed form raises ParseError. Leaf text
    that is not a literal becomes a Var, resolved (or not) at evaluation time.
    """

    def __init__(self):
        self.FORM_BUILDERS: Dict[str, Callable[[List[str], str], Expr]] = {
            "!": self._build_not,
            "if": self._build_if,
            "let": self._build_let,
            "set": self._build_set,
            "while": self._build_while,
            "for": self._build_for,
            "def": self._build_define,
            "call": self._build_call,
            "enum": self._build_enum,
            "print": self._build_print,
            "input": self._build_input,
        }
        for operator in BinaryOperator:
            self.FORM_BUILDERS[operator.value] = self._build_binary

    def parse_string(self, source: str) -> Expr:
        """
        Parses a source string into an expression tree.

        Args:
            source: Program text. May contain several top-level expressions,
                    which become one Sequence.

        Returns:
            The root node of the tree; Empty for blank input.

        Raises:
            ParseError: If the text is structurally invalid.
            TypeError: If the input is not a string.
        """
        if not isinstance(source, str):
            raise TypeError("Input must be a string.")

        text = normalize_source(source)
        if not text:
            return Empty()

        expressions = get_expressions(text)
        if len(expressions) > 1:
            logger.debug(f"Parsed {len(expressions)} top-level expressions into a Sequence")
            return Sequence(items=[self._parse_expression(e) for e in expressions], source=text)
        return self._parse_expression(expressions[0])

    def _parse_expression(self, text: str) -> Expr:
        """Parses exactly one already-normalized expression."""
        text = text.strip()
        if not text:
            return Empty()
        if not text.startswith("("):
            return self._parse_leaf(text)
        if not text.endswith(")"):
            # e.g. '(a)b' glued together: more than one expression
            return self.parse_string(text)

        tokens = get_expressions(text[1:-1])
        if not tokens:
            return Sequence(items=[], source=text)

        builder = self.FORM_BUILDERS.get(tokens[0])
        if builder is None:
            logger.debug(f"No keyword for head '{tokens[0]}', building Sequence")
            return Sequence(items=[self._parse_expression(t) for t in tokens], source=text)
        return builder(tokens, text)

    def _parse_leaf(self, text: str) -> Expr:
        number = parse_int32(text)
        if number is not None:
            return Number(value=number)
        if text == "true":
            return Bool(value=True)
        if text == "false":
            return Bool(value=False)
        if text.startswith('"'):
            return Str(value=self._decode_string(text))
        return Var(name=text)

    def _decode_string(self, text: str) -> str:
        if len(text) < 2 or not text.endswith('"'):
            raise ParseError("Unterminated string literal.", text)
        try:
            decoded = sexpdata.loads(text)
        except Exception as e:
            logger.error(f"String literal decoding failed: {e}")
            raise ParseError("Invalid string literal.", text, error_details=str(e)) from e
        if not isinstance(decoded, str) and callable(getattr(decoded, "value", None)):
            decoded = decoded.value()
        if not isinstance(decoded, str):
            raise ParseError("Invalid string literal.", text, error_details=f"decoded to {type(decoded).__name__}")
        return str(decoded)

    def _operands(self, tokens: List[str], source: str, count: int) -> List[Expr]:
        keyword = tokens[0]
        operands = tokens[1:]
        if len(operands) != count:
            raise ParseError(
                f"'{keyword}' expects {count} operand{'s' if count != 1 else ''}, got {len(operands)}.",
                source,
            )
        return [self._parse_expression(t) for t in operands]

    # --- Form builders ---

    def _build_binary(self, tokens: List[str], source: str) -> Expr:
        left, right = self._operands(tokens, source, 2)
        return BinaryOp(op=BinaryOperator(tokens[0]), left=left, right=right, source=source)

    def _build_not(self, tokens: List[str], source: str) -> Expr:
        (operand,) = self._operands(tokens, source, 1)
        return Not(operand=operand, source=source)

    def _build_if(self, tokens: List[str], source: str) -> Expr:
        condition, then_branch, else_branch = self._operands(tokens, source, 3)
        return If(condition=condition, then_branch=then_branch, else_branch=else_branch, source=source)

    def _build_let(self, tokens: List[str], source: str) -> Expr:
        target, value = self._operands(tokens, source, 2)
        return Let(target=target, value=value, source=source)

    def _build_set(self, tokens: List[str], source: str) -> Expr:
        target, value = self._operands(tokens, source, 2)
        return Set(target=target, value=value, source=source)

    def _build_while(self, tokens: List[str], source: str) -> Expr:
        condition, body = self._operands(tokens, source, 2)
        return While(condition=condition, body=body, source=source)

    def _build_for(self, tokens: List[str], source: str) -> Expr:
        var, lower, upper, body = self._operands(tokens, source, 4)
        return For(var=var, lower=lower, upper=upper, body=body, source=source)

    def _build_define(self, tokens: List[str], source: str) -> Expr:
        if len(tokens) < 3:
            raise ParseError("'def' requires a name and a body: (def name params... body)", source)
        return Define(
            name=self._parse_expression(tokens[1]),
            params=[self._parse_expression(t) for t in tokens[2:-1]],
            body=self._parse_expression(tokens[-1]),
            source=source,
        )

    def _build_call(self, tokens: List[str], source: str) -> Expr:
        if len(tokens) < 2:
            raise ParseError("'call' requires a function name: (call name args...)", source)
        return Call(
            name=self._parse_expression(tokens[1]),
            args=[self._parse_expression(t) for t in tokens[2:]],
            source=source,
        )

    def _build_enum(self, tokens: List[str], source: str) -> Expr:
        if len(tokens) < 2:
            raise ParseError("'enum' requires a name: (enum name members...)", source)
        return EnumDecl(
            name=self._parse_expression(tokens[1]),
            members=[self._parse_expression(t) for t in tokens[2:]],
            source=source,
        )

    def _build_print(self, tokens: List[str], source: str) -> Expr:
        return Print(items=[self._parse_expression(t) for t in tokens[1:]])

    def _build_input(self, tokens: List[str], source: str) -> Expr:
        if len(tokens) > 1:
            logger.debug(f"'input' ignores its {len(tokens) - 1} argument(s): {source}")
        return Input()


_default_parser = SexpParser()


def token_tree(source: str) -> Expr:
    """Returns the expression tree for a source string."""
    return _default_parser.parse_string(source)
