"""
Processor for primitives.
Contains the PrimitiveProcessor class, which applies the built-in operators
(arithmetic, comparison, boolean connectives, negation) and the console I/O forms.
"""
import logging
from typing import TYPE_CHECKING, Callable, Dict

from parenlang.sexp_evaluator.sexp_environment import Environment
from parenlang.sexp_parser.sexp_parser import parse_int32
from parenlang.system.ast_nodes import BinaryOp, BinaryOperator, Input, Not, Print
from parenlang.system.errors import DivisionByZeroError
from parenlang.system.types import (
    EMPTY, BoolValue, NumberValue, StrValue, Value, wrap_int32,
)

if TYPE_CHECKING:
    from .sexp_evaluator import SexpEvaluator

logger = logging.getLogger(__name__)


def truncating_div(left: int, right: int) -> int:
    """Integer division rounding toward zero."""
    quotient = abs(left) // abs(right)
    return quotient if (left < 0) == (right < 0) else -quotient


def truncating_mod(left: int, right: int) -> int:
    """Remainder of truncating_div; takes the sign of the dividend."""
    return left - right * truncating_div(left, right)


NUMERIC_OPERATIONS: Dict[BinaryOperator, Callable[[int, int], int]] = {
    BinaryOperator.ADD: lambda u, v: u + v,
    BinaryOperator.SUB: lambda u, v: u - v,
    BinaryOperator.MUL: lambda u, v: u * v,
    BinaryOperator.DIV: truncating_div,
    BinaryOperator.MOD: truncating_mod,
}

COMPARISONS: Dict[BinaryOperator, Callable[[int, int], bool]] = {
    BinaryOperator.EQUAL: lambda u, v: u == v,
    BinaryOperator.NOT_EQUAL: lambda u, v: u != v,
    BinaryOperator.GREATER_THAN: lambda u, v: u > v,
    BinaryOperator.GREATER_EQUAL: lambda u, v: u >= v,
    BinaryOperator.LESS_THAN: lambda u, v: u < v,
    BinaryOperator.LESS_EQUAL: lambda u, v: u <= v,
}

CONNECTIVES: Dict[BinaryOperator, Callable[[bool, bool], bool]] = {
    BinaryOperator.AND: lambda u, v: u and v,
    BinaryOperator.OR: lambda u, v: u or v,
}


class PrimitiveProcessor:
    """
    Applies primitives for the SexpEvaluator.
    Both operands of a binary primitive are always evaluated, left first,
    before the operator is applied.
    """
    def __init__(self, evaluator_instance: 'SexpEvaluator'):
        """
        Initializes the PrimitiveProcessor.

        Args:
            evaluator_instance: The SexpEvaluator used to evaluate operands and
                                to reach the console I/O capability.
        """
        self.evaluator = evaluator_instance
        logger.debug("PrimitiveProcessor initialized.")

    def apply_binary_primitive(self, node: BinaryOp, env: Environment) -> Value:
        left = self.evaluator.evaluate(node.left, env)
        right = self.evaluator.evaluate(node.right, env)

        if node.op in CONNECTIVES:
            u = self.evaluator.get_bool(left, node.source)
            v = self.evaluator.get_bool(right, node.source)
            result: Value = BoolValue(value=CONNECTIVES[node.op](u, v))
        else:
            u = self.evaluator.get_num(left, node.source)
            v = self.evaluator.get_num(right, node.source)
            if node.op in COMPARISONS:
                result = BoolValue(value=COMPARISONS[node.op](u, v))
            else:
                if node.op in (BinaryOperator.DIV, BinaryOperator.MOD) and v == 0:
                    logger.debug(f"  '{node.op.value}' by zero in {node.source}")
                    raise DivisionByZeroError(node.source)
                result = NumberValue(value=wrap_int32(NUMERIC_OPERATIONS[node.op](u, v)))

        logger.debug(f"  '{node.op.value}': {left!r}, {right!r} -> {result!r}")
        return result

    def apply_not_primitive(self, node: Not, env: Environment) -> Value:
        operand = self.evaluator.evaluate(node.operand, env)
        return BoolValue(value=not self.evaluator.get_bool(operand, node.source))

    def apply_print_primitive(self, node: Print, env: Environment) -> Value:
        """(print exprs...): writes each textual form as soon as it is evaluated, flushes at the end."""
        io = self.evaluator.io
        for item in node.items:
            io.write(self.evaluator.evaluate(item, env).render())
        io.flush()
        return EMPTY

    def apply_input_primitive(self, node: Input, env: Environment) -> Value:
        """(input): reads one line; an int32 becomes a Number, anything else the trimmed text."""
        line = self.evaluator.io.read_line().strip()
        number = parse_int32(line)
        if number is not None:
            return NumberValue(value=number)
        return StrValue(value=line)
