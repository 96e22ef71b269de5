"""
Tree-walking evaluator for the parenthesized expression language.
Parses and executes programs; dispatches every node kind to the special form
or primitive processor that implements it.
"""

import logging
from typing import Any, Callable, Dict, Optional

from parenlang.sexp_evaluator.console_io import ConsoleIO
from parenlang.sexp_evaluator.sexp_environment import Environment
from parenlang.sexp_evaluator.sexp_primitives import PrimitiveProcessor
from parenlang.sexp_evaluator.sexp_special_forms import SpecialFormProcessor
from parenlang.sexp_parser.sexp_parser import SexpParser
from parenlang.system.ast_nodes import (
    BinaryOp, Bool, Call, Define, Empty, EnumDecl, EnumElement, Expr, For, If,
    Input, Let, Not, Number, Print, Sequence, Set, Str, Var, While,
)
from parenlang.system.errors import LangError, ParseError, RecursionDepthError, TypeMismatchError
from parenlang.system.types import (
    EMPTY, BoolValue, EnumValue, NumberValue, StrValue, UnboundValue, Value, ValueType,
)

logger = logging.getLogger(__name__)


class SexpEvaluator:
    """
    Evaluates expression trees against an Environment.

    Evaluation is eager and strictly recursive. The first error raised anywhere
    in a sub-tree aborts the whole evaluation and propagates to the caller.
    """

    def __init__(self, io: Optional[ConsoleIO] = None):
        """
        Initializes the evaluator.

        Args:
            io: Console capability used by `print` and `input`. Defaults to the
                process's standard streams.
        """
        self.io = io if io is not None else ConsoleIO()
        self.parser = SexpParser()

        self.special_form_processor = SpecialFormProcessor(self)
        self.primitive_processor = PrimitiveProcessor(self)

        self.NODE_HANDLERS: Dict[type, Callable[[Any, Environment], Value]] = {
            Number: self._eval_number,
            Bool: self._eval_bool,
            Str: self._eval_str,
            EnumElement: self._eval_enum_element,
            Var: self._eval_var,
            Empty: self._eval_empty,
            BinaryOp: self.primitive_processor.apply_binary_primitive,
            Not: self.primitive_processor.apply_not_primitive,
            Print: self.primitive_processor.apply_print_primitive,
            Input: self.primitive_processor.apply_input_primitive,
            If: self.special_form_processor.handle_if_form,
            While: self.special_form_processor.handle_while_form,
            For: self.special_form_processor.handle_for_form,
            Sequence: self.special_form_processor.handle_sequence_form,
            Let: self.special_form_processor.handle_let_form,
            Set: self.special_form_processor.handle_set_form,
            Define: self.special_form_processor.handle_define_form,
            Call: self.special_form_processor.handle_call_form,
            EnumDecl: self.special_form_processor.handle_enum_form,
        }
        logger.debug(f"SexpEvaluator initialized with handlers for: {[t.__name__ for t in self.NODE_HANDLERS]}")

    # --- Entry points ---

    def execute(self, expr: Expr) -> Value:
        """Evaluates expr in a fresh, empty environment."""
        return self.evaluate(expr, Environment())

    def evaluate_string(self, source: str, env: Optional[Environment] = None) -> Value:
        """
        Parses and evaluates a source string.

        Args:
            source: Program text.
            env: Environment to evaluate in. A fresh one is used when omitted;
                 passing one keeps bindings across calls (the REPL does this).

        Raises:
            ParseError: If the source is malformed.
            LangError: If evaluation fails. Exhausting the host stack is
                       reported as RecursionDepthError.
        """
        logger.info(f"Evaluating source: {source[:100]}...")
        try:
            tree = self.parser.parse_string(source)
            logger.debug(f"Parsed tree: {tree!r}")
            result = self.evaluate(tree, env if env is not None else Environment())
            logger.info(f"Finished evaluating. Result: {result!r}")
            return result
        except ParseError as e:
            logger.error(f"Parse error: {e}")
            raise
        except LangError as e:
            logger.error(f"Evaluation error: {e}")
            raise
        except RecursionError as e:
            logger.error("Evaluation exhausted the call stack")
            raise RecursionDepthError(source.strip(), error_details=str(e)) from e

    def evaluate(self, expr: Expr, env: Environment) -> Value:
        """Evaluates one node; dispatches on the node's class."""
        handler = self.NODE_HANDLERS.get(type(expr))
        if handler is None:
            raise TypeError(f"Cannot evaluate object of type {type(expr).__name__}: {expr!r}")
        return handler(expr, env)

    # --- Operand accessors ---

    def get_num(self, value: Value, source: str) -> int:
        """Payload of a NumberValue; anything else raises TypeMismatchError."""
        if isinstance(value, NumberValue):
            return value.value
        raise TypeMismatchError(ValueType.NUMBER, value.value_type(), source)

    def get_bool(self, value: Value, source: str) -> bool:
        """Payload of a BoolValue; anything else raises TypeMismatchError."""
        if isinstance(value, BoolValue):
            return value.value
        raise TypeMismatchError(ValueType.BOOL, value.value_type(), source)

    # --- Leaves ---

    def _eval_number(self, node: Number, env: Environment) -> Value:
        return NumberValue(value=node.value)

    def _eval_bool(self, node: Bool, env: Environment) -> Value:
        return BoolValue(value=node.value)

    def _eval_str(self, node: Str, env: Environment) -> Value:
        return StrValue(value=node.value)

    def _eval_enum_element(self, node: EnumElement, env: Environment) -> Value:
        return EnumValue(name=node.name)

    def _eval_empty(self, node: Empty, env: Environment) -> Value:
        return EMPTY

    def _eval_var(self, node: Var, env: Environment) -> Value:
        """
        Bound names give their value, re-resolved while that value is itself an
        unresolved variable: after `(let x y)`, reading x follows y's current
        binding. Registered enum members give their EnumValue.

        Reading an unbound name is not an error: it yields an UnboundValue, which
        the operand accessors reject with a TypeMismatchError found Var. A chain
        that comes back to a name already visited, as in `(let x x)`, stops there.
        """
        name = node.name
        visited = set()
        while env.is_bound(name):
            value = env.lookup(name)
            if not isinstance(value, UnboundValue):
                return value
            visited.add(name)
            if value.name in visited:
                logger.debug(f"Variable '{node.name}' refers back to '{value.name}'")
                return value
            name = value.name
        if env.is_enum_member(name):
            return EnumValue(name=name)
        logger.debug(f"Variable '{name}' is unbound")
        return UnboundValue(name=name)


def execute(expr: Expr, io: Optional[ConsoleIO] = None) -> Value:
    """Executes a tree with fresh variable and function tables."""
    return SexpEvaluator(io=io).execute(expr)


def run(source: str, io: Optional[ConsoleIO] = None) -> Value:
    """Parses and executes a program."""
    return SexpEvaluator(io=io).evaluate_string(source)
