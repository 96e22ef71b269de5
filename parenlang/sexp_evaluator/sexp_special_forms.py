"""
Processor for special forms.
Centralizes the evaluation rules of the forms that control evaluation order or
touch the environment: if, while, for, sequences, let, set, def, call and enum.
"""
import logging
from typing import TYPE_CHECKING, List

from parenlang.sexp_evaluator.sexp_environment import Environment
from parenlang.sexp_evaluator.sexp_function import Function
from parenlang.system.ast_nodes import (
    Call, Define, EnumDecl, Expr, For, If, Let, Sequence, Set, Str, Var, While,
)
from parenlang.system.errors import TypeMismatchError, UndefVarError
from parenlang.system.types import EMPTY, NumberValue, Value, ValueType

if TYPE_CHECKING:
    from .sexp_evaluator import SexpEvaluator

logger = logging.getLogger(__name__)


def target_name(node: Expr, source: str) -> str:
    """Name held by a Var node; anything else is a TypeMismatchError expecting a Var."""
    if isinstance(node, Var):
        return node.name
    raise TypeMismatchError(ValueType.VAR, node.type_tag(), source)


def symbol_name(node: Expr, source: str) -> str:
    """Like target_name, but string literals are accepted too (enum names and members)."""
    if isinstance(node, Str):
        return node.value
    return target_name(node, source)


class SpecialFormProcessor:
    """
    Processes special forms for the SexpEvaluator.
    Each method receives the node, the environment and evaluates sub-expressions
    through the evaluator as the form's semantics require.
    """
    def __init__(self, evaluator_instance: 'SexpEvaluator'):
        """
        Initializes the SpecialFormProcessor.

        Args:
            evaluator_instance: The SexpEvaluator used for recursive evaluation.
        """
        self.evaluator = evaluator_instance
        logger.debug("SpecialFormProcessor initialized.")

    # --- Control ---

    def handle_if_form(self, node: If, env: Environment) -> Value:
        """(if condition then else): exactly one branch is evaluated."""
        condition = self.evaluator.evaluate(node.condition, env)
        logger.debug(f"  'if' condition evaluated to: {condition!r}")
        chosen = node.then_branch if self.evaluator.get_bool(condition, node.source) else node.else_branch
        return self.evaluator.evaluate(chosen, env)

    def handle_while_form(self, node: While, env: Environment) -> Value:
        """(while condition body): condition is re-evaluated before every iteration."""
        iterations = 0
        while self.evaluator.get_bool(self.evaluator.evaluate(node.condition, env), node.source):
            self.evaluator.evaluate(node.body, env)
            iterations += 1
        logger.debug(f"  'while' finished after {iterations} iteration(s)")
        return EMPTY

    def handle_for_form(self, node: For, env: Environment) -> Value:
        """
        (for var lower upper body): binds var to every integer of [lower, upper).
        The binding var had before the loop is restored afterwards, also when the
        body raises.
        """
        lower = self.evaluator.get_num(self.evaluator.evaluate(node.lower, env), node.source)
        upper = self.evaluator.get_num(self.evaluator.evaluate(node.upper, env), node.source)
        var_name = target_name(node.var, node.source)
        logger.debug(f"  'for' {var_name} in [{lower}, {upper})")

        with env.bind_temporarily([(var_name, NumberValue(value=lower))]):
            for i in range(lower, upper):
                env.define(var_name, NumberValue(value=i))
                self.evaluator.evaluate(node.body, env)
        return EMPTY

    def handle_sequence_form(self, node: Sequence, env: Environment) -> Value:
        """Evaluates every item in order; the result is the last one, Empty when there are none."""
        result: Value = EMPTY
        for item in node.items:
            result = self.evaluator.evaluate(item, env)
        return result

    # --- Binding ---

    def handle_let_form(self, node: Let, env: Environment) -> Value:
        """(let name value): introduces or overwrites a binding."""
        value = self.evaluator.evaluate(node.value, env)
        env.define(target_name(node.target, node.source), value)
        return EMPTY

    def handle_set_form(self, node: Set, env: Environment) -> Value:
        """(set name value): overwrites an existing binding, never creates one."""
        value = self.evaluator.evaluate(node.value, env)
        var_name = target_name(node.target, node.source)
        try:
            env.set_existing(var_name, value)
        except NameError as e:
            logger.debug(f"  'set' on unbound variable '{var_name}'")
            raise UndefVarError(var_name, node.source) from e
        return EMPTY

    # --- Functions ---

    def handle_define_form(self, node: Define, env: Environment) -> Value:
        """(def name params... body): registers a function, replacing any previous definition."""
        function = Function(
            name=target_name(node.name, node.source),
            params=self._param_names(node.params, node.source),
            body=node.body,
        )
        env.define_function(function)
        return EMPTY

    def _param_names(self, params: List[Expr], source: str) -> List[str]:
        """
        Parameters may be written flat, (def f x y body), or grouped,
        (def f (x y) body); a grouped list parses as a Sequence of Vars.
        """
        names: List[str] = []
        for param in params:
            if isinstance(param, Sequence):
                names.extend(target_name(p, source) for p in param.items)
            else:
                names.append(target_name(param, source))
        return names

    def handle_call_form(self, node: Call, env: Environment) -> Value:
        """
        (call name args...): evaluates the arguments in the caller's environment,
        rebinds the parameters to them for the duration of the body and restores
        the previous bindings afterwards.

        Arguments and parameters are paired positionally. Missing arguments leave
        the trailing parameters untouched; extra arguments are evaluated and ignored.
        """
        function_name = target_name(node.name, node.source)
        function = env.get_function(function_name)
        if function is None:
            raise UndefVarError(function_name, node.source)

        args = [self.evaluator.evaluate(arg, env) for arg in node.args]
        if len(args) != function.arity:
            logger.warning(
                f"Arity mismatch: '{function_name}' takes {function.arity} argument(s), "
                f"got {len(args)} in {node.source}"
            )

        logger.debug(f"  Calling {function!r} with {args!r}")
        with env.bind_temporarily(zip(function.params, args)):
            return self.evaluator.evaluate(function.body, env)

    # --- Enums ---

    def handle_enum_form(self, node: EnumDecl, env: Environment) -> Value:
        """(enum Name members...): registers the Name.member constants."""
        enum_name = symbol_name(node.name, node.source)
        members = [symbol_name(member, node.source) for member in node.members]
        env.define_enum(enum_name, members)
        return EMPTY
