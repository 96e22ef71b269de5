"""
Environment for expression evaluation.
Holds the variable bindings, the function table and the enum member registry
of one execution.
"""

import logging
from contextlib import contextmanager
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from parenlang.sexp_evaluator.sexp_function import Function
from parenlang.system.types import Value

logger = logging.getLogger(__name__)

_UNBOUND = object()


class Environment:
    """
    A single shared, mutable scope with dynamic scoping.

    Every binding lives in one mapping; `for` loops and function calls shadow
    names temporarily through bind_temporarily, which puts the previous
    bindings back on every exit path.
    """

    def __init__(
        self,
        variables: Optional[Dict[str, Value]] = None,
        functions: Optional[Dict[str, Function]] = None,
    ):
        """
        Initializes a new Environment.

        Args:
            variables: Optional initial variable bindings.
            functions: Optional initial function table.
        """
        self._variables: Dict[str, Value] = variables if variables is not None else {}
        self._functions: Dict[str, Function] = functions if functions is not None else {}
        self._enums: Dict[str, List[str]] = {}
        self._enum_members: Dict[str, str] = {}
        logger.debug(f"Initialized Environment (Variables: {list(self._variables.keys())}, Functions: {list(self._functions.keys())})")

    # --- Variables ---

    def is_bound(self, name: str) -> bool:
        return name in self._variables

    def lookup(self, name: str) -> Value:
        """
        Returns the value bound to name.

        Raises:
            NameError: If name has no binding.
        """
        try:
            return self._variables[name]
        except KeyError:
            raise NameError(f"Unbound variable: Name '{name}' is not defined.") from None

    def define(self, name: str, value: Value) -> None:
        """Introduces or overwrites a binding."""
        logger.debug(f"Defining '{name}' = {value!r}")
        self._variables[name] = value

    def set_existing(self, name: str, value: Value) -> None:
        """
        Overwrites an existing binding.

        Raises:
            NameError: If name has no binding; nothing is created in that case.
        """
        if name not in self._variables:
            logger.debug(f"Cannot set unbound variable '{name}'")
            raise NameError(f"Unbound variable: Cannot set '{name}' as it's not defined.")
        logger.debug(f"Setting '{name}' = {value!r}")
        self._variables[name] = value

    @contextmanager
    def bind_temporarily(self, bindings: Iterable[Tuple[str, Value]]) -> Iterator["Environment"]:
        """
        Binds each (name, value) pair in order for the duration of the block.

        The binding a name had before (or its absence) is saved first and put
        back when the block exits, whether it returns or raises. Restoration
        runs in reverse order so a name bound twice ends with its original value.
        """
        saved: List[Tuple[str, object]] = []
        try:
            for name, value in bindings:
                saved.append((name, self._variables.get(name, _UNBOUND)))
                self._variables[name] = value
            logger.debug(f"Temporarily bound: {[name for name, _ in saved]}")
            yield self
        finally:
            for name, previous in reversed(saved):
                if previous is _UNBOUND:
                    self._variables.pop(name, None)
                else:
                    self._variables[name] = previous
            logger.debug(f"Restored: {[name for name, _ in saved]}")

    # --- Functions ---

    def define_function(self, function: Function) -> None:
        """Registers a function, replacing any previous one with the same name."""
        logger.debug(f"Defining function {function!r}")
        self._functions[function.name] = function

    def get_function(self, name: str) -> Optional[Function]:
        return self._functions.get(name)

    # --- Enums ---

    def define_enum(self, name: str, members: List[str]) -> List[str]:
        """
        Registers `name.member` for every member and returns the qualified names.
        Redeclaring an enum drops the members of the previous declaration.
        """
        for qualified in self._enums.pop(name, []):
            self._enum_members.pop(qualified, None)
        qualified_names = [f"{name}.{member}" for member in members]
        self._enums[name] = qualified_names
        for qualified in qualified_names:
            self._enum_members[qualified] = name
        logger.debug(f"Defined enum '{name}': {qualified_names}")
        return qualified_names

    def is_enum_member(self, qualified_name: str) -> bool:
        return qualified_name in self._enum_members

    # --- Inspection ---

    def get_bindings(self) -> Dict[str, Value]:
        """Returns a copy of the variable bindings."""
        return self._variables.copy()

    def get_functions(self) -> Dict[str, Function]:
        """Returns a copy of the function table."""
        return self._functions.copy()

    def get_enums(self) -> Dict[str, List[str]]:
        return {name: list(members) for name, members in self._enums.items()}

    def __repr__(self) -> str:
        return (f"<Environment id={id(self)} variables={list(self._variables.keys())} "
                f"functions={list(self._functions.keys())}>")
