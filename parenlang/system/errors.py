"""
System-wide custom error types.
"""
from typing import List

RED = "\x1b[31m"
DEFAULT_COLOR = "\x1b[39m"


class ParseError(ValueError):
    """
    Custom exception raised when a source string cannot be turned into an expression tree.
    Inherits from ValueError for general compatibility but provides specific context.
    """
    def __init__(self, message: str, source: str, error_details: str = ""):
        """
        Initializes the ParseError.

        Args:
            message: A high-level error message.
            source: The source text (or fragment) that caused the error.
            error_details: Specific details about the failure, if available.
        """
        full_message = f"{message}\nInput: '{source}'"
        if error_details:
            full_message += f"\nDetails: {error_details}"
        super().__init__(full_message)
        self.message = message
        self.source = source
        self.error_details = error_details

    def describe(self, color: bool = False) -> str:
        """Multi-line report in the same layout as LangError.describe."""
        fragment = f"{RED}{self.source}{DEFAULT_COLOR}" if color else self.source
        lines = [f"\n>>> ParseError:\n", f"\t{fragment}\n", f"\t{self.message}"]
        if self.error_details:
            lines.append(f"\t{self.error_details}")
        return "\n".join(lines) + "\n"


class LangError(Exception):
    """
    Base exception raised during the evaluation phase.
    Every evaluation error is terminal: it aborts the whole tree and propagates
    to the caller of execute unchanged.
    """
    kind = "Error"

    def __init__(self, message: str, expression: str = "", error_details: str = ""):
        """
        Initializes the LangError.

        Args:
            message: A high-level error message describing the evaluation failure.
            expression: The source fragment being evaluated when the error occurred.
            error_details: Specific details about the error.
        """
        full_message = f"{message}"
        if expression:
            full_message += f"\nExpression: '{expression}'"
        if error_details:
            full_message += f"\nDetails: {error_details}"
        super().__init__(full_message)
        self.message = message
        self.expression = expression
        self.error_details = error_details

    def detail_lines(self) -> List[str]:
        return [self.message]

    def describe(self, color: bool = False) -> str:
        """
        Human-readable multi-line report: the error kind, the offending source
        fragment (red when color is True) and the kind-specific details.
        """
        fragment = f"{RED}{self.expression}{DEFAULT_COLOR}" if color else self.expression
        body = "\n".join(f"\t{line}" for line in self.detail_lines())
        return f"\n>>> {self.kind}:\n\n\t{fragment}\n\n{body}\n"


class TypeMismatchError(LangError):
    """An operand did not reduce to the type its operator requires."""
    kind = "TypeError"

    def __init__(self, expected: str, found: str, expression: str = ""):
        self.expected = str(expected)
        self.found = str(found)
        super().__init__(
            f"Type mismatch: expected {self.expected}, found {self.found}",
            expression=expression,
        )

    def detail_lines(self) -> List[str]:
        return [f"Expected: {self.expected}", f"Found: {self.found}"]


class UndefVarError(LangError):
    """`set` or `call` referenced a name with no existing binding."""
    kind = "Undefined Variable"

    def __init__(self, name: str, expression: str = ""):
        self.name = name
        super().__init__(f"Variable \"{name}\" not found", expression=expression)


class OutOfBoundsError(LangError):
    """
    Index outside of a vector. Reserved for indexable containers; nothing in
    the evaluator raises it yet.
    """
    kind = "OutOfBoundsError"

    def __init__(self, length: int, index: int, expression: str = ""):
        self.length = length
        self.index = index
        super().__init__(
            f"Index {index} out of bounds for vector of size {length}",
            expression=expression,
        )

    def detail_lines(self) -> List[str]:
        return [f"The vector is of size: {self.length}", f"but index is: {self.index}"]


class DivisionByZeroError(LangError):
    """Right operand of `/` or `%` evaluated to zero."""
    kind = "DivisionByZeroError"

    def __init__(self, expression: str = ""):
        super().__init__("Attempted to divide by zero", expression=expression)


class RecursionDepthError(LangError):
    """The host call stack was exhausted while evaluating a tree."""
    kind = "RecursionError"

    def __init__(self, expression: str = "", error_details: str = ""):
        super().__init__(
            "Maximum recursion depth exceeded during evaluation",
            expression=expression,
            error_details=error_details,
        )
