"""Runtime value models.

Evaluating an expression tree always produces one of the models below. They are
kept separate from the tree node models in parenlang.system.ast_nodes: the
evaluator converts nodes to values, never the reverse.
"""
from enum import Enum
from typing import Literal, Union

import sexpdata
from pydantic import BaseModel, ConfigDict, conint

INT32_MIN = -(2 ** 31)
INT32_MAX = 2 ** 31 - 1


def wrap_int32(number: int) -> int:
    """Wraps an arbitrary Python int to a signed 32-bit integer (two's complement)."""
    return ((number - INT32_MIN) % 2 ** 32) + INT32_MIN


class ValueType(str, Enum):
    """Type tags reported in TypeMismatchError."""
    NUMBER = "Number"
    BOOL = "Bool"
    STR = "Str"
    ENUM_ELEMENT = "EnumElement"
    VAR = "Var"
    EXPRESSION = "Expression"
    EMPTY = "Empty"

    def __str__(self) -> str:
        return self.value


class BaseValue(BaseModel):
    model_config = ConfigDict(frozen=True)

    def value_type(self) -> ValueType:
        return ValueType(self.type)

    def render(self) -> str:
        """Textual form used by `print` and the CLI. Only Number, Bool and Str have one."""
        return ""

    def __str__(self) -> str:
        return self.render()


class NumberValue(BaseValue):
    type: Literal["Number"] = "Number"
    value: conint(ge=INT32_MIN, le=INT32_MAX)

    def render(self) -> str:
        return str(self.value)

    def to_source(self) -> str:
        return str(self.value)


class BoolValue(BaseValue):
    type: Literal["Bool"] = "Bool"
    value: bool

    def render(self) -> str:
        return "true" if self.value else "false"

    def to_source(self) -> str:
        return self.render()


class StrValue(BaseValue):
    type: Literal["Str"] = "Str"
    value: str

    def render(self) -> str:
        return self.value

    def to_source(self) -> str:
        # Quoted and escaped so the parser decodes it back to the same text
        return sexpdata.dumps(self.value)


class EnumValue(BaseValue):
    """A registered enum member, identified by its qualified `Enum.member` name."""
    type: Literal["EnumElement"] = "EnumElement"
    name: str


class UnboundValue(BaseValue):
    """Result of reading a variable that has no binding."""
    type: Literal["Var"] = "Var"
    name: str


class EmptyValue(BaseValue):
    type: Literal["Empty"] = "Empty"


Value = Union[NumberValue, BoolValue, StrValue, EnumValue, UnboundValue, EmptyValue]
"""
Result type of every evaluation step.
"""

EMPTY = EmptyValue()
