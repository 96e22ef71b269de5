"""Expression tree node models.

The parser builds these nodes once; they are frozen afterwards. Compound forms
keep the trimmed source text they were parsed from in `source`, which error
messages quote verbatim.
"""
import enum
from typing import Annotated, List, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, conint

from parenlang.system.types import INT32_MAX, INT32_MIN, ValueType


class BinaryOperator(str, enum.Enum):
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    MOD = "%"
    EQUAL = "="
    NOT_EQUAL = "!="
    GREATER_THAN = ">"
    GREATER_EQUAL = ">="
    LESS_THAN = "<"
    LESS_EQUAL = "<="
    AND = "&&"
    OR = "||"


class ExprNode(BaseModel):
    """Base class for every tree node."""
    model_config = ConfigDict(frozen=True)

    def type_tag(self) -> ValueType:
        """Type reported when a node is used where a Var or literal was required."""
        return ValueType.EXPRESSION


# --- Literals ---

class Number(ExprNode):
    kind: Literal["number"] = "number"
    value: conint(ge=INT32_MIN, le=INT32_MAX)

    def type_tag(self) -> ValueType:
        return ValueType.NUMBER


class Bool(ExprNode):
    kind: Literal["bool"] = "bool"
    value: bool

    def type_tag(self) -> ValueType:
        return ValueType.BOOL


class Str(ExprNode):
    kind: Literal["str"] = "str"
    value: str

    def type_tag(self) -> ValueType:
        return ValueType.STR


class EnumElement(ExprNode):
    kind: Literal["enum_element"] = "enum_element"
    name: str

    def type_tag(self) -> ValueType:
        return ValueType.ENUM_ELEMENT


class Var(ExprNode):
    """Variable reference. Also the fallback for any leaf text that is not a literal."""
    kind: Literal["var"] = "var"
    name: str

    def type_tag(self) -> ValueType:
        return ValueType.VAR


class Empty(ExprNode):
    kind: Literal["empty"] = "empty"

    def type_tag(self) -> ValueType:
        return ValueType.EMPTY


# --- Operators ---

class BinaryOp(ExprNode):
    kind: Literal["binary"] = "binary"
    op: BinaryOperator
    left: "Expr"
    right: "Expr"
    source: str


class Not(ExprNode):
    kind: Literal["not"] = "not"
    operand: "Expr"
    source: str


# --- Control ---

class If(ExprNode):
    kind: Literal["if"] = "if"
    condition: "Expr"
    then_branch: "Expr"
    else_branch: "Expr"
    source: str


class While(ExprNode):
    kind: Literal["while"] = "while"
    condition: "Expr"
    body: "Expr"
    source: str


class For(ExprNode):
    """Counts `var` over [lower, upper); the upper bound is exclusive."""
    kind: Literal["for"] = "for"
    var: "Expr"
    lower: "Expr"
    upper: "Expr"
    body: "Expr"
    source: str


class Sequence(ExprNode):
    kind: Literal["sequence"] = "sequence"
    items: List["Expr"] = Field(default_factory=list)
    source: str = ""


# --- Binding ---

class Let(ExprNode):
    kind: Literal["let"] = "let"
    target: "Expr"
    value: "Expr"
    source: str


class Set(ExprNode):
    kind: Literal["set"] = "set"
    target: "Expr"
    value: "Expr"
    source: str


# --- Functions ---

class Define(ExprNode):
    kind: Literal["define"] = "define"
    name: "Expr"
    params: List["Expr"] = Field(default_factory=list)
    body: "Expr"
    source: str


class Call(ExprNode):
    kind: Literal["call"] = "call"
    name: "Expr"
    args: List["Expr"] = Field(default_factory=list)
    source: str


# --- I/O ---

class Print(ExprNode):
    kind: Literal["print"] = "print"
    items: List["Expr"] = Field(default_factory=list)


class Input(ExprNode):
    kind: Literal["input"] = "input"


class EnumDecl(ExprNode):
    """`(enum Name member...)`: registers `Name.member` constants."""
    kind: Literal["enum"] = "enum"
    name: "Expr"
    members: List["Expr"] = Field(default_factory=list)
    source: str


Expr = Annotated[
    Union[
        Number, Bool, Str, EnumElement, Var, Empty,
        BinaryOp, Not,
        If, While, For, Sequence,
        Let, Set,
        Define, Call,
        Print, Input,
        EnumDecl,
    ],
    Field(discriminator="kind"),
]
"""
Any expression tree node, discriminated by its `kind` field.
"""

for _model in (BinaryOp, Not, If, While, For, Sequence, Let, Set, Define, Call, Print, EnumDecl):
    _model.model_rebuild()
