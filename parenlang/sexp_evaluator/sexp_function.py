"""
Defines the Function record registered by `def` and looked up by `call`.
Functions are not closures: they capture no environment, only the name,
the ordered parameter names and the unevaluated body.
"""
from typing import List

from pydantic import BaseModel, ConfigDict, Field

from parenlang.system.ast_nodes import Expr


class Function(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    params: List[str] = Field(default_factory=list)
    body: Expr

    @property
    def arity(self) -> int:
        return len(self.params)

    def __repr__(self) -> str:
        return f"<Function {self.name}({', '.join(self.params)})>"
