"""Boolean expression AST for view predicates."""
from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictFloat, StrictInt, StrictStr

# bool first so True is never coerced to 1
Value = Union[StrictBool, StrictInt, StrictFloat, StrictStr]


class Eq(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["eq"] = "eq"
    key: str
    value: Value


# Logical operators (composite nodes)


class And(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["and"] = "and"
    children: tuple[FilterExpr, ...] = ()


class Or(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["or"] = "or"
    children: tuple[FilterExpr, ...] = ()


FilterExpr = Annotated[
    Union[Eq, And, Or],
    Field(discriminator="kind"),
]


And.model_rebuild()
Or.model_rebuild()
