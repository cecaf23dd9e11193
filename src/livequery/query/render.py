"""Rendering predicates as the SQL-like text sent upstream.

The output is the wire contract with the subscription service, so it must be
identical for equal expression trees.
"""

from __future__ import annotations

import math
import re
from typing import Optional

from livequery.contracts.filters import And, Eq, FilterExpr, Or, Value

_PLAIN_IDENT = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


def format_value(value: Value) -> str:
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, str):
        return "'" + value.replace("'", "''") + "'"
    if math.isnan(value):
        return "'NaN'"
    if math.isinf(value):
        return "'Infinity'" if value > 0 else "'-Infinity'"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def escape_ident(ident: str) -> str:
    if _PLAIN_IDENT.fullmatch(ident):
        return ident
    return '"' + ident.replace('"', '""') + '"'


def _render_child(child: FilterExpr) -> str:
    text = render(child)
    if isinstance(child, (And, Or)) and len(child.children) > 1:
        return f"({text})"
    return text


def render(expr: FilterExpr) -> str:
    if isinstance(expr, Eq):
        return f"{escape_ident(expr.key)} = {format_value(expr.value)}"
    if isinstance(expr, And):
        if not expr.children:
            return "TRUE"
        return " AND ".join(_render_child(c) for c in expr.children)
    if isinstance(expr, Or):
        if not expr.children:
            return "FALSE"
        return " OR ".join(_render_child(c) for c in expr.children)
    raise TypeError(f"Not a filter expression: {expr!r}")


def build_select(table_name: str, where: Optional[FilterExpr] = None) -> str:
    query = f"SELECT * FROM {table_name}"
    if where is not None:
        query += f" WHERE {render(where)}"
    return query
