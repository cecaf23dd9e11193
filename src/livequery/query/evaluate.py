"""In-memory evaluation of predicates against rows."""

from __future__ import annotations

from collections.abc import Mapping
from numbers import Real
from typing import Any, Optional

from livequery.contracts.filters import And, Eq, FilterExpr, Or

_MISSING = object()


def _column(row: Any, key: str) -> Any:
    if isinstance(row, Mapping):
        return row.get(key, _MISSING)
    return getattr(row, key, _MISSING)


def _scalar_kind(value: Any) -> Optional[str]:
    # bool before Real: bool is an int subclass
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, str):
        return "string"
    if isinstance(value, Real):
        return "number"
    return None


def _matches(leaf: Eq, row: Any) -> bool:
    actual = _column(row, leaf.key)
    kind = _scalar_kind(actual)
    if kind is None or kind != _scalar_kind(leaf.value):
        return False
    return actual == leaf.value


def evaluate(expr: FilterExpr, row: Any) -> bool:
    """Return whether ``row`` satisfies ``expr``.

    A column that is missing or not a str/number/bool never matches; this
    never raises for row-shape variance. Every child of a compound node is
    evaluated, in order.
    """
    if isinstance(expr, Eq):
        return _matches(expr, row)
    if isinstance(expr, And):
        results = [evaluate(child, row) for child in expr.children]
        return all(results)
    if isinstance(expr, Or):
        results = [evaluate(child, row) for child in expr.children]
        return any(results)
    raise TypeError(f"Not a filter expression: {expr!r}")
