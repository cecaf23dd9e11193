"""Predicate builders.

``and_``/``or_`` normalize as they build: absent operands are dropped,
same-operator children are flattened one level, a single survivor is
returned as-is and no operands yield the empty node (true for AND, false
for OR).
"""

from __future__ import annotations

from typing import Callable, Optional, Union

from livequery.contracts.filters import And, Eq, FilterExpr, Or, Value


def eq(key: str, value: Value) -> Eq:
    return Eq(key=key, value=value)


def _combine(node_type: type[And] | type[Or], operands: tuple[Optional[FilterExpr], ...]) -> FilterExpr:
    flat: list[FilterExpr] = []
    for operand in operands:
        if operand is None:
            continue
        if isinstance(operand, node_type):
            flat.extend(operand.children)
        else:
            flat.append(operand)
    if len(flat) == 1:
        return flat[0]
    return node_type(children=tuple(flat))


def and_(*operands: Optional[FilterExpr]) -> FilterExpr:
    return _combine(And, operands)


def or_(*operands: Optional[FilterExpr]) -> FilterExpr:
    return _combine(Or, operands)


def where(expr: FilterExpr) -> FilterExpr:
    return expr


class QueryBuilder:
    """Namespace handed to predicate-builder callables.

    Example::

        TableQuery(conn, status, "User", lambda q: q.where(q.eq("isActive", True)))
    """

    eq = staticmethod(eq)
    and_ = staticmethod(and_)
    or_ = staticmethod(or_)
    where = staticmethod(where)


PredicateBuilder = Callable[[QueryBuilder], FilterExpr]


def build_predicate(where_clause: Union[PredicateBuilder, FilterExpr, None]) -> Optional[FilterExpr]:
    """Resolve a builder callable (or an already-built expression) to an expression."""
    if where_clause is None:
        return None
    if isinstance(where_clause, (Eq, And, Or)):
        return where_clause
    return where_clause(QueryBuilder())
