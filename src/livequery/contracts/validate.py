from __future__ import annotations
"""Schema-level checks for predicates.

The engine never validates columns; these helpers are for the layers that
know a table's shape (scenario replay, CLI).
"""

from typing import Iterable, Optional

from livequery.contracts.filters import And, Eq, FilterExpr, Or
from livequery.contracts.outcome import Message, warn


def collect_columns(expr: Optional[FilterExpr]) -> list[str]:
    """Columns referenced by ``Eq`` leaves, in first-seen order."""
    if expr is None:
        return []
    if isinstance(expr, Eq):
        return [expr.key]
    seen: list[str] = []
    if isinstance(expr, (And, Or)):
        for child in expr.children:
            for col in collect_columns(child):
                if col not in seen:
                    seen.append(col)
    return seen


def check_filter_columns(
    expr: Optional[FilterExpr], columns: Iterable[str], table_name: str = ""
) -> list[Message]:
    """Warn about every referenced column the table does not have."""
    known = set(columns)
    return [
        warn(
            "unknown_column",
            f"Column '{col}' is not a column of table '{table_name}'",
            column=col,
            table=table_name,
            known_columns=sorted(known),
        )
        for col in collect_columns(expr)
        if col not in known
    ]
