from __future__ import annotations

from typing import Any

from livequery.contracts.filters import FilterExpr
from livequery.engine.table_query import QueryCallbacks
from livequery.query.builder import and_, eq, or_
from livequery.sources.memory import InMemoryConnection, InMemoryTable


def build_user(user_id: int, **overrides: Any) -> dict[str, Any]:
    row = {
        "id": user_id,
        "name": f"user-{user_id}",
        "role": "member",
        "dept": "Eng",
        "isActive": True,
    }
    row.update(overrides)
    return row


def build_admin_predicate() -> FilterExpr:
    return and_(eq("role", "admin"), or_(eq("dept", "Eng"), eq("dept", "Product")))


def build_connection(*rows: dict[str, Any], table: str = "User") -> InMemoryConnection:
    conn = InMemoryConnection()
    conn.add_table(InMemoryTable(table, rows=list(rows)))
    return conn


class CallbackLog:
    """Records every lifecycle callback a view fires, in order."""

    def __init__(self) -> None:
        self.events: list[tuple] = []
        self.snapshots: list[tuple] = []

    def callbacks(self) -> QueryCallbacks:
        return QueryCallbacks(
            on_insert=lambda row: self.events.append(("insert", row)),
            on_delete=lambda row: self.events.append(("delete", row)),
            on_update=lambda old, new: self.events.append(("update", old, new)),
            on_initial_snapshot=lambda rows: self.snapshots.append(tuple(rows)),
        )

    def kinds(self) -> list[str]:
        return [e[0] for e in self.events]
