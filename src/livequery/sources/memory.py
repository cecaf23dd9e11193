"""In-memory stand-ins for a sync client.

These follow the same contract as a real change-feed client: the whole of
a transaction is written to the table caches before any row event fires, and
subscriptions report ``applied`` only when told to (``apply_subscriptions``),
which is how the network would deliver it.
"""

from __future__ import annotations

import itertools
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, Optional

from livequery.contracts.events import ConnectionStatus
from livequery.contracts.source import (
    DeleteCallback,
    InsertCallback,
    Unsubscriber,
    UpdateCallback,
)
from livequery.util.logging import get_logger

logger = get_logger("sources.memory")


def _remover(listeners: list, callback: Callable) -> Unsubscriber:
    def unsubscribe() -> None:
        if callback in listeners:
            listeners.remove(callback)

    return unsubscribe


class StatusSignal:
    """Writable status value with immediate-then-on-change subscriptions."""

    def __init__(self, value: ConnectionStatus = ConnectionStatus.disconnected) -> None:
        self._value = ConnectionStatus(value)
        self._subscribers: list[Callable[[ConnectionStatus], None]] = []

    @property
    def value(self) -> ConnectionStatus:
        return self._value

    def subscribe(self, callback: Callable[[ConnectionStatus], None]) -> Unsubscriber:
        self._subscribers.append(callback)
        unsubscribe = _remover(self._subscribers, callback)
        callback(self._value)
        return unsubscribe

    def set(self, value: ConnectionStatus) -> None:
        value = ConnectionStatus(value)
        if value is self._value:
            return
        self._value = value
        for callback in list(self._subscribers):
            if callback in self._subscribers:
                callback(value)

    def subscriber_count(self) -> int:
        return len(self._subscribers)


class InMemoryTable:
    """Full local cache of one table, keyed by ``primary_key``."""

    def __init__(self, name: str, rows: Optional[list[Any]] = None, primary_key: str = "id") -> None:
        self.name = name
        self.primary_key = primary_key
        self._rows: dict[Any, Any] = {}
        self._insert_listeners: list[InsertCallback] = []
        self._delete_listeners: list[DeleteCallback] = []
        self._update_listeners: list[UpdateCallback] = []
        for row in rows or []:
            self._rows[self._key(row)] = row

    def _key(self, row: Any) -> Any:
        return row[self.primary_key]

    def iter(self) -> list[Any]:
        return list(self._rows.values())

    def __len__(self) -> int:
        return len(self._rows)

    def get(self, key: Any) -> Optional[Any]:
        return self._rows.get(key)

    def on_insert(self, callback: InsertCallback) -> Unsubscriber:
        self._insert_listeners.append(callback)
        return _remover(self._insert_listeners, callback)

    def on_delete(self, callback: DeleteCallback) -> Unsubscriber:
        self._delete_listeners.append(callback)
        return _remover(self._delete_listeners, callback)

    def on_update(self, callback: UpdateCallback) -> Unsubscriber:
        self._update_listeners.append(callback)
        return _remover(self._update_listeners, callback)

    def listener_count(self) -> int:
        return len(self._insert_listeners) + len(self._delete_listeners) + len(self._update_listeners)

    def _write(self, op: "Operation") -> tuple:
        """Apply one operation to the cache; return the event to emit later."""
        key = self._key(op.row)
        if op.kind == "insert":
            self._rows[key] = op.row
            return ("insert", op.row)
        if op.kind == "delete":
            removed = self._rows.pop(key, op.row)
            return ("delete", removed)
        if key not in self._rows:
            raise KeyError(f"No row with {self.primary_key}={key!r} in table '{self.name}'")
        old = self._rows[key]
        self._rows[key] = op.row
        return ("update", old, op.row)

    def _emit(self, tx: Any, event: tuple) -> None:
        kind = event[0]
        if kind == "insert":
            listeners = self._insert_listeners
        elif kind == "delete":
            listeners = self._delete_listeners
        else:
            listeners = self._update_listeners
        for callback in list(listeners):
            # a callback may have been removed by an earlier one in this dispatch
            if callback in listeners:
                callback(tx, *event[1:])


@dataclass(frozen=True)
class Operation:
    kind: str  # "insert" | "delete" | "update"
    table: str
    row: Any


@dataclass
class Transaction:
    """Operations collected inside ``InMemoryConnection.transaction()``."""
    tx_id: Any
    operations: list[Operation] = field(default_factory=list)

    def insert(self, table: str, row: Any) -> None:
        self.operations.append(Operation("insert", table, row))

    def delete(self, table: str, row: Any) -> None:
        self.operations.append(Operation("delete", table, row))

    def update(self, table: str, row: Any) -> None:
        self.operations.append(Operation("update", table, row))


class InMemorySubscription:
    def __init__(self, connection: "InMemoryConnection", query: str, on_applied: Optional[Callable[[], None]]) -> None:
        self.connection = connection
        self.query = query
        self._on_applied = on_applied
        self.active = True
        self.applied_count = 0

    def applied(self) -> None:
        """Deliver the applied notification (again, if called twice)."""
        if not self.active:
            return
        self.applied_count += 1
        if self._on_applied:
            self._on_applied()

    def unsubscribe(self) -> None:
        self.active = False


class InMemorySubscriptionBuilder:
    def __init__(self, connection: "InMemoryConnection") -> None:
        self._connection = connection
        self._on_applied: Optional[Callable[[], None]] = None

    def on_applied(self, callback: Callable[[], None]) -> "InMemorySubscriptionBuilder":
        self._on_applied = callback
        return self

    def subscribe(self, query: str) -> InMemorySubscription:
        sub = InMemorySubscription(self._connection, query, self._on_applied)
        self._connection.subscriptions.append(sub)
        logger.debug("Subscription registered: %s", query)
        if self._connection.auto_apply:
            sub.applied()
        return sub


class InMemoryConnection:
    """Connection whose tables live in process memory.

    Tables are created on first use. ``auto_apply`` makes every subscription
    report applied as soon as it is made.
    """

    def __init__(
        self,
        tables: Optional[dict[str, InMemoryTable]] = None,
        status: Optional[StatusSignal] = None,
        auto_apply: bool = False,
    ) -> None:
        self.tables: dict[str, InMemoryTable] = dict(tables or {})
        self.status = status or StatusSignal()
        self.auto_apply = auto_apply
        self.subscriptions: list[InMemorySubscription] = []
        self._active = False
        self._tx_ids = itertools.count(1)

    @property
    def is_active(self) -> bool:
        return self._active

    def table(self, name: str) -> InMemoryTable:
        if name not in self.tables:
            self.tables[name] = InMemoryTable(name)
        return self.tables[name]

    def add_table(self, table: InMemoryTable) -> InMemoryTable:
        self.tables[table.name] = table
        return table

    def subscription_builder(self) -> InMemorySubscriptionBuilder:
        return InMemorySubscriptionBuilder(self)

    def connect(self) -> None:
        self.status.set(ConnectionStatus.connecting)
        self._active = True
        self.status.set(ConnectionStatus.connected)

    def disconnect(self) -> None:
        self._active = False
        self.status.set(ConnectionStatus.disconnected)

    def fail(self) -> None:
        self._active = False
        self.status.set(ConnectionStatus.error)

    def active_subscriptions(self) -> list[InMemorySubscription]:
        return [s for s in self.subscriptions if s.active]

    def apply_subscriptions(self) -> int:
        """Report applied for every active subscription not yet applied."""
        pending = [s for s in self.active_subscriptions() if s.applied_count == 0]
        for sub in pending:
            sub.applied()
        return len(pending)

    @contextmanager
    def transaction(self, tx_id: Optional[Any] = None) -> Iterator[Transaction]:
        """Group operations under one transaction marker.

        Every table touched is written before any event fires.
        """
        tx = Transaction(tx_id if tx_id is not None else next(self._tx_ids))
        yield tx
        self.commit(tx)

    def commit(self, tx: Transaction) -> None:
        """Write every operation, then fire the events in operation order.

        A failing operation rolls back the tables touched so far and no
        event fires.
        """
        touched = {op.table: dict(self.table(op.table)._rows) for op in tx.operations}
        pending: list[tuple[InMemoryTable, tuple]] = []
        try:
            for op in tx.operations:
                table = self.table(op.table)
                pending.append((table, table._write(op)))
        except Exception:
            for name, rows in touched.items():
                self.tables[name]._rows = rows
            logger.warning("Rolled back transaction %s", tx.tx_id)
            raise

        logger.debug("Committing transaction %s (%d operations)", tx.tx_id, len(tx.operations))
        for table, event in pending:
            table._emit(tx.tx_id, event)
