"""Live filtered view over one subscribed table."""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence, Union

from livequery.config import settings
from livequery.contracts.events import (
    ConnectionStatus,
    RowDeleted,
    RowInserted,
    RowUpdated,
    StatusChanged,
    SubscriptionApplied,
    ViewEvent,
    ViewState,
)
from livequery.contracts.filters import FilterExpr
from livequery.contracts.source import Connection, StatusSource, TableCache, Unsubscriber
from livequery.contracts.trace import ViewTrace
from livequery.engine.lifecycle import SubscriptionLifecycle
from livequery.engine.membership import MembershipChange, classify_membership
from livequery.query.builder import PredicateBuilder, build_predicate
from livequery.query.evaluate import evaluate
from livequery.query.render import build_select
from livequery.util.logging import get_logger

logger = get_logger("table_query")

_view_ids = itertools.count(1)

RowsObserver = Callable[[tuple], None]


@dataclass
class QueryCallbacks:
    """Lifecycle callbacks of a view. All optional."""

    on_insert: Optional[Callable[[Any], None]] = None
    on_delete: Optional[Callable[[Any], None]] = None
    on_update: Optional[Callable[[Any, Any], None]] = None
    on_initial_snapshot: Optional[Callable[[Sequence[Any]], None]] = None


class TableQuery:
    """Rows of ``table_name`` that currently match ``where``, kept up to date.

    The view subscribes upstream once the connection is active, publishes its
    first snapshot when the subscription is applied, and from then on turns
    raw insert/update/delete events of the full table cache into
    ``on_insert``/``on_update``/``on_delete`` calls relative to its predicate.
    Recomputation of ``rows`` happens at most once per upstream transaction.

    Example::

        users = TableQuery(
            connection,
            status,
            "User",
            lambda q: q.where(q.eq("isActive", True)),
            QueryCallbacks(on_insert=print),
        )
        ...
        users.destroy()

    Every collaborator callback is funneled through :meth:`apply_event`.
    """

    def __init__(
        self,
        connection: Connection,
        status: StatusSource,
        table_name: str,
        where: Union[PredicateBuilder, FilterExpr, None] = None,
        callbacks: Optional[QueryCallbacks] = None,
        trace: Optional[ViewTrace] = None,
    ) -> None:
        self.connection = connection
        self.table_name = table_name
        self.where: Optional[FilterExpr] = build_predicate(where)
        self.query = build_select(table_name, self.where)
        self.callbacks = callbacks or QueryCallbacks()
        self.view_id = f"{table_name}#{next(_view_ids)}"

        if trace is None and settings.trace_enabled:
            trace = ViewTrace(
                view_id=self.view_id,
                query=self.query,
                max_events=settings.LIVEQUERY_TRACE_MAX_EVENTS,
            )
        self.trace = trace

        self._rows: tuple = ()
        self._state = ViewState.loading
        self._initial_snapshot_sent = False
        self._last_tx: Optional[Any] = None
        self._table: Optional[TableCache] = None
        self._table_unsubscribers: list[Unsubscriber] = []
        self._row_observers: list[RowsObserver] = []
        self._destroyed = False

        self._lifecycle = SubscriptionLifecycle(
            connection,
            status,
            self.query,
            on_applied=self._on_applied,
            trace=self.trace,
        )
        # may subscribe (and even apply) synchronously; keep last
        self._lifecycle.attach(self._on_status)

    @property
    def rows(self) -> tuple:
        return self._rows

    @property
    def state(self) -> ViewState:
        return self._state

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    def subscribe_rows(self, observer: RowsObserver) -> Unsubscriber:
        """Call ``observer`` with the new row tuple after every recompute."""
        self._row_observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._row_observers:
                self._row_observers.remove(observer)

        return unsubscribe

    # ------------------------------------------------------------------
    # Collaborator callbacks
    # ------------------------------------------------------------------

    def _on_status(self, status: ConnectionStatus) -> None:
        self.apply_event(StatusChanged(ConnectionStatus(status)))

    def _on_applied(self) -> None:
        self.apply_event(SubscriptionApplied())

    def _on_insert(self, tx: Any, row: Any) -> None:
        self.apply_event(RowInserted(tx, row))

    def _on_delete(self, tx: Any, row: Any) -> None:
        self.apply_event(RowDeleted(tx, row))

    def _on_update(self, tx: Any, old_row: Any, new_row: Any) -> None:
        self.apply_event(RowUpdated(tx, old_row, new_row))

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------

    def apply_event(self, event: ViewEvent) -> None:
        if self._destroyed:
            return
        if isinstance(event, StatusChanged):
            self._lifecycle.handle_status(event.status)
        elif isinstance(event, SubscriptionApplied):
            self._handle_applied()
        elif isinstance(event, RowInserted):
            self._handle_insert(event)
        elif isinstance(event, RowDeleted):
            self._handle_delete(event)
        elif isinstance(event, RowUpdated):
            self._handle_update(event)
        else:
            raise TypeError(f"Unknown view event: {event!r}")

    def _handle_applied(self) -> None:
        self._state = ViewState.ready
        self._record("subscription_applied")
        logger.info("Subscription applied for %s", self.view_id)

        self._recompute()
        if self._destroyed:
            return
        self._listen_to_table()

        if self._initial_snapshot_sent:
            return
        self._initial_snapshot_sent = True
        self._record("initial_snapshot", rows=len(self._rows))
        if self.callbacks.on_initial_snapshot:
            self.callbacks.on_initial_snapshot(self._rows)

    def _handle_insert(self, event: RowInserted) -> None:
        if self.where is not None and not evaluate(self.where, event.row):
            return
        self._record("row_inserted", tx=event.tx)
        if self.callbacks.on_insert:
            self.callbacks.on_insert(event.row)
        self._recompute_once_per_tx(event.tx)

    def _handle_delete(self, event: RowDeleted) -> None:
        if self.where is not None and not evaluate(self.where, event.row):
            return
        self._record("row_deleted", tx=event.tx)
        if self.callbacks.on_delete:
            self.callbacks.on_delete(event.row)
        self._recompute_once_per_tx(event.tx)

    def _handle_update(self, event: RowUpdated) -> None:
        change = classify_membership(self.where, event.old_row, event.new_row)

        if change is MembershipChange.stay_out:
            return

        self._record("row_updated", tx=event.tx, change=change.value)
        if change is MembershipChange.leave:
            if self.callbacks.on_delete:
                self.callbacks.on_delete(event.old_row)
        elif change is MembershipChange.enter:
            if self.callbacks.on_insert:
                self.callbacks.on_insert(event.new_row)
        elif self.callbacks.on_update:
            self.callbacks.on_update(event.old_row, event.new_row)

        self._recompute_once_per_tx(event.tx)

    # ------------------------------------------------------------------
    # Snapshot maintenance
    # ------------------------------------------------------------------

    def _recompute_once_per_tx(self, tx: Any) -> None:
        # the cache already holds the whole transaction when its first event
        # arrives, so one recompute covers every event carrying the same
        # marker object; markers compare by identity
        if tx is not None and tx is self._last_tx:
            self._record("recompute_skipped", tx=tx)
            return
        self._last_tx = tx
        self._recompute()

    def _compute_snapshot(self) -> tuple:
        table = self._get_table()
        if self.where is None:
            return tuple(table.iter())
        return tuple(row for row in table.iter() if evaluate(self.where, row))

    def _recompute(self) -> None:
        rows = self._compute_snapshot()
        self._rows = rows
        self._record("snapshot_recomputed", rows=len(rows))
        logger.debug("Recomputed %s: %d rows", self.view_id, len(rows))
        for observer in list(self._row_observers):
            if observer in self._row_observers:
                observer(rows)

    def _get_table(self) -> TableCache:
        if self._table is None:
            self._table = self.connection.table(self.table_name)
        return self._table

    def _listen_to_table(self) -> None:
        if self._table_unsubscribers:
            return
        table = self._get_table()
        self._table_unsubscribers = [
            table.on_insert(self._on_insert),
            table.on_delete(self._on_delete),
            table.on_update(self._on_update),
        ]

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    def destroy(self) -> None:
        """Deregister every listener and cancel the subscription. Idempotent."""
        if self._destroyed:
            return
        self._destroyed = True

        self._lifecycle.close()
        unsubscribers, self._table_unsubscribers = self._table_unsubscribers, []
        for unsubscribe in unsubscribers:
            unsubscribe()
        self._row_observers.clear()

        self._record("destroyed")
        logger.info("Destroyed %s", self.view_id)

    def __enter__(self) -> "TableQuery":
        return self

    def __exit__(self, *exc_info) -> None:
        self.destroy()

    def __repr__(self) -> str:
        return f"<TableQuery({self.view_id}, state={self._state.value}, rows={len(self._rows)})>"

    def _record(self, event_type: str, **data) -> None:
        if self.trace is not None:
            self.trace.add_event(event_type, **data)
