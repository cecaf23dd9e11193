"""Client facade: one connection and one status source shared by many views."""

from __future__ import annotations

from typing import Optional, Union

from livequery.contracts.filters import FilterExpr
from livequery.contracts.source import Connection, StatusSource
from livequery.contracts.trace import ViewTrace
from livequery.engine.table_query import QueryCallbacks, TableQuery
from livequery.query.builder import PredicateBuilder
from livequery.util.logging import get_logger

logger = get_logger("client")


class LiveClient:
    """Creates views wired to the same connection and status source.

    If ``status`` is omitted the connection's own ``status`` attribute is used.
    """

    def __init__(self, connection: Connection, status: Optional[StatusSource] = None) -> None:
        if status is None:
            status = getattr(connection, "status", None)
        if status is None:
            raise ValueError("A status source is required when the connection has none")
        self.connection = connection
        self.status = status
        self._views: list[TableQuery] = []

    @property
    def views(self) -> list[TableQuery]:
        return [v for v in self._views if not v.destroyed]

    def table_query(
        self,
        table_name: str,
        where: Union[PredicateBuilder, FilterExpr, None] = None,
        callbacks: Optional[QueryCallbacks] = None,
        trace: Optional[ViewTrace] = None,
    ) -> TableQuery:
        view = TableQuery(
            self.connection,
            self.status,
            table_name,
            where=where,
            callbacks=callbacks,
            trace=trace,
        )
        self._views.append(view)
        logger.debug("Created view %s: %s", view.view_id, view.query)
        return view

    def close(self) -> None:
        """Destroy every view created through this client."""
        views, self._views = self._views, []
        for view in views:
            view.destroy()

    def __enter__(self) -> "LiveClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
