"""Coupling the connection status to a view's one-time subscribe."""

from __future__ import annotations

from typing import Callable, Optional

from livequery.contracts.events import ConnectionStatus
from livequery.contracts.source import Connection, StatusSource, SubscriptionHandle, Unsubscriber
from livequery.contracts.trace import ViewTrace
from livequery.util.logging import get_logger

logger = get_logger("lifecycle")


class SubscriptionLifecycle:
    """Issues exactly one subscribe per view, and only once the connection is active.

    A ``connected`` status seen while ``connection.is_active`` is still false
    is ignored; the listener stays registered and the next status change gets
    another chance. After the subscribe call the status listener is removed,
    so a later reconnect does not subscribe again.
    """

    def __init__(
        self,
        connection: Connection,
        status: StatusSource,
        query: str,
        on_applied: Callable[[], None],
        trace: Optional[ViewTrace] = None,
    ) -> None:
        self.connection = connection
        self.status = status
        self.query = query
        self._on_applied = on_applied
        self._trace = trace

        self._status_unsubscriber: Optional[Unsubscriber] = None
        self._handle: Optional[SubscriptionHandle] = None
        self._closed = False

    @property
    def subscribed(self) -> bool:
        return self._handle is not None

    @property
    def listening(self) -> bool:
        return self._status_unsubscriber is not None

    def attach(self, listener: Callable[[ConnectionStatus], None]) -> None:
        """Register ``listener`` on the status source.

        The source may call back synchronously from ``subscribe``; if that
        call already subscribed, the listener is dropped right away.
        """
        if self._closed or self.listening:
            return
        unsubscribe = self.status.subscribe(listener)
        if self.subscribed or self._closed:
            unsubscribe()
            return
        self._status_unsubscriber = unsubscribe

    def handle_status(self, status: ConnectionStatus) -> bool:
        """React to a status value; return True if this call subscribed."""
        if self._closed or self.subscribed:
            return False
        if ConnectionStatus(status) is not ConnectionStatus.connected:
            return False
        if not self.connection.is_active:
            logger.debug("Connection not active yet, deferring subscribe: %s", self.query)
            self._record("subscribe_deferred", status=str(status))
            return False

        logger.info("Subscribing: %s", self.query)
        self._record("subscribe_requested", query=self.query)
        handle = (
            self.connection.subscription_builder()
            .on_applied(self._on_applied)
            .subscribe(self.query)
        )
        if self._closed:
            # closed from inside an applied delivered during subscribe()
            handle.unsubscribe()
            return True
        self._handle = handle
        self._detach_status()
        return True

    def close(self) -> None:
        """Drop the status listener and cancel the subscription. Idempotent."""
        if self._closed:
            return
        self._closed = True
        self._detach_status()
        if self._handle is not None:
            handle, self._handle = self._handle, None
            handle.unsubscribe()

    def _detach_status(self) -> None:
        if self._status_unsubscriber is None:
            # still inside attach(); attach() drops the listener itself
            return
        unsubscribe, self._status_unsubscriber = self._status_unsubscriber, None
        unsubscribe()

    def _record(self, event_type: str, **data) -> None:
        if self._trace is not None:
            self._trace.add_event(event_type, **data)
