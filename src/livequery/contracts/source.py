"""Interfaces the engine expects from the sync client it sits on.

Anything that structurally matches these protocols can back a view: the
in-memory implementation in ``livequery.sources.memory`` or an adapter over
a real change-feed client.
"""
from __future__ import annotations

from typing import Any, Callable, Iterable, Optional, Protocol

from livequery.contracts.events import ConnectionStatus

Unsubscriber = Callable[[], None]

InsertCallback = Callable[[Optional[Any], Any], None]
DeleteCallback = Callable[[Optional[Any], Any], None]
UpdateCallback = Callable[[Optional[Any], Any, Any], None]


class TableCache(Protocol):
    """Full, unfiltered local cache of one upstream table."""

    def iter(self) -> Iterable[Any]: ...

    def on_insert(self, callback: InsertCallback) -> Unsubscriber: ...

    def on_delete(self, callback: DeleteCallback) -> Unsubscriber: ...

    def on_update(self, callback: UpdateCallback) -> Unsubscriber: ...


class SubscriptionHandle(Protocol):
    def unsubscribe(self) -> None: ...


class SubscriptionBuilder(Protocol):
    def on_applied(self, callback: Callable[[], None]) -> "SubscriptionBuilder": ...

    def subscribe(self, query: str) -> SubscriptionHandle: ...


class Connection(Protocol):
    @property
    def is_active(self) -> bool: ...

    def table(self, name: str) -> TableCache: ...

    def subscription_builder(self) -> SubscriptionBuilder: ...


class StatusSource(Protocol):
    """Observable connection status.

    ``subscribe`` calls back with the current value immediately and again on
    every change.
    """

    def subscribe(self, callback: Callable[[ConnectionStatus], None]) -> Unsubscriber: ...
