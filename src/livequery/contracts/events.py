"""Events a view reacts to.

Every callback a view registers with an external collaborator does nothing
but wrap its arguments in one of these and hand it to
``TableQuery.apply_event``.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union


class ConnectionStatus(str, Enum):
    disconnected = "disconnected"
    connecting = "connecting"
    connected = "connected"
    error = "error"


class ViewState(str, Enum):
    loading = "loading"
    ready = "ready"


@dataclass(frozen=True)
class StatusChanged:
    status: ConnectionStatus


@dataclass(frozen=True)
class SubscriptionApplied:
    pass


@dataclass(frozen=True)
class RowInserted:
    tx: Optional[Any]
    row: Any


@dataclass(frozen=True)
class RowDeleted:
    tx: Optional[Any]
    row: Any


@dataclass(frozen=True)
class RowUpdated:
    tx: Optional[Any]
    old_row: Any
    new_row: Any


ViewEvent = Union[StatusChanged, SubscriptionApplied, RowInserted, RowDeleted, RowUpdated]
