"""Contracts package - expression models, events and envelopes."""

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
from livequery.contracts.filters import And, Eq, FilterExpr, Or, Value
from livequery.contracts.outcome import Message, Outcome, err, warn
from livequery.contracts.specs import (
    OperationSpec,
    ReplayReport,
    ScenarioSpec,
    TableSpec,
    TransactionSpec,
    ViewReport,
    ViewSpec,
)
from livequery.contracts.trace import TraceEvent, ViewTrace

__all__ = [
    # Events
    "ConnectionStatus",
    "RowDeleted",
    "RowInserted",
    "RowUpdated",
    "StatusChanged",
    "SubscriptionApplied",
    "ViewEvent",
    "ViewState",
    # Filters
    "And",
    "Eq",
    "FilterExpr",
    "Or",
    "Value",
    # Outcome
    "Message",
    "Outcome",
    "err",
    "warn",
    # Specs
    "OperationSpec",
    "ReplayReport",
    "ScenarioSpec",
    "TableSpec",
    "TransactionSpec",
    "ViewReport",
    "ViewSpec",
    # Trace
    "TraceEvent",
    "ViewTrace",
]
