"""In-process implementations of the sync-client interfaces."""

from livequery.sources.memory import (
    InMemoryConnection,
    InMemoryTable,
    Operation,
    StatusSignal,
    Transaction,
)

__all__ = [
    "InMemoryConnection",
    "InMemoryTable",
    "Operation",
    "StatusSignal",
    "Transaction",
]
