"""Live filtered views over subscribed tables."""

from livequery.client import LiveClient
from livequery.contracts.events import ConnectionStatus, ViewState
from livequery.contracts.filters import And, Eq, FilterExpr, Or
from livequery.engine.membership import MembershipChange, classify_membership
from livequery.engine.table_query import QueryCallbacks, TableQuery
from livequery.query.builder import QueryBuilder, and_, eq, or_, where
from livequery.query.evaluate import evaluate
from livequery.query.render import build_select, render

__all__ = [
    "LiveClient",
    "TableQuery",
    "QueryCallbacks",
    "ConnectionStatus",
    "ViewState",
    "MembershipChange",
    "classify_membership",
    # Expressions
    "And",
    "Eq",
    "FilterExpr",
    "Or",
    "QueryBuilder",
    "and_",
    "eq",
    "or_",
    "where",
    "evaluate",
    "render",
    "build_select",
]
