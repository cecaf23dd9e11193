"""View engine package."""

from livequery.engine.lifecycle import SubscriptionLifecycle
from livequery.engine.membership import MembershipChange, classify_membership
from livequery.engine.table_query import QueryCallbacks, TableQuery

__all__ = [
    "SubscriptionLifecycle",
    "MembershipChange",
    "classify_membership",
    "QueryCallbacks",
    "TableQuery",
]
