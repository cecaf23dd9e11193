"""Classifying a raw row update relative to a view's predicate."""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from livequery.contracts.filters import FilterExpr
from livequery.query.evaluate import evaluate


class MembershipChange(str, Enum):
    enter = "enter"
    leave = "leave"
    stay_in = "stay_in"
    stay_out = "stay_out"


def classify_membership(
    where: Optional[FilterExpr], old_row: Any, new_row: Any
) -> MembershipChange:
    """Turn one raw update into what it means for a filtered view.

    Without a predicate every update is a pass-through (``stay_in``).
    """
    if where is None:
        return MembershipChange.stay_in

    old_in = evaluate(where, old_row)
    new_in = evaluate(where, new_row)

    if old_in and not new_in:
        return MembershipChange.leave
    if not old_in and new_in:
        return MembershipChange.enter
    if old_in and new_in:
        return MembershipChange.stay_in
    return MembershipChange.stay_out
