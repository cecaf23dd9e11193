"""Predicate building, evaluation and rendering."""

from livequery.query.builder import QueryBuilder, and_, build_predicate, eq, or_, where
from livequery.query.evaluate import evaluate
from livequery.query.render import build_select, escape_ident, format_value, render

__all__ = [
    "QueryBuilder",
    "and_",
    "build_predicate",
    "eq",
    "or_",
    "where",
    "evaluate",
    "build_select",
    "escape_ident",
    "format_value",
    "render",
]
