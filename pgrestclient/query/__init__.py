"""Building queries, and translating them into PostgREST query strings.

A query is described with the :class:`Query` builder, which is immutable.
The :class:`~pgrestclient.query.compiler.QueryCompiler` writes the
resulting query string, which can also be read with ``str(query)``.
"""

from __future__ import annotations

from .compiler import QueryCompiler
from .filters import Filter, LogicalGroup, format_value, sanitize_value
from .query import NegatedQuery, Query, QueryData
from .selectors import (
    WILDCARD,
    Column,
    Embedded,
    InvalidSelector,
    JsonPath,
    ModifiedColumn,
    Selector,
    Wildcard,
    parse_selectors,
)
from .sorting import Order

__all__ = [
    "Query",
    "QueryData",
    "NegatedQuery",
    "QueryCompiler",
    # Selectors
    "Selector",
    "Wildcard",
    "WILDCARD",
    "Column",
    "ModifiedColumn",
    "JsonPath",
    "Embedded",
    "InvalidSelector",
    "parse_selectors",
    # Filters
    "Filter",
    "LogicalGroup",
    "format_value",
    "sanitize_value",
    # Ordering
    "Order",
]
