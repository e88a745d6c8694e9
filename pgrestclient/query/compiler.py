"""Translating a :class:`~pgrestclient.query.Query` into a query string.

The query string is built from independent clauses, which are
concatenated in a fixed order:

1. ``select`` with the vertical filters (and embedded resources).
2. The horizontal filters, e.g. ``id=eq.1`` and ``embedded.id=eq.1``.
3. The logical groups, e.g. ``or=(id.eq.1,id.eq.2)``.
4. The ``order`` parameters.
5. The ``limit`` and ``offset`` parameters.
6. The write-only parameters ``on_conflict`` and ``columns``.

Everything that is declared on an embedded query is written with the path
of that embedding as prefix, e.g. ``actors.roles.order=name``.
The path uses the alias of an embedding when it's renamed.
"""

from __future__ import annotations

import logging
import typing
from urllib.parse import unquote, urlencode

from pgrestclient.exceptions import InvalidInnerJoin

if typing.TYPE_CHECKING:
    from .filters import LogicalGroup
    from .query import Query, QueryData
    from .sorting import Order

logger = logging.getLogger(__name__)

__all__ = ("QueryCompiler",)

#: Characters which are not percent-encoded in the query string.
SAFE_CHARACTERS = "*"


class QueryCompiler:
    """Build the query string for a query.

    Each ``get_...()`` method returns a list of ``(key, value)`` pairs,
    and :meth:`get_pairs` combines them in the right order.
    """

    def __init__(self, query: Query):
        self.query = query
        self.data = query.data

    def to_string(self, encoded: bool = True) -> str:
        """Build the full query string.

        :param encoded: When disabled, the string is decoded again for readability.
        """
        query_string = urlencode(self.get_pairs(), safe=SAFE_CHARACTERS)
        if not encoded:
            query_string = unquote(query_string)

        logger.debug("Compiled query for '%s': %s", self.data.resource, query_string)
        return query_string

    def get_pairs(self) -> list[tuple[str, str]]:
        """Provide all parameters of the query string."""
        if self.data.inner:
            raise InvalidInnerJoin()

        pairs = []
        select = self.get_select()
        if select:
            pairs.append(("select", select))

        pairs.extend(self.get_filters(self.data))
        pairs.extend(self.get_logical_filters(self.data))
        pairs.extend(self.get_ordering())
        pairs.extend(self.get_pagination(self.data, "limit"))
        pairs.extend(self.get_pagination(self.data, "offset"))
        pairs.extend(self.get_write_parameters())
        return pairs

    def get_select(self) -> str:
        """Write the select clause, e.g. ``id,alias:col::text,embedded(*)``.

        :raises InvalidSelect: When a selector has an unrecognized shape.
        """
        return ",".join(selector.as_string() for selector in self.data.selectors)

    def get_filters(self, data: QueryData, prefix: str = "") -> list[tuple[str, str]]:
        """Write the horizontal filters of the query and its embedded queries.

        Filters are grouped by operator, and come before those of embedded queries.
        """
        pairs = [(f"{prefix}{f.column}", f.as_value()) for f in data.get_filters()]
        for embedded in data.get_embedded():
            pairs.extend(self.get_filters(embedded.query.data, f"{prefix}{embedded.alias}."))
        return pairs

    def get_logical_filters(self, data: QueryData, prefix: str = "") -> list[tuple[str, str]]:
        """Write the ``and``/``or`` groups of the query and its embedded queries."""
        pairs = [
            (f"{prefix}{group.key}", self.format_logical_group(group))
            for group in data.get_logical_groups()
        ]
        for embedded in data.get_embedded():
            pairs.extend(
                self.get_logical_filters(embedded.query.data, f"{prefix}{embedded.alias}.")
            )
        return pairs

    def format_logical_group(self, group: LogicalGroup) -> str:
        """Write the contents of a logical group, e.g. ``(id.eq.1,and(id.gte.11,id.lte.17))``.

        Each child query adds its own filters, followed by its nested logical groups.
        The selectors of a child query are not part of the group.
        """
        items = []
        for query in group.queries:
            data = query.data
            items.extend(f.as_inline() for f in data.get_filters())
            items.extend(
                f"{child.key}{self.format_logical_group(child)}"
                for child in data.get_logical_groups()
            )
        return "({})".format(",".join(items))

    def get_ordering(self) -> list[tuple[str, str]]:
        """Write the ``order`` parameters.

        The root ``order`` parameter contains the keys of the root query in
        declared order, followed by the keys of embedded queries that are marked
        with ``top=True``. The other keys of embedded queries are written in
        their own ``embedded.order`` parameter.
        """
        keys = [self.format_order(self.data, order) for order in self.data.ordering]
        keys.extend(self._get_top_ordering(self.data, path=()))

        pairs = []
        if keys:
            pairs.append(("order", ",".join(keys)))
        pairs.extend(self._get_embedded_ordering(self.data, prefix=""))
        return pairs

    def _get_top_ordering(self, data: QueryData, path: tuple[str, ...]) -> list[str]:
        """Collect the keys of embedded queries that order the root query."""
        keys = []
        for embedded in data.get_embedded():
            embedded_path = path + (embedded.alias,)
            embedded_data = embedded.query.data
            for order in embedded_data.ordering:
                if order.top:
                    column = self.format_order_column(embedded_data, order.column)
                    keys.append(order.as_string(column=_wrap_path(embedded_path, column)))

            keys.extend(self._get_top_ordering(embedded_data, embedded_path))
        return keys

    def _get_embedded_ordering(self, data: QueryData, prefix: str) -> list[tuple[str, str]]:
        pairs = []
        for embedded in data.get_embedded():
            embedded_data = embedded.query.data
            embedded_prefix = f"{prefix}{embedded.alias}."
            keys = [
                self.format_order(embedded_data, order)
                for order in embedded_data.ordering
                if not order.top
            ]
            if keys:
                pairs.append((f"{embedded_prefix}order", ",".join(keys)))
            pairs.extend(self._get_embedded_ordering(embedded_data, embedded_prefix))
        return pairs

    def format_order(self, data: QueryData, order: Order) -> str:
        return order.as_string(column=self.format_order_column(data, order.column))

    def format_order_column(self, data: QueryData, column: str) -> str:
        """Translate a dotted path to an embedded column into the ordering syntax.

        For example, ``director.last_name`` becomes ``director(last_name)``
        when ``director`` is the name of an embedded resource.
        Other columns are written as-is.
        """
        name, dot, rest = column.partition(".")
        if dot:
            for embedded in data.get_embedded():
                if name in (embedded.alias, embedded.query.resource):
                    return f"{name}({self.format_order_column(embedded.query.data, rest)})"
        return column

    def get_pagination(self, data: QueryData, name: str, prefix: str = "") -> list[tuple[str, str]]:
        """Write the ``limit`` or ``offset`` of the query and its embedded queries.

        An offset of zero is the default, and is omitted.
        """
        pairs = []
        value = getattr(data, name)
        if value is not None and not (name == "offset" and value == 0):
            pairs.append((f"{prefix}{name}", str(value)))

        for embedded in data.get_embedded():
            pairs.extend(
                self.get_pagination(embedded.query.data, name, f"{prefix}{embedded.alias}.")
            )
        return pairs

    def get_write_parameters(self) -> list[tuple[str, str]]:
        """Write the ``on_conflict`` and ``columns`` parameters.

        These only apply to the root resource; when declared on
        an embedded query, they are ignored.
        """
        pairs = []
        if self.data.on_conflict:
            pairs.append(("on_conflict", self.data.on_conflict))
        if self.data.columns:
            pairs.append(("columns", ",".join(self.data.columns)))
        return pairs


def _wrap_path(path: tuple[str, ...], column: str) -> str:
    """Write ``("a", "b"), "id"`` as ``a(b(id))``."""
    for name in reversed(path):
        column = f"{name}({column})"
    return column
