"""The selectors of a query (vertical filtering).

Each item that is passed to :meth:`Query.select() <pgrestclient.query.Query.select>`
is translated into one of the selector classes here:

* :class:`Wildcard` for ``*``.
* :class:`Column` for a plain column name.
* :class:`ModifiedColumn` for a renamed and/or casted column (``alias:column::cast``).
* :class:`JsonPath` for a JSON/composite path (``column->key->>text``).
* :class:`Embedded` for an embedded resource, optionally renamed.
* :class:`InvalidSelector` for anything else.

The shape of the input is only sniffed once, when :func:`parse_selectors` runs.
Invalid input is kept as :class:`InvalidSelector`, which raises
:class:`~pgrestclient.exceptions.InvalidSelect` when the query is compiled.
"""

from __future__ import annotations

import typing
from collections.abc import Mapping
from dataclasses import dataclass

from pgrestclient.exceptions import InvalidSelect

if typing.TYPE_CHECKING:
    from .query import Query

__all__ = (
    "Selector",
    "Wildcard",
    "WILDCARD",
    "Column",
    "ModifiedColumn",
    "JsonPath",
    "Embedded",
    "InvalidSelector",
    "parse_selectors",
    "is_modifier",
)

#: The keys that make a dict a modifier of the preceding selector.
MODIFIER_KEYS = ("name", "cast")

JSON_ARROW = "->"
JSON_TEXT_ARROW = "->>"


class Selector:
    """Base class for all selector types."""

    def as_string(self) -> str:
        """Render the selector in the ``select=`` grammar."""
        raise NotImplementedError()

    def as_object(self):
        """Render the selector as JSON-serializable data."""
        raise NotImplementedError()


@dataclass(frozen=True)
class Wildcard(Selector):
    """The ``*`` selector, all columns of the resource.

    The server ignores explicit columns when the wildcard is also present,
    but both are still written as given.
    """

    def as_string(self) -> str:
        return "*"

    def as_object(self):
        return "*"


WILDCARD = Wildcard()


@dataclass(frozen=True)
class Column(Selector):
    """A plain column."""

    column: str

    def as_string(self) -> str:
        return self.column

    def as_object(self):
        return self.column


@dataclass(frozen=True)
class ModifiedColumn(Selector):
    """A column with a new name and/or a type cast.

    This renders as ``name:column::cast``.
    """

    column: str
    name: str | None = None
    cast: str | None = None

    def as_string(self) -> str:
        selector = f"{self.name}:{self.column}" if self.name else self.column
        if self.cast:
            selector += f"::{self.cast}"
        return selector

    def as_object(self):
        modifier = {}
        if self.name:
            modifier["name"] = self.name
        if self.cast:
            modifier["cast"] = self.cast
        return {"column": self.column, "modifier": modifier}


@dataclass(frozen=True)
class JsonPath(Selector):
    """A JSON or composite column path, e.g. ``data->address->>city``.

    The path is already valid grammar, so it's written as-is.
    """

    path: str

    @property
    def column(self) -> str:
        """The column that holds the JSON data."""
        return self.path.split(JSON_ARROW, 1)[0]

    @property
    def as_text(self) -> bool:
        """Tell whether the last value is extracted as text (``->>``)."""
        return JSON_TEXT_ARROW in self.path

    def as_string(self) -> str:
        return self.path

    def as_object(self):
        return self.path


@dataclass(frozen=True)
class Embedded(Selector):
    """An embedded resource, e.g. ``alias:table!inner(col1,col2)``."""

    query: Query
    name: str | None = None

    @property
    def alias(self) -> str:
        """The name under which the embedded resource appears in the response."""
        return self.name or self.query.resource

    def as_string(self) -> str:
        data = self.query.data
        rename = f"{self.name}:" if self.name else ""
        inner = "!inner" if data.inner else ""
        select = ",".join(selector.as_string() for selector in data.selectors)
        return f"{rename}{data.resource}{inner}({select})"

    def as_object(self):
        if self.name:
            return {"query": self.query.to_object(), "modifier": {"name": self.name}}
        else:
            return self.query.to_object()


@dataclass(frozen=True, eq=False)
class InvalidSelector(Selector):
    """A selector shape that is not recognized.

    Keeping it allows the error to be raised when the query is compiled.
    """

    payload: typing.Any

    def as_string(self) -> str:
        raise InvalidSelect(self.payload)

    def as_object(self):
        raise InvalidSelect(self.payload)

    def __eq__(self, other):
        # Payloads may contain unhashable values.
        return isinstance(other, InvalidSelector) and self.payload == other.payload

    def __hash__(self):
        return hash(repr(self.payload))


def is_modifier(value) -> bool:
    """Tell whether the value looks like a ``{"name": ..., "cast": ...}`` modifier."""
    return isinstance(value, Mapping) and any(value.get(key) for key in MODIFIER_KEYS)


def parse_selectors(selector, json_only=False) -> list[Selector]:
    """Translate the input of ``select()`` into selector objects.

    A two-element list/tuple whose second element is a modifier is a single
    modified selector. Any other list/tuple is a list of independent selectors.

    :param selector: The value given to ``select()``.
    :param json_only: Only allow columns and ``->`` paths (used by ``select_json()``).
    """
    if isinstance(selector, (list, tuple)) and not _is_modifier_pair(selector):
        return [_parse_selector(item, json_only=json_only) for item in selector]
    else:
        return [_parse_selector(selector, json_only=json_only)]


def _is_modifier_pair(value) -> bool:
    return isinstance(value, (list, tuple)) and len(value) == 2 and is_modifier(value[1])


def _parse_selector(item, json_only=False) -> Selector:  # noqa: C901
    from .query import Query

    if isinstance(item, Selector):
        if json_only and (
            not isinstance(item, (Column, JsonPath))
            or (isinstance(item, JsonPath) and item.as_text)
        ):
            return InvalidSelector(item)
        return item
    elif isinstance(item, str):
        if json_only and (item == "*" or JSON_TEXT_ARROW in item):
            # The "->>" variant is only allowed in a plain select().
            return InvalidSelector(item)
        elif item == "*":
            return WILDCARD
        elif JSON_ARROW in item:
            return JsonPath(item)
        else:
            return Column(item)
    elif json_only:
        return InvalidSelector(_to_payload(item))
    elif isinstance(item, Query):
        return Embedded(item)
    elif _is_modifier_pair(item):
        target, modifier = item
        name = modifier.get("name") or None
        if isinstance(target, Query):
            # An embedded resource can be renamed, but not casted.
            if name and not modifier.get("cast"):
                return Embedded(target, name=name)
        elif isinstance(target, str) and target != "*":
            return ModifiedColumn(target, name=name, cast=modifier.get("cast") or None)

    return InvalidSelector(_to_payload(item))


def _to_payload(item):
    """Make a shallow copy of the payload, so later mutations of the input don't leak in."""
    if isinstance(item, list):
        return tuple(item)
    elif isinstance(item, Mapping):
        return dict(item)
    return item
