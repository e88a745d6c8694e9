"""Horizontal filters and the logical operators that group them.

A filter is written in the query string as ``column=[not.]operator.value``,
for example ``id=gt.5`` or ``name=not.in.(foo,"with,comma")``.
Inside a logical group, the same filter is written inline as
``column.[not.]operator.value``, e.g. ``or=(id.eq.1,id.eq.2)``.
"""

from __future__ import annotations

import typing
from dataclasses import dataclass
from decimal import Decimal

from pgrestclient.types import FilterOperator, LogicalOperator

if typing.TYPE_CHECKING:
    from .query import Query

__all__ = (
    "ScalarTypes",
    "FilterValue",
    "Filter",
    "LogicalGroup",
    "format_value",
    "sanitize_value",
    "format_list",
    "SPECIAL_CHARACTERS",
)

ScalarTypes = typing.Union[str, int, float, Decimal, bool, None]
FilterValue = typing.Union[ScalarTypes, tuple[ScalarTypes, ...]]

#: Characters that are reserved in the filter grammar.
#: Values containing these are double-quoted where the grammar needs it.
SPECIAL_CHARACTERS = (",", ".", ":", "(", ")", '"', " ")


def format_value(value: ScalarTypes) -> str:
    """Translate a Python value into its query string token."""
    if value is None:
        return "null"
    elif value is True:
        return "true"
    elif value is False:
        return "false"
    else:
        return str(value)


def sanitize_value(value: ScalarTypes) -> str:
    """Quote a value when it contains reserved characters.

    Double quotes inside the value are escaped with a backslash.
    Values without any special characters are returned as-is.
    """
    token = format_value(value)
    if any(char in token for char in SPECIAL_CHARACTERS):
        escaped = token.replace('"', '\\"')
        return f'"{escaped}"'
    return token


def format_list(values: typing.Iterable[ScalarTypes]) -> str:
    """Write a list of values, e.g. ``(1,2,"a,b")``.
    The parentheses are always written, even for a single item.
    """
    return "({})".format(",".join(sanitize_value(value) for value in values))


@dataclass(frozen=True)
class Filter:
    """A single horizontal filter, e.g. ``id=eq.1``.

    The ``value`` holds a tuple for the ``in`` operator.
    """

    operator: FilterOperator
    column: str
    value: FilterValue
    negated: bool = False

    @property
    def is_list(self) -> bool:
        return isinstance(self.value, tuple)

    def format_value(self, quoted: bool = False) -> str:
        """Write the operand of the filter.

        :param quoted: Whether scalar values should be quoted as well.
            This is needed inside logical groups, where commas and parentheses
            are part of the surrounding grammar.
        """
        if self.is_list:
            return format_list(self.value)
        elif quoted:
            return sanitize_value(self.value)
        else:
            return format_value(self.value)

    def as_value(self, quoted: bool = False) -> str:
        """Write the filter as query string value, e.g. ``not.eq.1``."""
        not_prefix = "not." if self.negated else ""
        return f"{not_prefix}{self.operator.value}.{self.format_value(quoted=quoted)}"

    def as_inline(self, prefix: str = "") -> str:
        """Write the filter as it appears inside a logical group, e.g. ``id.not.eq.1``."""
        return f"{prefix}{self.column}.{self.as_value(quoted=True)}"

    def as_object(self) -> list:
        value = list(self.value) if self.is_list else self.value
        return [self.column, value, self.negated]


@dataclass(frozen=True)
class LogicalGroup:
    """An ``and``/``or`` group of the filters from the child queries.

    The child queries only hold filters and nested logical groups.
    They are never written as a resource of their own.
    """

    operator: LogicalOperator
    queries: tuple[Query, ...]
    negated: bool = False

    @property
    def key(self) -> str:
        """The name of the group, e.g. ``not.or``."""
        return f"not.{self.operator.value}" if self.negated else self.operator.value

    def as_object(self) -> list:
        return [[query.to_object() for query in self.queries], self.negated]
