"""The enumerations of the PostgREST query protocol.

Each member value is exactly the token that is written in the URL or the
``Prefer`` header. Methods that accept these enums also accept the plain
string value, so ``query.count("exact")`` and ``query.count(Count.EXACT)``
are equivalent.
"""

from __future__ import annotations

from enum import Enum

__all__ = (
    "ProtocolEnum",
    "Cardinality",
    "FilterOperator",
    "LogicalOperator",
    "Count",
    "Returning",
    "ConflictResolution",
    "Missing",
    "SortOrder",
    "NullsPosition",
    "JSON_MEDIA_TYPE",
    "OBJECT_MEDIA_TYPE",
    "JSON_MEDIA_TYPES",
)

#: The default representation (an array of rows).
JSON_MEDIA_TYPE = "application/json"

#: The singular representation (one object instead of an array).
OBJECT_MEDIA_TYPE = "application/vnd.pgrst.object+json"

#: Content types that have a JSON body.
JSON_MEDIA_TYPES = (JSON_MEDIA_TYPE, OBJECT_MEDIA_TYPE)


class ProtocolEnum(str, Enum):
    """Base class for the protocol tokens.

    Parsing a value that isn't known raises a :class:`ValueError`
    that mentions the allowed choices.
    """

    @classmethod
    def _missing_(cls, value):
        choices = ", ".join(repr(member.value) for member in cls)
        raise ValueError(f"{value!r} is not a valid {cls.__name__}, expected one of: {choices}")

    def __str__(self):
        return self.value

    def __repr__(self):
        # Make repr(query) easier to copy-paste
        return f"{self.__class__.__name__}.{self.name}"


class Cardinality(ProtocolEnum):
    """Whether a query yields a single object or a collection."""

    ONE = "one"
    MANY = "many"


class FilterOperator(ProtocolEnum):
    """The horizontal filter operators.

    The declaration order is also the order in which the filters are
    written in the query string.
    """

    EQ = "eq"
    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"
    NEQ = "neq"
    LIKE = "like"
    ILIKE = "ilike"
    IN = "in"
    IS = "is"


class LogicalOperator(ProtocolEnum):
    """The operators that group filters."""

    AND = "and"
    OR = "or"


class Count(ProtocolEnum):
    """Values for ``Prefer: count=``."""

    EXACT = "exact"
    PLANNED = "planned"
    ESTIMATED = "estimated"


class Returning(ProtocolEnum):
    """Values for ``Prefer: return=``."""

    MINIMAL = "minimal"
    HEADERS_ONLY = "headers-only"
    REPRESENTATION = "representation"


class ConflictResolution(ProtocolEnum):
    """Values for ``Prefer: resolution=`` (upsert behavior)."""

    IGNORE_DUPLICATES = "ignore-duplicates"
    MERGE_DUPLICATES = "merge-duplicates"


class Missing(ProtocolEnum):
    """Values for ``Prefer: missing=``."""

    DEFAULT = "default"


class SortOrder(ProtocolEnum):
    """Ordering direction."""

    ASC = "asc"
    DESC = "desc"


class NullsPosition(ProtocolEnum):
    """Where NULL values are sorted."""

    FIRST = "first"
    LAST = "last"
