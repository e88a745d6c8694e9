"""Interpreting the response of the server.

The response is shaped according to the query that was sent:
a query with cardinality "one" provides a ``row``, otherwise ``rows`` are given.
When the server reported the total number of rows (``Prefer: count=...``),
the ``total_length`` and ``pages_length`` are included as well.
"""

from __future__ import annotations

import logging
import math
import typing
from collections.abc import Iterator, Mapping

from pgrestclient import conf
from pgrestclient.exceptions import IncorrectCardinality, PostgrestError
from pgrestclient.types import Cardinality, Returning

if typing.TYPE_CHECKING:
    import httpx

    from pgrestclient.query import Query, QueryData

    from .transport import RawResponse

logger = logging.getLogger(__name__)

__all__ = ("QueryResponse", "decode_response", "get_count_metadata", "validate_cardinality")


class QueryResponse(Mapping):
    """The decoded response.

    This is a read-only mapping that only has the keys which apply:
    ``rows`` or ``row``, ``total_length``, ``pages_length`` and ``location``.
    The keys can also be read as attributes::

        response = client.get(query.count("exact"))
        response.rows
        response.get("total_length")

    The ``status``, ``status_text`` and ``headers`` of the response are
    always available as attributes.
    """

    def __init__(self, status: int, status_text: str, headers: httpx.Headers, **fields):
        self.status = status
        self.status_text = status_text
        self.headers = headers
        self._fields = fields

    def __getitem__(self, key):
        return self._fields[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self):
        return len(self._fields)

    def __getattr__(self, name):
        try:
            return self.__dict__["_fields"][name]
        except KeyError:
            raise AttributeError(
                f"'{self.__class__.__name__}' object has no attribute '{name}'"
            ) from None

    def __repr__(self):
        return f"<{self.__class__.__name__}: {self.status} {self._fields!r}>"


def get_count_metadata(headers: httpx.Headers, limit: int | None) -> dict:
    """Read the total number of rows from the ``Content-Range`` header.

    The header looks like ``0-9/342``. When the total is unknown (``*``)
    or the header is missing, nothing is returned.
    """
    content_range = headers.get("Content-Range")
    if not content_range or "/" not in content_range:
        return {}

    total = content_range.split("/", 1)[1].strip()
    if not total.isdigit():
        return {}

    total_length = int(total)
    pages_length = math.ceil(total_length / limit) if limit and total_length > 0 else 1
    return {"pages_length": pages_length, "total_length": total_length}


def validate_cardinality(data: QueryData, body):
    """Check that the body has the shape that the query described.

    A query with cardinality "many" must provide a list,
    and a query with cardinality "one" must provide an object (or ``None``).
    The embedded resources of every row are checked as well.
    Rows that don't include an embedded resource are not checked.

    :raises IncorrectCardinality: When the shape doesn't match.
    """
    is_list = isinstance(body, list)
    if (data.cardinality == Cardinality.ONE) == is_list:
        raise IncorrectCardinality(data.cardinality.value)

    embedded_selectors = data.get_embedded()
    if not embedded_selectors:
        return

    rows = body if is_list else [body]
    for row in rows:
        if not isinstance(row, Mapping):
            continue

        for embedded in embedded_selectors:
            value = row.get(embedded.alias)
            if value is None:
                # Not selected, or no related object for a "one" relation.
                if embedded.alias in row and embedded.query.cardinality == Cardinality.MANY:
                    raise IncorrectCardinality(Cardinality.MANY.value)
                continue

            validate_cardinality(embedded.query.data, value)


def decode_response(query: Query, response: RawResponse, method: str = "GET") -> QueryResponse:
    """Translate the raw response into a :class:`QueryResponse`.

    :param query: The query that was sent.
    :param response: The response of the transport.
    :param method: The HTTP method of the request.
    :raises PostgrestError: When the server responded with an error status.
    :raises IncorrectCardinality: When the response doesn't match the shape of the query.
    """
    method = method.upper()
    data = query.data
    if not response.ok:
        error_data = response.body if response.has_body and method != "HEAD" else None
        logger.debug(
            "%s request for '%s' failed with status %s: %r",
            method,
            data.resource,
            response.status,
            error_data,
        )
        raise PostgrestError(response.status, response.status_text, error_data, response.headers)

    fields = get_count_metadata(response.headers, data.limit)
    if method == "HEAD":
        return QueryResponse(response.status, response.status_text, response.headers, **fields)

    if (
        response.has_body
        and conf.PGRESTCLIENT_VALIDATE_CARDINALITY
        and (method == "GET" or data.returning == Returning.REPRESENTATION)
    ):
        validate_cardinality(data, response.body)

    if data.cardinality == Cardinality.ONE:
        fields["row"] = response.body if response.has_body else None
    elif response.has_body and response.body is not None:
        fields["rows"] = response.body

    location = response.headers.get("Location")
    if location:
        fields["location"] = location

    return QueryResponse(response.status, response.status_text, response.headers, **fields)
