"""The client that performs the requests for a query.

Example::

    client = PostgrestClient("https://example.com/api/")
    query = client.query("films").select(["id", "title"]).eq("year", 1999).count("exact")
    response = client.get(query)
    response.rows, response.total_length
"""

from __future__ import annotations

import logging
import typing

from pgrestclient import conf
from pgrestclient.headers import build_request_headers
from pgrestclient.query import Query
from pgrestclient.response import QueryResponse, decode_response
from pgrestclient.transport import NO_BODY, HttpxTransport, Transport
from pgrestclient.types import Cardinality

if typing.TYPE_CHECKING:
    from pgrestclient.headers import HeaderInput

logger = logging.getLogger(__name__)

__all__ = ("PostgrestClient", "create_client")


class PostgrestClient:
    """Perform requests against a PostgREST server.

    :param base_url: The URL of the server, defaults to the ``PGRESTCLIENT_BASE_URL`` setting.
    :param transport: What sends the requests, defaults to :class:`HttpxTransport`.
    :param encode_query_strings: Whether the query strings are percent-encoded,
        defaults to the ``PGRESTCLIENT_ENCODE_QUERY_STRINGS`` setting.
    """

    def __init__(
        self,
        base_url: str | None = None,
        transport: Transport | None = None,
        encode_query_strings: bool | None = None,
    ):
        self.base_url = base_url if base_url is not None else conf.PGRESTCLIENT_BASE_URL
        self.transport = transport if transport is not None else HttpxTransport()
        self.encode_query_strings = (
            encode_query_strings
            if encode_query_strings is not None
            else conf.PGRESTCLIENT_ENCODE_QUERY_STRINGS
        )

    def __repr__(self):
        return f"<{self.__class__.__name__}: {self.base_url}>"

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def close(self):
        """Release the connections of the transport."""
        close = getattr(self.transport, "close", None)
        if close is not None:
            close()

    def query(self, resource: str) -> Query:
        """Start a new query for a table or view."""
        return Query(resource)

    def embedded_query(
        self, resource: str, cardinality: Cardinality | str = Cardinality.MANY
    ) -> Query:
        """Start a query that will be embedded in another query.

        :param cardinality: Use "one" for a to-one relation.
        """
        query = Query(resource)
        if Cardinality(cardinality) == Cardinality.ONE:
            query = query.single()
        return query

    def get_url(self, query: Query) -> str:
        """Tell the full URL of the query."""
        base_url = self.base_url if self.base_url.endswith("/") else f"{self.base_url}/"
        query_string = query.to_string(encoded=self.encode_query_strings)
        if query_string:
            return f"{base_url}{query.resource}?{query_string}"
        return f"{base_url}{query.resource}"

    def get(self, query: Query, headers: HeaderInput | None = None) -> QueryResponse:
        """Fetch the rows.

        The response has a ``rows`` key, or a ``row`` key when the query uses ``single()``.
        """
        return self.request("GET", query, headers=headers)

    def head(self, query: Query, headers: HeaderInput | None = None) -> QueryResponse:
        """Only fetch the count metadata (``total_length`` and ``pages_length``)."""
        return self.request("HEAD", query, headers=headers)

    def post(self, query: Query, data, headers: HeaderInput | None = None) -> QueryResponse:
        """Insert one object or a list of objects.

        Use ``query.on_conflict(...)`` to perform an upsert.
        The inserted rows are only returned with ``query.returning("representation")``.
        """
        return self.request("POST", query, data, headers=headers)

    def patch(self, query: Query, data, headers: HeaderInput | None = None) -> QueryResponse:
        """Update the rows that match the filters of the query."""
        return self.request("PATCH", query, data, headers=headers)

    def put(self, query: Query, data, headers: HeaderInput | None = None) -> QueryResponse:
        """Insert or replace a single row, identified by the ``eq`` filters of the primary key."""
        return self.request("PUT", query, data, headers=headers)

    def delete(self, query: Query, headers: HeaderInput | None = None) -> QueryResponse:
        """Delete the rows that match the filters of the query."""
        return self.request("DELETE", query, headers=headers)

    def request(
        self, method: str, query: Query, data=NO_BODY, headers: HeaderInput | None = None
    ) -> QueryResponse:
        """Send the query with the given HTTP method.

        :raises QueryBuildError: When the query can't be compiled.
        :raises TransportError: When the server could not be reached.
        :raises PostgrestError: When the server responded with an error status.
        :raises IncorrectCardinality: When the response doesn't match the query.
        """
        method = method.upper()
        url = self.get_url(query)
        request_headers = build_request_headers(query.data, method, headers)
        logger.debug("Sending %s %s", method, url)

        response = self.transport.send(method, url, request_headers, data)
        logger.debug(
            "Received %s %s for %s %s", response.status, response.status_text, method, url
        )
        return decode_response(query, response, method)


def create_client(**config) -> PostgrestClient:
    """Create a client, the arguments are the same as for :class:`PostgrestClient`."""
    return PostgrestClient(**config)
