"""Exceptions raised by the query builder, the decoder and the client.

There are three kinds of errors:

* Build-time errors (:class:`QueryBuildError`), raised while compiling a query.
  These are programming errors, e.g. an invalid select payload.
* Protocol errors (:class:`PostgrestError`), raised when the server answered
  with a non-success status code. These carry the full diagnostic body.
* Structural errors (:class:`IncorrectCardinality`), raised after a successful
  request when the response shape doesn't match how the query was declared.

None of these are retried.
"""

from __future__ import annotations

import typing

import orjson

if typing.TYPE_CHECKING:
    import httpx


class QueryBuildError(ValueError):
    """Raise a ValueError for a query that can't be compiled.
    This helps to distinguish between a malformed query description
    and bad data returned by the server.
    """


class InvalidSelect(QueryBuildError):
    """A selector has a shape that is not recognized."""

    def __init__(self, payload):
        self.payload = payload
        super().__init__(f"Invalid select {_dump_payload(payload)}")


class InvalidInnerJoin(QueryBuildError):
    """The ``!inner`` modifier was used on a query that isn't embedded."""

    def __init__(self, text=None):
        super().__init__(text or ".inner() can be used only on embedded queries")


class IncorrectCardinality(ValueError):
    """The response contains a list where an object was expected, or vice versa."""

    def __init__(self, cardinality):
        self.cardinality = cardinality
        super().__init__(f'Incorrect cardinality "{cardinality}" for embedded query')


class TransportError(Exception):
    """The transport could not produce any response (e.g. connection refused)."""


class PostgrestError(Exception):
    """The server responded with a non-success status code.

    The ``data`` attribute holds the parsed error body when the server
    returned JSON, typically a dict with ``code``, ``message``, ``details``
    and ``hint`` keys.
    """

    def __init__(self, status: int, status_text: str, data, headers: httpx.Headers):
        super().__init__(f"Request failed with status code {status}")
        self.status = status
        self.status_text = status_text
        self.data = data
        self.headers = headers

    @property
    def code(self) -> str | None:
        """The PostgREST/PostgreSQL error code, if the body provided one."""
        return self.data.get("code") if isinstance(self.data, dict) else None

    @property
    def message(self) -> str | None:
        return self.data.get("message") if isinstance(self.data, dict) else None

    def __repr__(self):
        return (
            f"{self.__class__.__name__}(status={self.status!r},"
            f" status_text={self.status_text!r}, data={self.data!r})"
        )


def _dump_payload(payload) -> str:
    """Render the offending payload the way it was given, as far as JSON allows."""
    try:
        return orjson.dumps(payload, default=repr).decode()
    except TypeError:
        return repr(payload)
