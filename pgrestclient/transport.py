"""Sending the HTTP request.

The client only depends on the :class:`Transport` protocol, so any HTTP
library can be plugged in. The default :class:`HttpxTransport` uses httpx.

A transport decides whether the response has a body by inspecting the
``Content-Type`` header. The body is either the parsed JSON data
(which can be ``None`` for a JSON ``null``), or :data:`NO_BODY`.
"""

from __future__ import annotations

import logging
import typing
from dataclasses import dataclass

import httpx
import orjson

from pgrestclient import conf
from pgrestclient.exceptions import TransportError
from pgrestclient.types import JSON_MEDIA_TYPES

logger = logging.getLogger(__name__)

__all__ = ("NO_BODY", "RawResponse", "Transport", "HttpxTransport", "has_json_body")

NO_BODY = ...  # sentinel value, as None means a JSON null.


@dataclass
class RawResponse:
    """The response as it was received by the transport."""

    status: int
    status_text: str
    headers: httpx.Headers
    body: typing.Any = NO_BODY

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def has_body(self) -> bool:
        return self.body is not NO_BODY


class Transport(typing.Protocol):
    """The interface for sending requests."""

    def send(
        self, method: str, url: str, headers: httpx.Headers, body: typing.Any = NO_BODY
    ) -> RawResponse:
        """Perform the request.

        :param body: The request data, which is encoded as JSON.
        :raises TransportError: When no response could be received.
        """


def has_json_body(headers: httpx.Headers) -> bool:
    """Tell whether the content type is one of the JSON media types."""
    content_type = headers.get("Content-Type", "")
    return any(media_type in content_type for media_type in JSON_MEDIA_TYPES)


class HttpxTransport:
    """Send the requests with an :class:`httpx.Client`.

    :param client: A preconfigured client, e.g. one with authentication
        or a ``base_url``. By default, a new client is created.
    :param timeout: The timeout in seconds for the default client.
    """

    def __init__(self, client: httpx.Client | None = None, timeout: float | None = None):
        if client is None:
            if timeout is None:
                timeout = conf.PGRESTCLIENT_TIMEOUT
            client = httpx.Client(timeout=timeout)
        self.client = client

    def __repr__(self):
        return f"<{self.__class__.__name__}: {self.client!r}>"

    def send(
        self, method: str, url: str, headers: httpx.Headers, body: typing.Any = NO_BODY
    ) -> RawResponse:
        content = orjson.dumps(body) if body is not NO_BODY else None
        try:
            response = self.client.request(method, url, headers=headers, content=content)
        except httpx.TransportError as e:
            logger.debug("Request %s %s failed: %s", method, url, e)
            raise TransportError(f"{method} {url} failed: {e}") from e

        response_body = NO_BODY
        if response.content and has_json_body(response.headers):
            try:
                response_body = orjson.loads(response.content)
            except orjson.JSONDecodeError as e:
                # Error pages of proxies may claim to be JSON.
                if response.is_success:
                    raise TransportError(f"{method} {url} returned invalid JSON: {e}") from e
                logger.debug("Ignoring invalid JSON error body of %s %s: %s", method, url, e)

        return RawResponse(
            status=response.status_code,
            status_text=response.reason_phrase,
            headers=response.headers,
            body=response_body,
        )

    def close(self):
        self.client.close()
