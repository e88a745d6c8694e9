from __future__ import annotations

import logging
from dataclasses import dataclass, field

import httpx
import orjson

from pgrestclient.transport import NO_BODY, RawResponse

logger = logging.getLogger(__name__)


def read_json(content) -> dict:
    try:
        return orjson.loads(content)
    except orjson.JSONDecodeError as e:
        snippet = content[e.pos - 300 : e.pos + 300]
        snippet = snippet[snippet.index(b"\n") :]  # from last newline
        logger.exception("Parsing error: %s\nSnippet: %r", e.args[0], snippet.decode())
        raise


def json_response(body=NO_BODY, status=200, headers=None, single=False) -> RawResponse:
    """Construct what a transport would return for a JSON response."""
    response_headers = httpx.Headers(headers or {})
    if body is not NO_BODY:
        response_headers.setdefault(
            "Content-Type",
            "application/vnd.pgrst.object+json" if single else "application/json",
        )
    return RawResponse(
        status=status,
        status_text=httpx.codes.get_reason_phrase(status),
        headers=response_headers,
        body=body,
    )


@dataclass
class SentRequest:
    method: str
    url: str
    headers: httpx.Headers
    body: object


@dataclass
class FakeTransport:
    """A transport that records the requests, and replies with a prepared response."""

    response: RawResponse = field(default_factory=json_response)
    requests: list[SentRequest] = field(default_factory=list)

    def send(self, method, url, headers, body=NO_BODY) -> RawResponse:
        self.requests.append(SentRequest(method, url, headers, body))
        return self.response

    @property
    def last_request(self) -> SentRequest:
        return self.requests[-1]
