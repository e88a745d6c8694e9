from __future__ import annotations

import django
import httpx
import orjson
import pytest

from pgrestclient import conf
from pgrestclient.client import PostgrestClient
from pgrestclient.query import Query
from tests.utils import FakeTransport


def pytest_configure():
    print(f"Running with Django {django.__version__}, httpx {httpx.__version__}")
    print(f"Using PGRESTCLIENT_BASE_URL={conf.PGRESTCLIENT_BASE_URL}")


@pytest.fixture()
def query() -> Query:
    """The root query that most tests start with."""
    return Query("test_table")


@pytest.fixture()
def query2() -> Query:
    """A second resource, that is embedded in the root query."""
    return Query("test_table2")


@pytest.fixture()
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture()
def client(transport) -> PostgrestClient:
    return PostgrestClient("http://postgrest.test/", transport=transport)


@pytest.fixture()
def mock_server():
    """An httpx transport that answers with the rows of ``mock_server.rows``."""

    class MockServer:
        rows = [{"id": 1, "col1": "test"}]
        requests: list[httpx.Request] = []

        def handler(self, request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            if request.url.path.endswith("/missing"):
                return httpx.Response(
                    404,
                    json={"code": "42P01", "message": 'relation "missing" does not exist'},
                )
            if request.method == "HEAD":
                return httpx.Response(200, headers={"Content-Range": "*/42"})
            return httpx.Response(
                200,
                content=orjson.dumps(self.rows),
                headers={"Content-Type": "application/json; charset=utf-8"},
            )

    server = MockServer()
    server.requests = []
    return server
