"""Building the request headers of a query.

The query describes the intent (count, returning, conflict resolution, ...),
which is translated into the ``Accept`` and ``Prefer`` headers here.
"""

from __future__ import annotations

import typing

import httpx

from pgrestclient.types import JSON_MEDIA_TYPE, OBJECT_MEDIA_TYPE, Cardinality

if typing.TYPE_CHECKING:
    from pgrestclient.query import QueryData

__all__ = ("build_request_headers", "get_preferences", "READ_METHODS")

#: Methods that read data, these use ``Accept-Profile`` to select a schema.
READ_METHODS = ("GET", "HEAD")

#: The query fields that are written as ``Prefer: <key>=<value>``.
PREFERENCE_FIELDS = {
    "count": "count",
    "return": "returning",
    "resolution": "resolution",
    "missing": "missing",
}

HeaderInput = typing.Union[httpx.Headers, typing.Mapping[str, str], typing.Sequence[tuple[str, str]]]


def get_preferences(data: QueryData) -> list[tuple[str, str]]:
    """Tell which ``Prefer`` entries the query needs, e.g. ``[("count", "exact")]``."""
    preferences = []
    for key, field in PREFERENCE_FIELDS.items():
        value = getattr(data, field)
        if value is not None:
            preferences.append((key, value.value))
    return preferences


def build_request_headers(
    data: QueryData, method: str = "GET", headers: HeaderInput | None = None
) -> httpx.Headers:
    """Build the headers for a request.

    Headers given by the caller are included. They replace the default
    ``Accept`` and ``Content-Type`` values, but a ``Prefer`` entry of the caller
    is dropped when the query sets the same preference (e.g. ``count=``).

    :param data: The state of the query.
    :param method: The HTTP method, which decides how the schema is selected.
    :param headers: Additional headers of the caller.
    """
    items = {
        "accept": [("Accept", JSON_MEDIA_TYPE)],
        "content-type": [("Content-Type", JSON_MEDIA_TYPE)],
    }
    caller_prefer = []
    if headers is not None:
        caller_headers = httpx.Headers(headers)
        for name in caller_headers.keys():
            # Caller headers replace the defaults, repeated names are all kept.
            values = caller_headers.get_list(name, split_commas=name == "prefer")
            if name == "prefer":
                caller_prefer.extend(values)
            else:
                items[name] = [(name, value) for value in values]

    if data.cardinality == Cardinality.ONE:
        items["accept"] = [("Accept", OBJECT_MEDIA_TYPE)]

    if data.schema:
        profile = "Accept-Profile" if method.upper() in READ_METHODS else "Content-Profile"
        items[profile.lower()] = [(profile, data.schema)]

    preferences = get_preferences(data)
    keys = {key for key, _ in preferences}
    prefer = [
        value for value in caller_prefer if value.split("=", 1)[0].strip().lower() not in keys
    ]
    prefer.extend(f"{key}={value}" for key, value in preferences)
    if prefer:
        items["prefer"] = [("Prefer", value) for value in prefer]

    return httpx.Headers([item for values in items.values() for item in values])
