"""A client for PostgREST servers.

Queries are described with the immutable :class:`~pgrestclient.query.Query`
builder, and sent with the :class:`~pgrestclient.client.PostgrestClient`.
"""

__version__ = "1.0.0"
