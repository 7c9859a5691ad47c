"""Request layer for burstsms.

Turns an endpoint path plus typed parameters into one authenticated GET
request and interprets the reply.

Classes:
    :class:`RequestEngine` -- blocking engine backed by :class:`httpx.Client`.
    :class:`AsyncRequestEngine` -- non-blocking engine backed by :class:`httpx.AsyncClient`.

Example::

    from burstsms.client import RequestEngine

    with RequestEngine(config) as engine:
        outcome = engine.execute("get-list.json", [("list_id", 42)])
"""

from burstsms.client.engine import AsyncRequestEngine, RequestEngine, build_request, unwrap
from burstsms.client.params import build_query, field_param_name, serialize
from burstsms.client.response import classify_error

__all__ = [
    "AsyncRequestEngine",
    "RequestEngine",
    "build_query",
    "build_request",
    "classify_error",
    "field_param_name",
    "serialize",
    "unwrap",
]
