"""Runtime client module for tasc.

Provides the dispatcher that generated bindings call into, plus the
mapping and metadata helpers the generated modules build on.

Classes:
    :class:`ApiClient` -- blocking client backed by :class:`httpx.Client`.
    :class:`AsyncApiClient` -- non-blocking client backed by :class:`httpx.AsyncClient`.
    :class:`ApiClientConfig` -- base URL, timeout, default headers and
    cookies, request/response hooks, and an optional transport.

Both clients are context managers and accept the same positional call
shape, decided by :func:`resolve_call_shape`.

Example::

    from tasc.client import ApiClient

    with ApiClient(base_url="https://api.example.com") as api:
        resp = api.get("/users/{id}", {"id": 42})
"""

from tasc.client.dispatcher import (
    ApiClient,
    ApiClientConfig,
    AsyncApiClient,
    CallShape,
    RequestOptions,
    resolve_call_shape,
)
from tasc.client.metadata import TypeMetadata
from tasc.client.operations import BoundOperations, find_operation

__all__ = [
    "ApiClient",
    "ApiClientConfig",
    "AsyncApiClient",
    "BoundOperations",
    "CallShape",
    "RequestOptions",
    "TypeMetadata",
    "find_operation",
    "resolve_call_shape",
]
