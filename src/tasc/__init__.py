"""tasc -- Typed API Schema Client.

This package turns an OpenAPI description into a callable Python client and
keeps it in sync with the API as it evolves. Users create a ``tasc.json``
pointing at the API's spec URL, then generate once or watch for changes.

Typical workflow::

    tasc init                 # create tasc.json
    tasc generate             # fetch the API description, write .tasc/*.py
    tasc watch                # regenerate whenever it changes

The generated ``operations`` module exposes one method per ``operationId``
on top of :class:`~tasc.client.ApiClient`, which can also be used directly::

    from tasc import ApiClient

    with ApiClient(base_url="https://api.example.com") as api:
        api.get("/users/{id}", {"id": 42})

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models shared across the entire package.
    config: Project configuration discovery and loading.
    path_template: Placeholder extraction and interpolation.
    exceptions: Exception hierarchy with exit-code mapping.
    output: stdout/stderr formatting system with Rich support.
"""

from tasc.client import ApiClient, ApiClientConfig, AsyncApiClient

__version__ = "0.1.0"

__all__ = ["ApiClient", "ApiClientConfig", "AsyncApiClient", "__version__"]
