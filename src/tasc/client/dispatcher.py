"""Runtime dispatcher: turn a path template plus positional arguments into an HTTP call.

Every request made through tasc, whether via a generated binding
(``api.op.getUserById({"id": 1})``) or a path-level helper
(``api.get("/users/{id}", {"id": 1})``), goes through the same two steps:

1. :func:`resolve_call_shape` decides what each positional argument means.
   A template containing ``{`` takes a path-parameters mapping first; a
   body-bearing call then takes the body; the call options always come
   last.
2. The client interpolates the template, merges the options, and sends the
   request through :mod:`httpx`. The :class:`httpx.Response` is returned
   exactly as received -- status handling and retries belong to the caller
   or to hooks installed on the client.

:class:`ApiClient` and :class:`AsyncApiClient` share all argument handling
through :class:`_DispatcherBase`; only the send step differs.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    Mapping,
    NamedTuple,
    Optional,
    Sequence,
    TypedDict,
    Union,
)

import httpx

from tasc.exceptions import InvalidUsageError
from tasc.models import HTTPMethod, Operation
from tasc.path_template import extract_path_params, has_path_params, interpolate_path, to_camel_case

if TYPE_CHECKING:
    from tasc.client.operations import BoundOperations

PathValue = Union[str, int, float, bool]


class RequestOptions(TypedDict, total=False):
    """Per-call options accepted as the last positional argument of any call."""

    headers: Mapping[str, str]
    params: Mapping[str, Any]
    cookies: Mapping[str, str]
    timeout: Optional[float]
    follow_redirects: bool
    extensions: dict[str, Any]


ALLOWED_OPTION_KEYS = frozenset(RequestOptions.__annotations__)


@dataclass
class ApiClientConfig:
    """Settings for :class:`ApiClient` and :class:`AsyncApiClient`.

    ``request_hooks`` and ``response_hooks`` are installed as httpx
    ``event_hooks``: request hooks may mutate the outgoing
    :class:`httpx.Request` (e.g. to add an ``Authorization`` header) and
    response hooks see every response before it is returned. For
    :class:`AsyncApiClient` the hooks must be coroutine functions.

    ``transport`` replaces the network layer, typically with
    :class:`httpx.MockTransport` in tests.
    """

    base_url: str = ""
    timeout: Optional[float] = 30.0
    headers: dict[str, str] = field(default_factory=dict)
    cookies: dict[str, str] = field(default_factory=dict)
    follow_redirects: bool = False
    request_hooks: list[Callable[..., Any]] = field(default_factory=list)
    response_hooks: list[Callable[..., Any]] = field(default_factory=list)
    transport: Optional[Any] = None

    def httpx_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for constructing the underlying httpx client."""
        kwargs: dict[str, Any] = {
            "base_url": self.base_url,
            "timeout": self.timeout,
            "headers": dict(self.headers),
            "cookies": dict(self.cookies),
            "follow_redirects": self.follow_redirects,
            "event_hooks": {
                "request": list(self.request_hooks),
                "response": list(self.response_hooks),
            },
        }
        if self.transport is not None:
            kwargs["transport"] = self.transport
        return kwargs


class CallShape(NamedTuple):
    """The meaning of a call's positional arguments."""

    path_params: Optional[Mapping[str, Any]]
    body: Any
    options: Optional[Mapping[str, Any]]


def resolve_call_shape(template: str, has_body: bool, args: Sequence[Any]) -> CallShape:
    """Assign positional *args* to path params, body, and options.

    The order is fixed: path params (only when *template* contains ``{``),
    then the body (only when *has_body*), then options. Trailing arguments
    may be omitted and come back as ``None``.

    Args:
        template: The path template of the target operation.
        has_body: Whether the call accepts a request body.
        args: The positional arguments as given by the caller.

    Raises:
        InvalidUsageError: If more arguments were given than the shape allows.

    Example::

        >>> resolve_call_shape("/users/{id}", True, [{"id": 1}, {"name": "x"}])
        CallShape(path_params={'id': 1}, body={'name': 'x'}, options=None)
    """
    slots = ["path_params"] if has_path_params(template) else []
    if has_body:
        slots.append("body")
    slots.append("options")

    if len(args) > len(slots):
        raise InvalidUsageError(
            f"Too many arguments for {template}: expected at most {len(slots)} "
            f"({', '.join(slots)}), got {len(args)}"
        )

    values: dict[str, Any] = dict(zip(slots, args))
    return CallShape(
        path_params=values.get("path_params"),
        body=values.get("body"),
        options=values.get("options"),
    )


def _path_values(template: str, given: Any) -> dict[str, Any]:
    """Map each placeholder of *template* to its value in *given*.

    A value may be keyed by the placeholder name or by its camelCase form,
    which is how the generated ``PathParams`` types spell it.
    """
    if given is None:
        given = {}
    if not isinstance(given, Mapping):
        raise InvalidUsageError(
            f"Path params for {template} must be a mapping, got {type(given).__name__}"
        )
    values: dict[str, Any] = {}
    for name in extract_path_params(template):
        value = given.get(name)
        if value is None:
            value = given.get(to_camel_case(name))
        values[name] = value
    return values


def _check_options(options: Any) -> dict[str, Any]:
    if options is None:
        return {}
    if not isinstance(options, Mapping):
        raise InvalidUsageError(
            f"Request options must be a mapping, got {type(options).__name__}"
        )
    unknown = sorted(set(options) - ALLOWED_OPTION_KEYS)
    if unknown:
        raise InvalidUsageError(
            f"Unknown request option(s): {', '.join(unknown)}. "
            f"Allowed: {', '.join(sorted(ALLOWED_OPTION_KEYS))}"
        )
    return dict(options)


class _DispatcherBase:
    """Argument handling shared by the sync and async clients."""

    def __init__(self, config: Optional[ApiClientConfig] = None, **overrides: Any) -> None:
        config = config or ApiClientConfig()
        if overrides:
            config = dataclasses.replace(config, **overrides)
        self.config = config
        self._operations: Optional[BoundOperations] = None

    # ------------------------------------------------------------------ #
    # Generated operations
    # ------------------------------------------------------------------ #

    @property
    def op(self) -> BoundOperations:
        """Operation bindings attached with :meth:`attach_operations`.

        Empty until a generated ``ApiOperations`` class is attached.
        """
        if self._operations is None:
            from tasc.client.operations import BoundOperations

            self._operations = BoundOperations(self)
        return self._operations

    def attach_operations(self, operations_cls: type[BoundOperations]) -> BoundOperations:
        """Bind a generated ``ApiOperations`` class to this client and expose it as :attr:`op`."""
        self._operations = operations_cls(self)
        return self._operations

    # ------------------------------------------------------------------ #
    # Request building
    # ------------------------------------------------------------------ #

    def build_request_args(
        self,
        method: Union[HTTPMethod, str],
        template: str,
        has_body: bool,
        args: Sequence[Any],
    ) -> tuple[str, str, dict[str, Any]]:
        """Resolve ``(method, url, send_kwargs)`` for a call.

        All validation happens here, before any I/O, so a missing path
        parameter never reaches the network.

        Raises:
            InvalidUsageError: For bad shapes or options.
            MissingPathParamError: If a placeholder has no value.
        """
        shape = resolve_call_shape(template, has_body, args)
        options = _check_options(shape.options)

        if has_path_params(template):
            url = interpolate_path(template, _path_values(template, shape.path_params))
        else:
            url = template

        kwargs: dict[str, Any] = {}
        if shape.body is not None:
            if isinstance(shape.body, (bytes, str)):
                kwargs["content"] = shape.body
            else:
                kwargs["json"] = shape.body
        if "headers" in options:
            kwargs["headers"] = dict(options["headers"])
        if "params" in options:
            kwargs["params"] = options["params"]
        if "cookies" in options:
            kwargs.setdefault("headers", {})["Cookie"] = self._cookie_header(options["cookies"])
        for key in ("timeout", "follow_redirects", "extensions"):
            if key in options:
                kwargs[key] = options[key]

        verb = method.value if isinstance(method, HTTPMethod) else str(method)
        return verb.upper(), url, kwargs

    def _client_cookies(self) -> Mapping[str, str]:
        raise NotImplementedError

    def _cookie_header(self, extra: Mapping[str, str]) -> str:
        # Per-call cookies go out as a header merged over the client's jar,
        # since httpx no longer accepts cookies on individual requests.
        merged = dict(self._client_cookies())
        merged.update({str(k): str(v) for k, v in extra.items()})
        return "; ".join(f"{k}={v}" for k, v in merged.items())


class ApiClient(_DispatcherBase):
    """Blocking client that dispatches template-based calls through :class:`httpx.Client`.

    The underlying connection pool is opened on construction; use the client
    as a context manager (or call :meth:`close`) to release it.

    Args:
        config: Client settings. Defaults to :class:`ApiClientConfig()`.
        **overrides: Individual :class:`ApiClientConfig` fields, applied over
            *config*.

    Example::

        with ApiClient(base_url="https://api.example.com") as api:
            api.get("/users/{id}", {"id": 42})
            api.post("/users", {"name": "Ada"}, {"headers": {"X-Trace": "1"}})
    """

    def __init__(self, config: Optional[ApiClientConfig] = None, **overrides: Any) -> None:
        super().__init__(config, **overrides)
        self._client = httpx.Client(**self.config.httpx_kwargs())

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> ApiClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying :class:`httpx.Client`."""
        self._client.close()

    @property
    def http(self) -> httpx.Client:
        """The wrapped :class:`httpx.Client`."""
        return self._client

    def _client_cookies(self) -> Mapping[str, str]:
        return dict(self._client.cookies.items())

    # ------------------------------------------------------------------ #
    # Dispatch
    # ------------------------------------------------------------------ #

    def dispatch(self, operation: Operation, *args: Any) -> httpx.Response:
        """Call *operation* with positional *args* shaped by its template and body flag."""
        return self.request(
            operation.method, operation.path_template, operation.has_request_body, *args
        )

    def request(
        self,
        method: Union[HTTPMethod, str],
        template: str,
        has_body: bool,
        *args: Any,
    ) -> httpx.Response:
        """Send one request; see :func:`resolve_call_shape` for the meaning of *args*."""
        verb, url, kwargs = self.build_request_args(method, template, has_body, args)
        return self._client.request(verb, url, **kwargs)

    def get(self, url: str, *args: Any) -> httpx.Response:
        """``GET url`` with optional ``(path_params, options)``."""
        return self.request(HTTPMethod.GET, url, False, *args)

    def delete(self, url: str, *args: Any) -> httpx.Response:
        """``DELETE url`` with optional ``(path_params, options)``."""
        return self.request(HTTPMethod.DELETE, url, False, *args)

    def post(self, url: str, *args: Any) -> httpx.Response:
        """``POST url`` with optional ``(path_params, body, options)``."""
        return self.request(HTTPMethod.POST, url, True, *args)

    def put(self, url: str, *args: Any) -> httpx.Response:
        """``PUT url`` with optional ``(path_params, body, options)``."""
        return self.request(HTTPMethod.PUT, url, True, *args)

    def patch(self, url: str, *args: Any) -> httpx.Response:
        """``PATCH url`` with optional ``(path_params, body, options)``."""
        return self.request(HTTPMethod.PATCH, url, True, *args)


class AsyncApiClient(_DispatcherBase):
    """Non-blocking counterpart of :class:`ApiClient` backed by :class:`httpx.AsyncClient`.

    Every request method is a coroutine; argument handling is identical.

    Example::

        async with AsyncApiClient(base_url="https://api.example.com") as api:
            response = await api.get("/users")
    """

    def __init__(self, config: Optional[ApiClientConfig] = None, **overrides: Any) -> None:
        super().__init__(config, **overrides)
        self._client = httpx.AsyncClient(**self.config.httpx_kwargs())

    async def __aenter__(self) -> AsyncApiClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying :class:`httpx.AsyncClient`."""
        await self._client.aclose()

    @property
    def http(self) -> httpx.AsyncClient:
        """The wrapped :class:`httpx.AsyncClient`."""
        return self._client

    def _client_cookies(self) -> Mapping[str, str]:
        return dict(self._client.cookies.items())

    async def dispatch(self, operation: Operation, *args: Any) -> httpx.Response:
        """Call *operation*; see :meth:`ApiClient.dispatch`."""
        return await self.request(
            operation.method, operation.path_template, operation.has_request_body, *args
        )

    async def request(
        self,
        method: Union[HTTPMethod, str],
        template: str,
        has_body: bool,
        *args: Any,
    ) -> httpx.Response:
        """Send one request; see :func:`resolve_call_shape`."""
        verb, url, kwargs = self.build_request_args(method, template, has_body, args)
        return await self._client.request(verb, url, **kwargs)

    async def get(self, url: str, *args: Any) -> httpx.Response:
        """``GET url`` with optional ``(path_params, options)``."""
        return await self.request(HTTPMethod.GET, url, False, *args)

    async def delete(self, url: str, *args: Any) -> httpx.Response:
        """``DELETE url`` with optional ``(path_params, options)``."""
        return await self.request(HTTPMethod.DELETE, url, False, *args)

    async def post(self, url: str, *args: Any) -> httpx.Response:
        """``POST url`` with optional ``(path_params, body, options)``."""
        return await self.request(HTTPMethod.POST, url, True, *args)

    async def put(self, url: str, *args: Any) -> httpx.Response:
        """``PUT url`` with optional ``(path_params, body, options)``."""
        return await self.request(HTTPMethod.PUT, url, True, *args)

    async def patch(self, url: str, *args: Any) -> httpx.Response:
        """``PATCH url`` with optional ``(path_params, body, options)``."""
        return await self.request(HTTPMethod.PATCH, url, True, *args)
