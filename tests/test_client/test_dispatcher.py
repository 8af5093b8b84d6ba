"""Tests for the runtime dispatcher and both client flavours."""

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest

from tasc.client.dispatcher import (
    ApiClient,
    ApiClientConfig,
    AsyncApiClient,
    CallShape,
    resolve_call_shape,
)
from tasc.exceptions import InvalidUsageError, MissingPathParamError
from tasc.models import HTTPMethod, Operation

BASE_URL = "https://api.example.com"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class Recorder:
    """httpx handler that records requests and answers with JSON."""

    def __init__(self, status_code: int = 200, payload: Any = None) -> None:
        self.requests: list[httpx.Request] = []
        self.status_code = status_code
        self.payload = {"ok": True} if payload is None else payload

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json=self.payload)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def client(recorder: Recorder):
    with ApiClient(base_url=BASE_URL, transport=httpx.MockTransport(recorder)) as api:
        yield api


# ---------------------------------------------------------------------------
# resolve_call_shape
# ---------------------------------------------------------------------------


class TestResolveCallShape:
    def test_path_params_body_options(self) -> None:
        shape = resolve_call_shape("/users/{id}", True, [{"id": 1}, {"name": "x"}, {"timeout": 1}])
        assert shape == CallShape({"id": 1}, {"name": "x"}, {"timeout": 1})

    def test_body_first_without_placeholders(self) -> None:
        shape = resolve_call_shape("/users", True, [{"name": "x"}])
        assert shape == CallShape(None, {"name": "x"}, None)

    def test_options_only(self) -> None:
        shape = resolve_call_shape("/users", False, [{"params": {"limit": 5}}])
        assert shape == CallShape(None, None, {"params": {"limit": 5}})

    def test_path_params_then_options_without_body(self) -> None:
        shape = resolve_call_shape("/users/{id}", False, [{"id": 1}, {"headers": {}}])
        assert shape == CallShape({"id": 1}, None, {"headers": {}})

    def test_no_args(self) -> None:
        assert resolve_call_shape("/users/{id}", True, []) == CallShape(None, None, None)

    def test_too_many_args(self) -> None:
        with pytest.raises(InvalidUsageError, match="Too many arguments"):
            resolve_call_shape("/users", False, [{}, {}])


# ---------------------------------------------------------------------------
# ApiClient
# ---------------------------------------------------------------------------


class TestApiClientRequests:
    def test_get_with_path_params(self, client: ApiClient, recorder: Recorder) -> None:
        response = client.get("/users/{id}", {"id": 42})
        assert response.status_code == 200
        assert recorder.last.method == "GET"
        assert str(recorder.last.url) == f"{BASE_URL}/users/42"

    def test_camel_case_keys_accepted(self, client: ApiClient, recorder: Recorder) -> None:
        client.get("/users/{user_id}/posts/{post_id}", {"userId": "a b", "postId": 7})
        assert recorder.last.url.raw_path == b"/users/a%20b/posts/7"

    def test_post_json_body(self, client: ApiClient, recorder: Recorder) -> None:
        client.post("/users", {"name": "Ada"})
        assert recorder.last.method == "POST"
        assert json.loads(recorder.last.content) == {"name": "Ada"}
        assert recorder.last.headers["content-type"] == "application/json"

    def test_raw_body(self, client: ApiClient, recorder: Recorder) -> None:
        client.put("/files/{name}", {"name": "a.txt"}, b"raw-bytes")
        assert recorder.last.content == b"raw-bytes"
        assert str(recorder.last.url).endswith("/files/a.txt")

    def test_delete_without_body(self, client: ApiClient, recorder: Recorder) -> None:
        client.delete("/users/{id}", {"id": 1})
        assert recorder.last.method == "DELETE"
        assert recorder.last.content == b""

    def test_patch(self, client: ApiClient, recorder: Recorder) -> None:
        client.patch("/users/{id}", {"id": 1}, {"name": "B"})
        assert recorder.last.method == "PATCH"

    def test_options_headers_and_params(self, client: ApiClient, recorder: Recorder) -> None:
        client.get("/users", {"headers": {"X-Trace": "abc"}, "params": {"limit": 5}})
        assert recorder.last.headers["x-trace"] == "abc"
        assert recorder.last.url.params["limit"] == "5"

    def test_option_cookies_merge_with_client_cookies(self, recorder: Recorder) -> None:
        with ApiClient(
            base_url=BASE_URL,
            cookies={"session": "s1"},
            transport=httpx.MockTransport(recorder),
        ) as api:
            api.get("/me", {"cookies": {"theme": "dark"}})
        cookie = recorder.last.headers["cookie"]
        assert "session=s1" in cookie
        assert "theme=dark" in cookie

    def test_unknown_option_rejected(self, client: ApiClient, recorder: Recorder) -> None:
        with pytest.raises(InvalidUsageError, match="withCredentials"):
            client.get("/users", {"withCredentials": True})
        assert recorder.requests == []

    def test_missing_path_param_never_sends(self, client: ApiClient, recorder: Recorder) -> None:
        with pytest.raises(MissingPathParamError) as exc_info:
            client.get("/users/{id}/posts/{postId}", {"id": 1})
        assert exc_info.value.missing == ["postId"]
        assert recorder.requests == []

    def test_path_params_must_be_mapping(self, client: ApiClient) -> None:
        with pytest.raises(InvalidUsageError, match="mapping"):
            client.get("/users/{id}", 42)

    def test_error_status_is_returned(self) -> None:
        recorder = Recorder(status_code=404, payload={"detail": "nope"})
        with ApiClient(base_url=BASE_URL, transport=httpx.MockTransport(recorder)) as api:
            response = api.get("/users/{id}", {"id": 9})
        assert response.status_code == 404
        assert response.json() == {"detail": "nope"}

    def test_dispatch_uses_operation_shape(self, client: ApiClient, recorder: Recorder) -> None:
        op = Operation(
            operation_id="updateUser",
            method=HTTPMethod.PUT,
            path_template="/users/{id}",
            has_request_body=True,
        )
        client.dispatch(op, {"id": 3}, {"name": "C"}, {"headers": {"X-A": "1"}})
        assert recorder.last.method == "PUT"
        assert str(recorder.last.url) == f"{BASE_URL}/users/3"
        assert json.loads(recorder.last.content) == {"name": "C"}
        assert recorder.last.headers["x-a"] == "1"


class TestApiClientConfig:
    def test_overrides_apply_over_config(self) -> None:
        config = ApiClientConfig(base_url="http://a", timeout=5)
        api = ApiClient(config, timeout=1)
        try:
            assert api.config.base_url == "http://a"
            assert api.config.timeout == 1
            assert config.timeout == 5
        finally:
            api.close()

    def test_default_headers_sent(self, recorder: Recorder) -> None:
        with ApiClient(
            base_url=BASE_URL,
            headers={"Authorization": "Bearer t"},
            transport=httpx.MockTransport(recorder),
        ) as api:
            api.get("/me")
        assert recorder.last.headers["authorization"] == "Bearer t"

    def test_hooks_see_traffic(self, recorder: Recorder) -> None:
        seen: list[int] = []

        def add_token(request: httpx.Request) -> None:
            request.headers["Authorization"] = "Bearer hook"

        def record_status(response: httpx.Response) -> None:
            seen.append(response.status_code)

        with ApiClient(
            base_url=BASE_URL,
            request_hooks=[add_token],
            response_hooks=[record_status],
            transport=httpx.MockTransport(recorder),
        ) as api:
            api.get("/me")
        assert recorder.last.headers["authorization"] == "Bearer hook"
        assert seen == [200]

    def test_op_is_empty_until_attached(self, client: ApiClient) -> None:
        assert len(client.op) == 0
        assert list(client.op) == []


# ---------------------------------------------------------------------------
# AsyncApiClient
# ---------------------------------------------------------------------------


class TestAsyncApiClient:
    @pytest.mark.parametrize("name", ["get", "delete", "post", "put", "patch"])
    def test_helpers_documented_like_sync(self, name: str) -> None:
        assert getattr(AsyncApiClient, name).__doc__
        assert getattr(AsyncApiClient, name).__doc__ == getattr(ApiClient, name).__doc__

    @pytest.mark.asyncio
    async def test_get_and_post(self, recorder: Recorder) -> None:
        async with AsyncApiClient(
            base_url=BASE_URL, transport=httpx.MockTransport(recorder)
        ) as api:
            await api.get("/users/{id}", {"id": 5})
            await api.post("/users", {"name": "Ada"})
        first, second = recorder.requests
        assert str(first.url) == f"{BASE_URL}/users/5"
        assert second.method == "POST"
        assert json.loads(second.content) == {"name": "Ada"}

    @pytest.mark.asyncio
    async def test_missing_path_param(self, recorder: Recorder) -> None:
        async with AsyncApiClient(
            base_url=BASE_URL, transport=httpx.MockTransport(recorder)
        ) as api:
            with pytest.raises(MissingPathParamError):
                await api.delete("/users/{id}")
        assert recorder.requests == []

    @pytest.mark.asyncio
    async def test_async_hooks(self, recorder: Recorder) -> None:
        async def add_header(request: httpx.Request) -> None:
            request.headers["X-Async"] = "yes"

        async with AsyncApiClient(
            base_url=BASE_URL,
            request_hooks=[add_header],
            transport=httpx.MockTransport(recorder),
        ) as api:
            await api.put("/users/{id}", {"id": 1}, {"name": "B"})
        assert recorder.last.headers["x-async"] == "yes"
