"""Tests for TypeMetadata lookups and BoundOperations."""

from __future__ import annotations

from typing import Any

import pytest

from tasc.client import BoundOperations, TypeMetadata, find_operation
from tasc.models import HTTPMethod, Operation
from tasc.parser import extract_type_metadata


@pytest.fixture
def metadata(users_spec: dict[str, Any]) -> TypeMetadata:
    return TypeMetadata(extract_type_metadata(users_spec))


class TestTypeMetadata:
    def test_mapping_interface(self, metadata: TypeMetadata) -> None:
        assert "/users" in metadata
        assert len(metadata) == 4
        assert set(metadata["/users"]) == {"get", "post"}

    def test_request_body(self, metadata: TypeMetadata) -> None:
        assert metadata.request_body("/users", "POST")["required"] == ["name"]
        assert metadata.request_body("/users", HTTPMethod.GET) is None

    def test_default_response_is_200(self, metadata: TypeMetadata) -> None:
        assert metadata.response("/users/{id}", "get")["type"] == "object"

    def test_default_response_falls_back_to_first_2xx(self, metadata: TypeMetadata) -> None:
        schema = metadata.response("/users", "post")
        assert schema["properties"]["id"] == {"type": "integer"}

    def test_explicit_status(self, metadata: TypeMetadata) -> None:
        assert metadata.response("/users", "post", 400) is None
        with pytest.raises(KeyError):
            metadata.response("/users", "post", 500)

    def test_no_2xx_returns_none(self) -> None:
        meta = TypeMetadata(
            {"/a": {"get": {"parameters": {}, "request_body": None, "responses": {"404": None}}}}
        )
        assert meta.response("/a", "get") is None

    def test_status_codes(self, metadata: TypeMetadata) -> None:
        assert metadata.status_codes("/users/{id}", "get") == ["200", "404"]

    def test_params(self, metadata: TypeMetadata) -> None:
        assert metadata.query_params("/users", "get") == {"limit": {"type": "integer"}}
        assert metadata.path_params("/users/{user_id}/posts/{postId}", "get") == {
            "user_id": {"type": "string"},
            "postId": {"type": "integer"},
        }
        assert metadata.query_params("/users/{id}", "delete") == {}

    def test_unknown_method(self, metadata: TypeMetadata) -> None:
        with pytest.raises(KeyError, match="PATCH /users"):
            metadata.operation("/users", "patch")

    def test_unknown_path(self, metadata: TypeMetadata) -> None:
        with pytest.raises(KeyError):
            metadata.operation("/nope", "get")


class _Ops(BoundOperations):
    operations = {
        "list-things": Operation(operation_id="list-things", method="get", path_template="/things"),
    }
    method_names = {"list-things": "list_things"}

    def list_things(self, options=None):
        return ("dispatched", options)


class TestBoundOperations:
    def test_lookup_by_operation_id(self) -> None:
        ops = _Ops(client=object())
        assert ops["list-things"]() == ("dispatched", None)
        assert list(ops) == ["list-things"]
        assert len(ops) == 1
        assert repr(ops) == "<_Ops 1 operations>"

    def test_unknown_id(self) -> None:
        with pytest.raises(KeyError):
            _Ops(client=None)["nope"]

    def test_find(self) -> None:
        ops = _Ops(client=None)
        assert ops.find("/things", "GET").operation_id == "list-things"
        assert ops.find("/things", HTTPMethod.POST) is None

    def test_find_operation_function(self, users_operations: list[Operation]) -> None:
        table = {op.operation_id: op for op in users_operations}
        assert find_operation(table, "/users/{id}", "delete").operation_id == "deleteUser"
        assert find_operation(table, "/missing", "get") is None
