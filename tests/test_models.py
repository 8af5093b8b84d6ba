"""Tests for the shared Pydantic models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from tasc.models import (
    CacheRecord,
    FetchedSpec,
    HTTPMethod,
    Operation,
    TascConfig,
    hash_content,
)


class TestOperation:
    def test_path_params_derived_from_template(self) -> None:
        op = Operation(
            operation_id="getUserPost",
            method=HTTPMethod.GET,
            path_template="/users/{user_id}/posts/{postId}",
        )
        assert op.path_param_names == ["user_id", "postId"]
        assert op.location == "GET /users/{user_id}/posts/{postId}"

    def test_explicit_params_must_match(self) -> None:
        with pytest.raises(ValidationError, match="do not match"):
            Operation(
                operation_id="x",
                method="get",
                path_template="/users/{id}",
                path_param_names=["userId"],
            )

    def test_matching_explicit_params_accepted(self) -> None:
        op = Operation(
            operation_id="x", method="delete", path_template="/a/{b}", path_param_names=["b"]
        )
        assert op.method is HTTPMethod.DELETE

    def test_frozen(self) -> None:
        op = Operation(operation_id="x", method="get", path_template="/a")
        with pytest.raises(ValidationError):
            op.summary = "changed"  # type: ignore[misc]

    def test_method_order(self) -> None:
        assert [m.value for m in HTTPMethod] == ["get", "post", "put", "delete", "patch"]


class TestFetchedSpec:
    def test_from_bytes_hashes_content(self) -> None:
        fetched = FetchedSpec.from_bytes(b'{"openapi": "3.0.0"}', timestamp=1000)
        assert fetched.hash == hash_content(b'{"openapi": "3.0.0"}')
        assert len(fetched.hash) == 64
        assert fetched.to_record() == CacheRecord(hash=fetched.hash, timestamp=1000)

    def test_whitespace_changes_hash(self) -> None:
        assert hash_content(b"{}") != hash_content(b"{ }")


class TestTascConfig:
    def test_rejects_unknown_keys(self) -> None:
        with pytest.raises(ValidationError):
            TascConfig.model_validate({"poll_interval": 10})

    @pytest.mark.parametrize("url", ["http://a:bad/x", "http://[::1/x"])
    def test_rejects_malformed_url(self, url: str) -> None:
        with pytest.raises(ValidationError, match="not a valid URL"):
            TascConfig(api_doc_url=url)

    def test_rejects_non_positive_timeout(self) -> None:
        with pytest.raises(ValidationError):
            TascConfig(fetch_timeout_seconds=0)
