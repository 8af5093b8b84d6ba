"""Canonical Pydantic models shared across all tasc modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The models fall
into three groups:

**Configuration models** -- loaded from the project's ``tasc.json``:
    :class:`Environment`, :class:`OutputsConfig`, :class:`TascConfig`, and the
    derived :class:`ResolvedPaths`.

**Operation table** -- produced by the extractor and baked into the generated
modules:
    :class:`HTTPMethod` and :class:`Operation`.

**Change detection** -- persisted and exchanged by the watcher:
    :class:`CacheRecord` and :class:`FetchedSpec`.

All models use Pydantic v2.
"""

from __future__ import annotations

import enum
import hashlib
import time
from pathlib import Path
from typing import Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field, model_validator

from tasc.path_template import extract_path_params

DEFAULT_API_DOC_URL = "http://localhost:8080/doc/openapi.json"
DEFAULT_POLL_INTERVAL_MS = 5000


# --- Config ---


class Environment(str, enum.Enum):
    """Deployment environment a project config targets."""

    DEVELOPMENT = "development"
    PRODUCTION = "production"
    STAGING = "staging"
    TEST = "test"


class OutputsConfig(BaseModel):
    """Where generated files are written.

    Resolution rules live in :func:`~tasc.paths.resolve_output_path`: when
    ``dir`` is set it wins for every file; otherwise each file uses its
    specific path, falling back to ``.tasc/<default name>``. ``base_path`` is
    prefixed in all cases.
    """

    base_path: str = Field(default="", description="Prefix for all outputs")
    dir: str = Field(
        default="", description="If set, all files go here (overrides individual paths)"
    )
    api_types: str = Field(default="", description="Path of the generated types module")
    api_operations: str = Field(
        default="", description="Path of the generated operations module"
    )
    doc_file: str = Field(default="", description="Where the fetched spec is saved")
    export_path: str = Field(
        default="", description="Path of the ready-to-use client module"
    )
    cache_file: str = Field(
        default="", description="Change-detection cache file used by `tasc watch`"
    )


class TascConfig(BaseModel):
    """Project configuration persisted as ``tasc.json`` (or ``tasc.yaml``).

    Loaded by :func:`~tasc.config.load_config`. Unknown keys are rejected
    so typos surface as :class:`~tasc.exceptions.ConfigError` at startup
    rather than as silently ignored settings.

    Example::

        TascConfig(
            api_doc_url="https://api.example.com/openapi.json",
            poll_interval_ms=2000,
            outputs=OutputsConfig(dir="generated"),
        )
    """

    model_config = ConfigDict(extra="forbid")

    api_doc_url: str = Field(
        default=DEFAULT_API_DOC_URL, description="API documentation endpoint URL"
    )
    environment: Environment = Environment.DEVELOPMENT
    poll_interval_ms: int = Field(
        default=DEFAULT_POLL_INTERVAL_MS,
        gt=0,
        description="Delay between watch cycles in milliseconds",
    )
    fetch_timeout_seconds: float = Field(
        default=30.0, gt=0, description="Upper bound for a single spec fetch"
    )
    regenerate_command: Optional[list[str]] = Field(
        default=None,
        description="Command run by `tasc watch` to regenerate; in-process when unset",
    )
    outputs: OutputsConfig = Field(default_factory=OutputsConfig)

    @model_validator(mode="after")
    def _check_api_doc_url(self) -> TascConfig:
        try:
            httpx.URL(self.api_doc_url)
        except httpx.InvalidURL as exc:
            raise ValueError(
                f"api_doc_url {self.api_doc_url!r} is not a valid URL: {exc}"
            ) from exc
        return self


class ResolvedPaths(BaseModel):
    """Absolute locations of every file tasc reads or writes."""

    api_types: Path
    api_operations: Path
    doc_file: Path
    export_path: Path
    cache_file: Path


# --- Operation table ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods tasc generates bindings for.

    Declaration order is the order operations are emitted for a single path.
    """

    GET = "get"
    POST = "post"
    PUT = "put"
    DELETE = "delete"
    PATCH = "patch"


class Operation(BaseModel):
    """One method + path pair from the API description, keyed by ``operation_id``.

    ``path_param_names`` is always derived from ``path_template``; passing it
    explicitly is allowed (the generated modules do) but it must agree with
    the template.
    """

    model_config = ConfigDict(frozen=True)

    operation_id: str
    method: HTTPMethod
    path_template: str
    path_param_names: list[str] = Field(default_factory=list)
    has_request_body: bool = False
    has_query_params: bool = False
    summary: str = ""
    description: str = ""
    tags: list[str] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _derive_path_params(cls, data: object) -> object:
        if isinstance(data, dict) and "path_template" in data:
            derived = extract_path_params(str(data["path_template"]))
            given = data.get("path_param_names")
            if given is None:
                data = {**data, "path_param_names": derived}
            elif list(given) != derived:
                raise ValueError(
                    f"path_param_names {list(given)!r} do not match template "
                    f"{data['path_template']!r} (expected {derived!r})"
                )
        return data

    @property
    def location(self) -> str:
        """``"METHOD /path"`` label used in logs and error messages."""
        return f"{self.method.value.upper()} {self.path_template}"


# --- Change detection ---


def hash_content(content: bytes) -> str:
    """Return the hex SHA-256 digest of *content*."""
    return hashlib.sha256(content).hexdigest()


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


class CacheRecord(BaseModel):
    """Persisted change-detection state: the last observed spec hash."""

    hash: str
    timestamp: int = Field(description="Epoch milliseconds when the hash was observed")


class FetchedSpec(BaseModel):
    """Raw spec bytes returned by a spec source together with their digest."""

    content: bytes
    hash: str
    timestamp: int

    @classmethod
    def from_bytes(cls, content: bytes, timestamp: Optional[int] = None) -> FetchedSpec:
        """Hash *content* and stamp it with *timestamp* (defaults to now)."""
        return cls(
            content=content,
            hash=hash_content(content),
            timestamp=now_ms() if timestamp is None else timestamp,
        )

    def to_record(self) -> CacheRecord:
        """The :class:`CacheRecord` to persist when this fetch is new."""
        return CacheRecord(hash=self.hash, timestamp=self.timestamp)
